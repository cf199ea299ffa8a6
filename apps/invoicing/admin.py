from django.contrib import admin
from .models import Invoice, InvoiceLine, SupplierInvoice, SupplierInvoiceLine, SupplierInvoiceEntry


class InvoiceLineInline(admin.TabularInline):
    model = InvoiceLine
    extra = 0
    readonly_fields = ['entry_item', 'entry_serial_number', 'product', 'quantity', 'rate_per_quantity', 'sub_total']


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ['invoice_number', 'buyer', 'nett_amount', 'paid_amount', 'formula_version', 'created_at']
    list_filter = ['formula_version']
    search_fields = ['invoice_number', 'buyer__buyer_name']
    readonly_fields = ['nett_amount', 'paid_amount', 'total_amount', 'total_quantities']
    inlines = [InvoiceLineInline]


class SupplierInvoiceLineInline(admin.TabularInline):
    model = SupplierInvoiceLine
    extra = 0


class SupplierInvoiceEntryInline(admin.TabularInline):
    model = SupplierInvoiceEntry
    extra = 0


@admin.register(SupplierInvoice)
class SupplierInvoiceAdmin(admin.ModelAdmin):
    list_display = ['invoice_number', 'supplier', 'gross_total', 'commission_amount', 'nett_amount', 'paid_amount', 'status']
    list_filter = ['status']
    search_fields = ['invoice_number', 'supplier__supplier_name']
    readonly_fields = ['gross_total', 'commission_amount', 'nett_amount', 'final_payable', 'paid_amount']
    inlines = [SupplierInvoiceEntryInline, SupplierInvoiceLineInline]
