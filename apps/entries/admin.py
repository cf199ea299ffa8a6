from django.contrib import admin
from .models import Entry, EntryItem


class EntryItemInline(admin.TabularInline):
    model = EntryItem
    extra = 0
    readonly_fields = ['invoice', 'supplier_invoice']


@admin.register(Entry)
class EntryAdmin(admin.ModelAdmin):
    list_display = ['serial_number', 'supplier', 'entry_date', 'total_quantities', 'total_amount', 'status']
    list_filter = ['status', 'entry_date']
    search_fields = ['serial_number', 'supplier__supplier_name']
    readonly_fields = ['status', 'version', 'last_sub_serial_number']
    inlines = [EntryItemInline]
