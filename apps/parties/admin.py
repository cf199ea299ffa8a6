from django.contrib import admin
from simple_history.admin import SimpleHistoryAdmin
from .models import Buyer, Supplier, Product


@admin.register(Buyer)
class BuyerAdmin(SimpleHistoryAdmin):
    list_display = ['buyer_name', 'token_number', 'place', 'outstanding']
    search_fields = ['buyer_name', 'display_name', 'alias', 'token_number']
    readonly_fields = ['outstanding', 'created_at', 'updated_at']


@admin.register(Supplier)
class SupplierAdmin(SimpleHistoryAdmin):
    list_display = ['supplier_name', 'place', 'outstanding']
    search_fields = ['supplier_name', 'display_name']
    readonly_fields = ['outstanding', 'created_at', 'updated_at']


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['product_name', 'display_name']
    search_fields = ['product_name', 'display_name']
