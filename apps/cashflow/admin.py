from django.contrib import admin
from .models import CashFlowTransaction


@admin.register(CashFlowTransaction)
class CashFlowTransactionAdmin(admin.ModelAdmin):
    list_display = ['date', 'type', 'category', 'entity_name', 'amount', 'discount', 'method', 'to_method']
    list_filter = ['type', 'method', 'category']
    search_fields = ['entity_name', 'reference', 'description']
    date_hierarchy = 'date'
