# apps/api/v1/serializers/invoicing.py
"""
Serializers for buyer invoices and supplier settlements.
"""
from rest_framework import serializers
from apps.cashflow.models import CashFlowTransaction
from apps.invoicing.models import Invoice, InvoiceLine, SupplierInvoice, SupplierInvoiceLine

MONEY = dict(max_digits=14, decimal_places=2)


class InvoiceLineSerializer(serializers.ModelSerializer):
    """Serializer for InvoiceLine model."""

    class Meta:
        model = InvoiceLine
        fields = [
            'id', 'entry_item', 'entry_serial_number', 'sub_serial_number',
            'product', 'product_name', 'quantity', 'gross_weight', 'shute_weight',
            'nett_weight', 'rate_per_quantity', 'sub_total',
        ]
        read_only_fields = fields


class InvoiceListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for Invoice list views."""
    buyer_name = serializers.CharField(source='buyer.buyer_name', read_only=True)
    balance_due = serializers.DecimalField(**MONEY, read_only=True)

    class Meta:
        model = Invoice
        fields = [
            'id', 'invoice_number', 'buyer', 'buyer_name', 'nett_amount',
            'paid_amount', 'balance_due', 'created_at',
        ]
        read_only_fields = fields


class InvoiceDetailSerializer(serializers.ModelSerializer):
    """Detailed serializer for Invoice with nested lines."""
    buyer_name = serializers.CharField(source='buyer.buyer_name', read_only=True)
    receivable_amount = serializers.DecimalField(**MONEY, read_only=True)
    balance_due = serializers.DecimalField(**MONEY, read_only=True)
    lines = InvoiceLineSerializer(many=True, read_only=True)

    class Meta:
        model = Invoice
        fields = [
            'id', 'invoice_number', 'buyer', 'buyer_name', 'total_quantities',
            'total_amount', 'wages', 'adjustments', 'discount', 'nett_amount',
            'paid_amount', 'receivable_amount', 'balance_due', 'formula_version',
            'lines', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class CounterPaymentSerializer(serializers.Serializer):
    """Payment taken when the invoice is raised."""
    amount = serializers.DecimalField(**MONEY)
    discount = serializers.DecimalField(**MONEY, required=False, default=0)
    method = serializers.ChoiceField(
        choices=CashFlowTransaction.METHOD_CHOICES,
        required=False,
        default=CashFlowTransaction.METHOD_CASH,
    )
    reference = serializers.CharField(required=False, allow_blank=True, default='')


class InvoiceWriteSerializer(serializers.Serializer):
    """Request body for creating or rewriting a buyer invoice."""
    buyer_id = serializers.IntegerField()
    items = serializers.ListField(child=serializers.IntegerField(), allow_empty=True)
    wages = serializers.DecimalField(**MONEY, required=False, default=0)
    adjustments = serializers.DecimalField(**MONEY, required=False, default=0)
    discount = serializers.DecimalField(**MONEY, required=False, default=0)
    created_at = serializers.DateTimeField(required=False, allow_null=True)
    payments = CounterPaymentSerializer(many=True, required=False)


class SupplierInvoiceLineSerializer(serializers.ModelSerializer):
    """Serializer for SupplierInvoiceLine model."""

    class Meta:
        model = SupplierInvoiceLine
        fields = [
            'id', 'entry_item', 'product', 'product_name', 'quantity', 'gross_weight',
            'shute_weight', 'nett_weight', 'rate_per_quantity', 'sub_total',
        ]
        read_only_fields = fields


class SupplierInvoiceSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source='supplier.supplier_name', read_only=True)
    entry_ids = serializers.ListField(child=serializers.IntegerField(), read_only=True)
    balance_due = serializers.DecimalField(**MONEY, read_only=True)
    lines = SupplierInvoiceLineSerializer(many=True, read_only=True)

    class Meta:
        model = SupplierInvoice
        fields = [
            'id', 'invoice_number', 'supplier', 'supplier_name', 'entry_ids',
            'total_quantities', 'gross_total', 'commission_rate', 'commission_amount',
            'wages', 'adjustments', 'nett_amount', 'advance_paid', 'final_payable',
            'paid_amount', 'balance_due', 'status', 'lines',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class SupplierLineInputSerializer(serializers.Serializer):
    entry_item_id = serializers.IntegerField(required=False, allow_null=True)
    product_id = serializers.IntegerField()
    product_name = serializers.CharField(required=False, allow_blank=True)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, default=0)
    gross_weight = serializers.DecimalField(max_digits=12, decimal_places=3, required=False, default=0)
    shute_weight = serializers.DecimalField(max_digits=12, decimal_places=3, required=False, default=0)
    nett_weight = serializers.DecimalField(max_digits=12, decimal_places=3, required=False, allow_null=True)
    rate_per_quantity = serializers.DecimalField(max_digits=12, decimal_places=2)
    sub_total = serializers.DecimalField(**MONEY)


class SupplierInvoiceWriteSerializer(serializers.Serializer):
    """Request body for creating or rewriting a supplier settlement."""
    supplier_id = serializers.IntegerField()
    entry_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=True)
    items = SupplierLineInputSerializer(many=True, allow_empty=True)
    commission_rate = serializers.DecimalField(max_digits=5, decimal_places=2, required=False, allow_null=True)
    wages = serializers.DecimalField(**MONEY, required=False, default=0)
    adjustments = serializers.DecimalField(**MONEY, required=False, default=0)
    advance_paid = serializers.DecimalField(**MONEY, required=False, default=0)
    status = serializers.ChoiceField(choices=SupplierInvoice.STATUS_CHOICES, required=False, allow_null=True)
