# apps/api/v1/serializers/cashflow.py
"""
Serializers for the cash flow ledger and balance reconciliation.
"""
from rest_framework import serializers
from apps.cashflow.models import CashFlowTransaction

MONEY = dict(max_digits=14, decimal_places=2)


class CashFlowTransactionSerializer(serializers.ModelSerializer):
    """Serializer for CashFlowTransaction model."""

    class Meta:
        model = CashFlowTransaction
        fields = [
            'id', 'date', 'type', 'category', 'entity_id', 'entity_name', 'amount',
            'discount', 'method', 'to_method', 'reference', 'description',
            'related_entry_ids', 'related_invoice_ids', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class CashFlowWriteSerializer(serializers.Serializer):
    """
    Request body for recording or editing a transaction.

    Used with partial=True on update so only the supplied fields change.
    """
    date = serializers.DateField(required=False, allow_null=True)
    type = serializers.ChoiceField(choices=CashFlowTransaction.TYPE_CHOICES)
    category = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    entity_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    entity_name = serializers.CharField(required=False, allow_blank=True)
    amount = serializers.DecimalField(**MONEY)
    discount = serializers.DecimalField(**MONEY, required=False)
    method = serializers.ChoiceField(choices=CashFlowTransaction.METHOD_CHOICES)
    to_method = serializers.ChoiceField(
        choices=CashFlowTransaction.METHOD_CHOICES, required=False, allow_null=True,
    )
    reference = serializers.CharField(required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    related_entry_ids = serializers.ListField(child=serializers.IntegerField(), required=False)
    related_invoice_ids = serializers.ListField(child=serializers.IntegerField(), required=False)


class OpeningBalanceSerializer(serializers.Serializer):
    date = serializers.DateField()
    total = serializers.DecimalField(**MONEY)
    cash = serializers.DecimalField(**MONEY)
    bank = serializers.DecimalField(**MONEY)


class BalanceDriftSerializer(serializers.Serializer):
    party_type = serializers.CharField()
    party_id = serializers.IntegerField()
    name = serializers.CharField()
    stored = serializers.DecimalField(**MONEY)
    expected = serializers.DecimalField(**MONEY)
    difference = serializers.DecimalField(**MONEY)
