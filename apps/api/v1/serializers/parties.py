# apps/api/v1/serializers/parties.py
"""
Serializers for master data: Buyer, Supplier, Product.

``outstanding`` is read-only; balances move only through invoicing and
cash flow.
"""
from rest_framework import serializers
from apps.parties.models import Buyer, Supplier, Product


class BuyerSerializer(serializers.ModelSerializer):
    """Serializer for Buyer model."""

    class Meta:
        model = Buyer
        fields = [
            'id', 'buyer_name', 'display_name', 'alias', 'token_number',
            'description', 'contact_number', 'place', 'outstanding',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['outstanding', 'created_at', 'updated_at']


class SupplierSerializer(serializers.ModelSerializer):
    """Serializer for Supplier model."""

    class Meta:
        model = Supplier
        fields = [
            'id', 'supplier_name', 'display_name', 'contact_number', 'place',
            'bank_account_details', 'outstanding',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['outstanding', 'created_at', 'updated_at']


class ProductSerializer(serializers.ModelSerializer):

    class Meta:
        model = Product
        fields = ['id', 'product_name', 'display_name', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
