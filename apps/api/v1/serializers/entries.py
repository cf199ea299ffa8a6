# apps/api/v1/serializers/entries.py
"""
Serializers for supplier intake and the auction floor.

Output serializers render Entry/EntryItem rows; input serializers only
shape request bodies for EntryService and AuctionSession, which do the
business validation.
"""
from rest_framework import serializers
from apps.auction.services import EDITABLE_FIELDS
from apps.entries.models import Entry, EntryItem

MONEY = dict(max_digits=14, decimal_places=2)
WEIGHT = dict(max_digits=12, decimal_places=3)


class EntryItemSerializer(serializers.ModelSerializer):
    """Serializer for EntryItem model."""
    product_name = serializers.CharField(source='product.product_name', read_only=True)
    buyer_name = serializers.CharField(source='buyer.buyer_name', read_only=True, allow_null=True)

    class Meta:
        model = EntryItem
        fields = [
            'id', 'sub_serial_number', 'product', 'product_name', 'quantity',
            'gross_weight', 'shute_weight', 'nett_weight', 'has_weight', 'rate_per_quantity',
            'buyer', 'buyer_name', 'sub_total', 'invoice', 'supplier_invoice',
        ]
        read_only_fields = fields


class EntrySerializer(serializers.ModelSerializer):
    """Entry with its items. ``status`` keeps the stored value; ``status_label`` explains it."""
    supplier_name = serializers.CharField(source='supplier.supplier_name', read_only=True)
    status_label = serializers.CharField(source='get_status_display', read_only=True)
    items = EntryItemSerializer(many=True, read_only=True)

    class Meta:
        model = Entry
        fields = [
            'id', 'serial_number', 'supplier', 'supplier_name', 'entry_date',
            'total_quantities', 'total_amount', 'status', 'status_label',
            'last_sub_serial_number', 'version', 'items',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class EntryItemInputSerializer(serializers.Serializer):
    """One item in a create/update request; ``id`` is omitted (or temporary) for new items."""
    id = serializers.CharField(required=False, allow_null=True)
    product_id = serializers.IntegerField()
    quantity = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, default=0)
    gross_weight = serializers.DecimalField(**WEIGHT, required=False, default=0)
    shute_weight = serializers.DecimalField(**WEIGHT, required=False, default=0)
    rate_per_quantity = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    buyer_id = serializers.IntegerField(required=False, allow_null=True)
    has_weight = serializers.BooleanField(required=False, allow_null=True, default=None)
    sub_total = serializers.DecimalField(**MONEY, required=False, default=0)


class EntryCreateSerializer(serializers.Serializer):
    supplier_id = serializers.IntegerField()
    entry_date = serializers.DateField(required=False, allow_null=True)
    items = EntryItemInputSerializer(many=True)


class EntryUpdateSerializer(serializers.Serializer):
    items = EntryItemInputSerializer(many=True)
    expected_version = serializers.IntegerField(required=False, allow_null=True)


class AuctionItemSerializer(serializers.Serializer):
    """An item as the auction floor sees it, including unsaved state."""
    id = serializers.CharField()
    sub_serial_number = serializers.IntegerField()
    product_id = serializers.IntegerField(allow_null=True)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=2)
    gross_weight = serializers.DecimalField(**WEIGHT)
    shute_weight = serializers.DecimalField(**WEIGHT)
    nett_weight = serializers.DecimalField(**WEIGHT)
    rate_per_quantity = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)
    buyer_id = serializers.IntegerField(allow_null=True)
    sub_total = serializers.DecimalField(**MONEY)
    invoice_id = serializers.IntegerField(allow_null=True)
    supplier_invoice_id = serializers.IntegerField(allow_null=True)
    has_weight = serializers.BooleanField()
    is_saved = serializers.BooleanField()


class AuctionSessionSerializer(serializers.Serializer):
    entry_id = serializers.IntegerField(source='entry.pk')
    serial_number = serializers.CharField(source='entry.serial_number')
    status = serializers.CharField(source='entry.status')
    version = serializers.IntegerField()
    is_locked = serializers.BooleanField()
    total = serializers.DecimalField(**MONEY)
    items = AuctionItemSerializer(many=True)


class AuctionSaveItemSerializer(serializers.Serializer):
    """
    Save one item from the auction floor.

    ``item_id`` names an existing item; omit it to add a new one.
    ``changes`` maps editable field names to their new values.
    """
    expected_version = serializers.IntegerField()
    item_id = serializers.CharField(required=False, allow_null=True)
    changes = serializers.DictField()

    def validate_changes(self, value):
        unknown = set(value) - EDITABLE_FIELDS
        if unknown:
            raise serializers.ValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")
        return value


class AuctionRemoveItemSerializer(serializers.Serializer):
    expected_version = serializers.IntegerField()
    item_id = serializers.CharField()
