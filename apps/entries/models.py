# apps/entries/models.py
"""
Supplier intake models.

Models:
- Entry: one supplier delivery for one calendar day
- EntryItem: a lot within the delivery; auctioned to a buyer, then linked
  to a buyer invoice and/or a supplier invoice

Link fields on EntryItem are plain nullable foreign keys. Invoicing sets
them when it consumes an item and clears them when the invoice is edited
or deleted.
"""
from decimal import Decimal
from django.db import models
from django.utils import timezone
from shared.models import TimestampMixin
from .status import STATUS_CHOICES, PENDING


class Entry(TimestampMixin):
    """
    Goods received from a supplier on one day.

    Example:
        Entry: 1019-004
        Supplier: Green Valley Farms
        Items: 3 lots, 42 bags
        Status: Draft
    """
    serial_number = models.CharField(
        max_length=20,
        help_text="Daily sequence MMDD-NNN"
    )
    supplier = models.ForeignKey(
        'parties.Supplier',
        on_delete=models.PROTECT,
        related_name='entries'
    )
    entry_date = models.DateField(
        default=timezone.localdate,
        db_index=True,
        help_text="Calendar day of intake (one entry per supplier per day)"
    )
    total_quantities = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00')
    )
    total_amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal('0.00')
    )
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=PENDING
    )
    last_sub_serial_number = models.PositiveIntegerField(
        default=0,
        help_text="Highest item number handed out; frozen numbering continues from here"
    )
    version = models.PositiveIntegerField(
        default=1,
        help_text="Incremented on every change to the entry or its items"
    )

    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name_plural = 'entries'
        constraints = [
            models.UniqueConstraint(
                fields=['supplier', 'entry_date'],
                name='unique_entry_per_supplier_per_day',
            ),
            models.UniqueConstraint(
                fields=['entry_date', 'serial_number'],
                name='unique_entry_serial_per_day',
            ),
        ]

    def __str__(self):
        return self.serial_number

    @property
    def is_auctioned(self):
        """True once any item has a buyer; item numbers are frozen from then on."""
        return self.items.filter(buyer__isnull=False).exists()

    @property
    def has_supplier_invoice(self):
        return hasattr(self, 'supplier_invoice_link')


class EntryItem(models.Model):
    """
    One lot within an entry.

    sub_total is nett_weight * rate for weighed lots (has_weight with a
    gross weight recorded), quantity * rate otherwise.
    """
    entry = models.ForeignKey(
        Entry,
        on_delete=models.CASCADE,
        related_name='items'
    )
    sub_serial_number = models.PositiveIntegerField()
    product = models.ForeignKey(
        'parties.Product',
        on_delete=models.PROTECT,
        related_name='entry_items'
    )
    quantity = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    gross_weight = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal('0.000'))
    shute_weight = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal('0.000'),
        help_text="Tare deducted from gross weight"
    )
    nett_weight = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal('0.000'))
    has_weight = models.BooleanField(
        default=False,
        help_text="Priced on nett weight instead of quantity"
    )
    rate_per_quantity = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True
    )
    buyer = models.ForeignKey(
        'parties.Buyer',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='entry_items'
    )
    sub_total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    invoice = models.ForeignKey(
        'invoicing.Invoice',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='entry_items',
        help_text="Buyer invoice this item is billed on"
    )
    supplier_invoice = models.ForeignKey(
        'invoicing.SupplierInvoice',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='entry_items',
        help_text="Supplier invoice this item is settled on"
    )

    class Meta:
        ordering = ['entry', 'sub_serial_number', 'id']

    def __str__(self):
        return f"{self.entry.serial_number}/{self.sub_serial_number}"
