# apps/parties/models.py
"""
Party models for the trading floor.

- Buyer: bids on auctioned goods; ``outstanding`` is a receivable
  (positive = the buyer owes us)
- Supplier: delivers goods for auction; ``outstanding`` is a payable
  (negative = we owe the supplier)
- Product: commodity master data referenced by entry items

``outstanding`` is never edited directly. It moves only through
BalanceService, which is called by invoicing and cash-flow services.
"""
from decimal import Decimal
from django.db import models
from simple_history.models import HistoricalRecords
from shared.models import TimestampMixin


class Buyer(TimestampMixin):
    """
    A trader buying at auction.

    Example:
        Buyer: Ravi Traders (token 17)
        Outstanding: 12,500.00  (owes us)
    """
    buyer_name = models.CharField(
        max_length=255,
        help_text="Primary name"
    )
    display_name = models.CharField(
        max_length=255,
        blank=True,
        help_text="Name shown on invoices (defaults to buyer_name)"
    )
    alias = models.CharField(max_length=100, blank=True)
    token_number = models.CharField(
        max_length=50,
        blank=True,
        help_text="Bidding token issued on the auction floor"
    )
    description = models.TextField(blank=True)
    contact_number = models.CharField(max_length=50, blank=True)
    place = models.CharField(max_length=255, blank=True)
    outstanding = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Signed receivable: positive means the buyer owes us"
    )

    history = HistoricalRecords()

    class Meta:
        ordering = ['buyer_name']

    def save(self, *args, **kwargs):
        if not self.display_name:
            self.display_name = self.buyer_name
        super().save(*args, **kwargs)

    def __str__(self):
        return self.display_name or self.buyer_name


class Supplier(TimestampMixin):
    """
    A grower or agent delivering goods for auction.

    Example:
        Supplier: Green Valley Farms
        Outstanding: -4,750.00  (we owe them)
    """
    supplier_name = models.CharField(
        max_length=255,
        help_text="Primary name"
    )
    display_name = models.CharField(
        max_length=255,
        blank=True,
        help_text="Name shown on settlements (defaults to supplier_name)"
    )
    contact_number = models.CharField(max_length=50, blank=True)
    place = models.CharField(max_length=255, blank=True)
    bank_account_details = models.TextField(blank=True)
    outstanding = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Signed payable: negative means we owe the supplier"
    )

    history = HistoricalRecords()

    class Meta:
        ordering = ['supplier_name']

    def save(self, *args, **kwargs):
        if not self.display_name:
            self.display_name = self.supplier_name
        super().save(*args, **kwargs)

    def __str__(self):
        return self.display_name or self.supplier_name


class Product(TimestampMixin):
    """Commodity traded at auction (e.g. 'Tomato - Grade A')."""
    product_name = models.CharField(max_length=255)
    display_name = models.CharField(max_length=255, blank=True)

    class Meta:
        ordering = ['product_name']

    def save(self, *args, **kwargs):
        if not self.display_name:
            self.display_name = self.product_name
        super().save(*args, **kwargs)

    def __str__(self):
        return self.display_name or self.product_name
