# apps/invoicing/models.py
"""
Invoice models for billing buyers and settling suppliers.

Models:
- Invoice: bill to a buyer for auctioned entry items
- InvoiceLine: frozen snapshot of one billed entry item
- SupplierInvoice: settlement to a supplier for whole entries, net of
  commission and wages
- SupplierInvoiceLine: one settled product/rate line
- SupplierInvoiceEntry: claims an entry for a supplier invoice (an entry
  can be on at most one supplier invoice)
"""
from decimal import Decimal
from django.conf import settings
from django.db import models
from shared.models import TimestampMixin


class Invoice(TimestampMixin):
    """
    Buyer invoice.

    nett_amount = total_amount + wages + adjustments - discount, and that
    amount is what the buyer's outstanding was charged. Rows imported from
    the earlier system (formula_version 1) may hold a nett_amount that
    excludes the discount; receivable_amount resolves both.

    Example:
        Invoice: BI-202610019-003
        Buyer: Ravi Traders
        Nett: 12,500.00, Paid: 5,000.00
    """
    FORMULA_LEGACY = 1
    FORMULA_CURRENT = 2
    FORMULA_CHOICES = [
        (FORMULA_LEGACY, 'Legacy (discount outside nett)'),
        (FORMULA_CURRENT, 'Current (discount inside nett)'),
    ]

    invoice_number = models.CharField(max_length=30, unique=True)
    buyer = models.ForeignKey(
        'parties.Buyer',
        on_delete=models.PROTECT,
        related_name='invoices'
    )
    total_quantities = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Sum of line sub totals"
    )
    wages = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    adjustments = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    discount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    nett_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    paid_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    formula_version = models.PositiveSmallIntegerField(
        choices=FORMULA_CHOICES,
        default=FORMULA_CURRENT
    )

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return self.invoice_number

    @property
    def gross_amount(self):
        return self.total_amount + self.wages + self.adjustments

    @property
    def is_legacy_format(self):
        """Legacy rows whose nett_amount equals the gross were stored without the discount."""
        return (
            self.formula_version == self.FORMULA_LEGACY
            and abs(self.nett_amount - self.gross_amount) < settings.AUCTION_SETTINGS['BALANCE_EPSILON']
        )

    @property
    def receivable_amount(self):
        """Amount this invoice added to the buyer's outstanding."""
        if self.is_legacy_format:
            return self.nett_amount - self.discount
        return self.nett_amount

    @property
    def balance_due(self):
        return self.receivable_amount - self.paid_amount


class InvoiceLine(models.Model):
    """Entry item as it was when billed."""
    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name='lines')
    entry_item = models.ForeignKey(
        'entries.EntryItem',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='invoice_lines'
    )
    entry_serial_number = models.CharField(max_length=20, blank=True)
    sub_serial_number = models.PositiveIntegerField(default=0)
    product = models.ForeignKey('parties.Product', on_delete=models.PROTECT, related_name='+')
    product_name = models.CharField(max_length=255)
    quantity = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    gross_weight = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal('0.000'))
    shute_weight = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal('0.000'))
    nett_weight = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal('0.000'))
    rate_per_quantity = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    sub_total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))

    class Meta:
        ordering = ['invoice', 'id']

    def __str__(self):
        return f"{self.invoice.invoice_number}: {self.product_name} x {self.quantity}"


class SupplierInvoice(TimestampMixin):
    """
    Supplier settlement.

    gross_total is rounded to whole units, commission is always rounded
    up, nett_amount is what the supplier's outstanding was charged.

    Example:
        Invoice: SI-202610019-001
        Gross: 500.00, Commission 5%: 25.00, Nett: 475.00
    """
    STATUS_UNPAID = 'Unpaid'
    STATUS_PARTIAL = 'Partially Paid'
    STATUS_PAID = 'Paid'
    STATUS_CHOICES = [
        (STATUS_UNPAID, 'Unpaid'),
        (STATUS_PARTIAL, 'Partially Paid'),
        (STATUS_PAID, 'Paid'),
    ]

    invoice_number = models.CharField(max_length=30, unique=True)
    supplier = models.ForeignKey(
        'parties.Supplier',
        on_delete=models.PROTECT,
        related_name='supplier_invoices'
    )
    total_quantities = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    gross_total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    commission_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Percent of gross"
    )
    commission_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    wages = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    adjustments = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    nett_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    advance_paid = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    final_payable = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    paid_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_UNPAID)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return self.invoice_number

    @property
    def entry_ids(self):
        return [link.entry_id for link in self.entry_links.all()]

    @property
    def balance_due(self):
        return self.nett_amount - self.paid_amount


class SupplierInvoiceLine(models.Model):
    """
    One settled line. entry_item is set when the caller named the entry
    item; otherwise entry items are matched by product and rate.
    """
    supplier_invoice = models.ForeignKey(SupplierInvoice, on_delete=models.CASCADE, related_name='lines')
    entry_item = models.ForeignKey(
        'entries.EntryItem',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='supplier_invoice_lines'
    )
    product = models.ForeignKey('parties.Product', on_delete=models.PROTECT, related_name='+')
    product_name = models.CharField(max_length=255)
    quantity = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    gross_weight = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal('0.000'))
    shute_weight = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal('0.000'))
    nett_weight = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal('0.000'))
    rate_per_quantity = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    sub_total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))

    class Meta:
        ordering = ['supplier_invoice', 'id']


class SupplierInvoiceEntry(models.Model):
    """An entry claimed by a supplier invoice. The one-to-one keeps each entry on a single invoice."""
    supplier_invoice = models.ForeignKey(SupplierInvoice, on_delete=models.CASCADE, related_name='entry_links')
    entry = models.OneToOneField(
        'entries.Entry',
        on_delete=models.PROTECT,
        related_name='supplier_invoice_link'
    )

    class Meta:
        verbose_name_plural = 'supplier invoice entries'

    def __str__(self):
        return f"{self.supplier_invoice.invoice_number} <- {self.entry.serial_number}"
