# apps/cashflow/models.py
"""
Cash flow ledger.

Income is money received from a buyer, Expense is money paid out (to a
supplier when the category is a supplier payment or advance), Transfer
moves money between the cash box and the bank.

related_invoice_ids holds buyer invoice ids on Income rows and supplier
invoice ids on Expense rows.
"""
from decimal import Decimal
from django.db import models
from django.utils import timezone
from shared.models import TimestampMixin


class CashFlowTransactionQuerySet(models.QuerySet):

    def linked_to_invoice(self, invoice_id, txn_type):
        """Transactions of ``txn_type`` whose related_invoice_ids include ``invoice_id``."""
        candidates = self.filter(type=txn_type)
        return [txn for txn in candidates if txn.links_invoice(invoice_id)]


class CashFlowTransaction(TimestampMixin):
    """
    One money movement.

    Example:
        Income 5,000.00 (Cash) from Ravi Traders, discount 50.00,
        against BI-202610019-003
    """
    TYPE_INCOME = 'Income'
    TYPE_EXPENSE = 'Expense'
    TYPE_TRANSFER = 'Transfer'
    TYPE_CHOICES = [
        (TYPE_INCOME, 'Income'),
        (TYPE_EXPENSE, 'Expense'),
        (TYPE_TRANSFER, 'Transfer'),
    ]

    METHOD_CASH = 'Cash'
    METHOD_BANK = 'Bank'
    METHOD_CHOICES = [
        (METHOD_CASH, 'Cash'),
        (METHOD_BANK, 'Bank'),
    ]

    CATEGORY_SALES = 'Sales'
    CATEGORY_ADVANCE = 'Advance Payment'
    CATEGORY_SUPPLIER_PAYMENT = 'Supplier Payment'
    SUPPLIER_CATEGORIES = (CATEGORY_SUPPLIER_PAYMENT, CATEGORY_ADVANCE)

    date = models.DateField(default=timezone.localdate, db_index=True)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    category = models.CharField(max_length=100, blank=True, null=True)
    entity_id = models.CharField(
        max_length=64,
        blank=True,
        null=True,
        help_text="Buyer id for Income, supplier id for Expense"
    )
    entity_name = models.CharField(max_length=255, blank=True)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    discount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    method = models.CharField(max_length=10, choices=METHOD_CHOICES)
    to_method = models.CharField(
        max_length=10,
        choices=METHOD_CHOICES,
        blank=True,
        null=True,
        help_text="Transfer destination"
    )
    reference = models.CharField(max_length=255, blank=True)
    description = models.TextField(blank=True)
    related_entry_ids = models.JSONField(default=list, blank=True)
    related_invoice_ids = models.JSONField(default=list, blank=True)

    objects = CashFlowTransactionQuerySet.as_manager()

    class Meta:
        ordering = ['-date', '-id']

    def __str__(self):
        return f"{self.date} {self.type} {self.amount} {self.entity_name}"

    @property
    def credit(self):
        """Amount credited against a buyer: cash received plus discount allowed."""
        return self.amount + (self.discount or Decimal('0.00'))

    @property
    def affects_supplier(self):
        return self.type == self.TYPE_EXPENSE and self.category in self.SUPPLIER_CATEGORIES

    def links_invoice(self, invoice_id):
        return str(invoice_id) in {str(pk) for pk in self.related_invoice_ids or []}

    def unlink_invoice(self, invoice_id):
        self.related_invoice_ids = [pk for pk in self.related_invoice_ids if str(pk) != str(invoice_id)]
