# apps/cashflow/reconciliation.py
"""
Balance drift detection.

Buyer and supplier outstanding balances are running totals. This module
recomputes them from the ledger and reports parties whose stored value
has drifted:

    buyer    = sum(invoice receivable) - sum(Income amount + discount)
    supplier = -sum(supplier invoice nett) + sum(supplier payments and advances)

repair() overwrites drifted balances with the ledger value.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings

from apps.invoicing.models import Invoice, SupplierInvoice
from apps.parties.models import Buyer, Supplier
from apps.parties.services import BalanceService
from shared.money import ZERO
from .models import CashFlowTransaction

logger = logging.getLogger(__name__)


@dataclass
class BalanceDrift:
    party: object
    stored: Decimal
    expected: Decimal

    @property
    def party_type(self):
        return type(self.party).__name__

    @property
    def difference(self):
        return self.stored - self.expected

    def as_dict(self):
        return {
            'party_type': self.party_type,
            'party_id': self.party.pk,
            'name': str(self.party),
            'stored': self.stored,
            'expected': self.expected,
            'difference': self.difference,
        }


class BalanceReconciliationService:
    """
    Usage:
        service = BalanceReconciliationService()
        drifts = service.find_drift()
        service.repair(drifts)
    """

    def __init__(self, epsilon=None):
        self.epsilon = epsilon if epsilon is not None else settings.AUCTION_SETTINGS['BALANCE_EPSILON']

    def expected_buyer_balances(self):
        expected = defaultdict(lambda: ZERO)
        for invoice in Invoice.objects.only('buyer_id', 'total_amount', 'wages', 'adjustments',
                                            'discount', 'nett_amount', 'formula_version'):
            expected[str(invoice.buyer_id)] += invoice.receivable_amount
        income = CashFlowTransaction.objects.filter(type=CashFlowTransaction.TYPE_INCOME, entity_id__isnull=False)
        for txn in income.only('entity_id', 'amount', 'discount'):
            expected[txn.entity_id] -= txn.credit
        return expected

    def expected_supplier_balances(self):
        expected = defaultdict(lambda: ZERO)
        for invoice in SupplierInvoice.objects.only('supplier_id', 'nett_amount'):
            expected[str(invoice.supplier_id)] -= invoice.nett_amount
        payments = CashFlowTransaction.objects.filter(
            type=CashFlowTransaction.TYPE_EXPENSE,
            category__in=CashFlowTransaction.SUPPLIER_CATEGORIES,
            entity_id__isnull=False,
        )
        for txn in payments.only('entity_id', 'amount'):
            expected[txn.entity_id] += txn.amount
        return expected

    def find_drift(self):
        """Parties whose stored outstanding differs from the ledger by at least the epsilon."""
        drifts = []
        checks = (
            (Buyer, self.expected_buyer_balances()),
            (Supplier, self.expected_supplier_balances()),
        )
        for model, expected in checks:
            for party in model.objects.all():
                ledger = expected.get(str(party.pk), ZERO)
                if abs(party.outstanding - ledger) >= self.epsilon:
                    drift = BalanceDrift(party=party, stored=party.outstanding, expected=ledger)
                    logger.warning(
                        "%s %s outstanding %s differs from ledger %s by %s",
                        drift.party_type, party.pk, drift.stored, drift.expected, drift.difference,
                    )
                    drifts.append(drift)
        return drifts

    def repair(self, drifts=None):
        """Overwrite each drifted balance with its ledger value. Returns the drifts repaired."""
        if drifts is None:
            drifts = self.find_drift()
        balances = BalanceService()
        for drift in drifts:
            balances.set_outstanding(drift.party, drift.expected, reason='Reconciliation repair')
        return drifts
