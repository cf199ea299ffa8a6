# apps/cashflow/services.py
"""
Cash flow ledger service.

CashFlowService handles:
- Recording Income, Expense and Transfer transactions
- Charging the transaction to the buyer (Income) or supplier (supplier
  payments and advances) outstanding balance
- Spreading a new payment over the invoices it names, oldest first
- Reverting and reapplying the balance effect when a transaction is
  edited or deleted
- Opening cash/bank position for a day

Editing or deleting a transaction does not touch the paid_amount it
spread over invoices when it was recorded.
"""
import logging

from django.db import transaction
from django.utils import timezone

from apps.audit.services import record
from apps.invoicing.models import Invoice, SupplierInvoice, SupplierInvoiceEntry
from apps.parties.models import Buyer, Supplier
from apps.parties.services import BalanceService, coerce_pk
from shared.dates import filter_by_day, to_date
from shared.exceptions import NotFoundError, ServiceValidationError
from shared.money import ZERO, money
from .models import CashFlowTransaction

logger = logging.getLogger(__name__)

FEATURE = 'CashFlow'

FIELDS = (
    'date', 'type', 'category', 'entity_id', 'entity_name', 'amount', 'discount', 'method',
    'to_method', 'reference', 'description', 'related_entry_ids', 'related_invoice_ids',
)


class CashFlowService:
    """
    Service for cash flow transactions.

    Usage:
        service = CashFlowService(actor)

        txn = service.create_transaction(
            type='Income', entity_id=buyer.id, amount=1000, method='Cash',
            related_invoice_ids=[invoice.id],
        )
        service.delete_transaction(txn.id)
        service.get_opening_balance('2026-10-19')
    """

    def __init__(self, actor=None):
        self.actor = actor
        self.balances = BalanceService()

    # ===== QUERIES =====

    def get_transaction(self, txn_id):
        txn = CashFlowTransaction.objects.filter(pk=coerce_pk(txn_id)).first()
        if txn is None:
            raise NotFoundError.for_model(CashFlowTransaction, txn_id)
        return txn

    def list_transactions(self, start_date=None, end_date=None):
        qs = filter_by_day(CashFlowTransaction.objects.all(), 'date', start_date, end_date)
        return qs.order_by('-date', '-id')

    def get_opening_balance(self, as_of_date):
        """
        Cash position at the start of ``as_of_date``.

        Replays every transaction dated before it. Discounts are not cash
        and are ignored; transfers move money between cash and bank without
        changing the total.
        """
        as_of = to_date(as_of_date)
        if as_of is None:
            raise ServiceValidationError('Date is required', field='date')

        balance = {'total': ZERO, 'cash': ZERO, 'bank': ZERO}
        pockets = {CashFlowTransaction.METHOD_CASH: 'cash', CashFlowTransaction.METHOD_BANK: 'bank'}

        for txn in CashFlowTransaction.objects.filter(date__lt=as_of).only('type', 'amount', 'method', 'to_method'):
            source = pockets.get(txn.method)
            if txn.type == CashFlowTransaction.TYPE_INCOME:
                balance['total'] += txn.amount
                if source:
                    balance[source] += txn.amount
            elif txn.type == CashFlowTransaction.TYPE_EXPENSE:
                balance['total'] -= txn.amount
                if source:
                    balance[source] -= txn.amount
            elif txn.type == CashFlowTransaction.TYPE_TRANSFER and txn.to_method:
                if source:
                    balance[source] -= txn.amount
                target = pockets.get(txn.to_method)
                if target:
                    balance[target] += txn.amount
        return balance

    # ===== MUTATIONS =====

    def create_transaction(self, **data):
        """
        Record a transaction and apply its effects.

        Income lowers the buyer's outstanding by amount + discount and, when
        invoices are named, spreads that credit over them oldest first.
        Supplier payments and advances raise the supplier's outstanding by
        amount and spread it over the named supplier invoices, or, with
        only entries named, apply it to the supplier invoice covering them.
        """
        values = self._clean(data)

        with transaction.atomic():
            txn = CashFlowTransaction(**values)
            self._fill_entity_name(txn)
            txn.save()
            self.apply_balance_effect(txn)
            if txn.type == CashFlowTransaction.TYPE_INCOME:
                self._settle_buyer_invoices(txn)
            elif txn.affects_supplier and txn.entity_id:
                self._settle_supplier_invoices(txn)

        logger.info("Recorded %s %s (%s) for '%s'", txn.type, txn.amount, txn.method, txn.entity_name)
        record(
            self.actor, 'Create', FEATURE,
            f"Recorded {txn.type} of {txn.amount} from/to '{txn.entity_name}'.",
        )
        return txn

    def update_transaction(self, txn_id, **changes):
        """Revert the old balance effect, apply ``changes`` and reapply with the new values."""
        with transaction.atomic():
            txn = CashFlowTransaction.objects.select_for_update().filter(pk=coerce_pk(txn_id)).first()
            if txn is None:
                raise NotFoundError.for_model(CashFlowTransaction, txn_id)

            merged = {field: getattr(txn, field) for field in FIELDS}
            merged.update({key: value for key, value in changes.items() if key in FIELDS and value is not None})
            values = self._clean(merged)
            entity_changed = values['entity_id'] != txn.entity_id

            self.apply_balance_effect(txn, sign=-1)
            for field, value in values.items():
                setattr(txn, field, value)
            if entity_changed and not changes.get('entity_name'):
                txn.entity_name = ''
            self._fill_entity_name(txn)
            txn.save()
            self.apply_balance_effect(txn)

        logger.info("Updated %s transaction %s for '%s'", txn.type, txn.pk, txn.entity_name)
        record(
            self.actor, 'Update', FEATURE,
            f"Updated {txn.type} transaction for '{txn.entity_name}'.",
        )
        return txn

    def delete_transaction(self, txn_id):
        """Delete a transaction and reverse the balance effect it had on its buyer or supplier."""
        with transaction.atomic():
            txn = CashFlowTransaction.objects.select_for_update().filter(pk=coerce_pk(txn_id)).first()
            if txn is None:
                raise NotFoundError.for_model(CashFlowTransaction, txn_id)
            self.apply_balance_effect(txn, sign=-1)
            description = f"Deleted {txn.type} of {txn.amount} from/to '{txn.entity_name}'."
            txn.delete()

        logger.info(description)
        record(self.actor, 'Delete', FEATURE, description)

    # ===== HELPERS =====

    def _clean(self, data):
        values = {field: data.get(field) for field in FIELDS if field in data}

        txn_type = values.get('type')
        if txn_type not in dict(CashFlowTransaction.TYPE_CHOICES):
            raise ServiceValidationError(f"Unknown transaction type: {txn_type!r}", field='type')
        methods = dict(CashFlowTransaction.METHOD_CHOICES)
        if values.get('method') not in methods:
            raise ServiceValidationError(f"Unknown payment method: {values.get('method')!r}", field='method')
        if txn_type == CashFlowTransaction.TYPE_TRANSFER:
            if values.get('to_method') not in methods:
                raise ServiceValidationError('Transfers need a destination method', field='to_method')
        elif values.get('to_method') not in (None, ''):
            values['to_method'] = None
        if values.get('amount') in (None, ''):
            raise ServiceValidationError('Amount is required', field='amount')

        values['amount'] = money(values['amount'])
        values['discount'] = money(values.get('discount'))
        values['date'] = to_date(values.get('date')) or timezone.localdate()
        values['entity_id'] = str(values['entity_id']) if values.get('entity_id') not in (None, '') else None
        values['category'] = values.get('category') or None
        values['related_entry_ids'] = list(values.get('related_entry_ids') or [])
        values['related_invoice_ids'] = list(values.get('related_invoice_ids') or [])
        for field in ('entity_name', 'reference', 'description'):
            values[field] = values.get(field) or ''
        return values

    def _fill_entity_name(self, txn):
        if txn.entity_name or not txn.entity_id:
            return
        if txn.type == CashFlowTransaction.TYPE_INCOME:
            party = Buyer.objects.filter(pk=coerce_pk(txn.entity_id)).first()
            txn.entity_name = party.buyer_name if party else ''
        elif txn.type == CashFlowTransaction.TYPE_EXPENSE:
            party = Supplier.objects.filter(pk=coerce_pk(txn.entity_id)).first()
            txn.entity_name = party.supplier_name if party else ''

    def apply_balance_effect(self, txn, sign=1):
        """
        Apply (sign=1) or revert (sign=-1) the transaction's effect on its
        party's outstanding.

        The party is the transaction's own entity_id; a transaction without
        one never moved a balance. Invoicing reverts linked payments through
        here when it deletes their invoice.
        """
        if not txn.entity_id:
            return
        reason = f"{'Revert ' if sign < 0 else ''}{txn.type} {txn.pk}"
        if txn.type == CashFlowTransaction.TYPE_INCOME:
            self.balances.adjust_buyer(txn.entity_id, -sign * txn.credit, reason=reason, missing_ok=True)
        elif txn.affects_supplier:
            self.balances.adjust_supplier(txn.entity_id, sign * txn.amount, reason=reason, missing_ok=True)

    def _settle_buyer_invoices(self, txn):
        if not txn.related_invoice_ids:
            return
        pool = txn.credit
        invoices = (
            Invoice.objects.select_for_update()
            .filter(pk__in=[coerce_pk(pk) for pk in txn.related_invoice_ids])
            .order_by('created_at', 'id')
        )
        for invoice in invoices:
            if pool <= 0:
                break
            due = self._buyer_credit_room(invoice)
            if due > 0:
                portion = min(pool, due)
                invoice.paid_amount += portion
                invoice.save(update_fields=['paid_amount', 'updated_at'])
                pool -= portion
                logger.info("Applied %s of transaction %s to %s", portion, txn.pk, invoice.invoice_number)

    @staticmethod
    def _buyer_credit_room(invoice):
        """
        Credit an invoice can still absorb: nett - discount - paid.

        The discount comes off again even though current invoices already
        have it inside nett, so a discounted invoice stops taking credit
        that much short of its balance.
        """
        return invoice.nett_amount - invoice.discount - invoice.paid_amount

    def _settle_supplier_invoices(self, txn):
        if txn.related_invoice_ids:
            pool = txn.amount
            invoices = (
                SupplierInvoice.objects.select_for_update()
                .filter(pk__in=[coerce_pk(pk) for pk in txn.related_invoice_ids])
                .order_by('created_at', 'id')
            )
            for invoice in invoices:
                if pool <= 0:
                    break
                due = invoice.balance_due
                if due > 0:
                    portion = min(pool, due)
                    invoice.paid_amount += portion
                    self._save_payment_status(invoice)
                    pool -= portion
                    logger.info("Applied %s of transaction %s to %s", portion, txn.pk, invoice.invoice_number)
        elif txn.related_entry_ids:
            invoice = self._invoice_covering(txn.related_entry_ids)
            if invoice is not None:
                invoice.paid_amount += txn.amount
                self._save_payment_status(invoice)
                logger.info("Applied advance %s to %s", txn.amount, invoice.invoice_number)

    def _invoice_covering(self, entry_ids):
        """The supplier invoice whose entries include every one of ``entry_ids``."""
        wanted = {coerce_pk(pk) for pk in entry_ids}
        claims = SupplierInvoiceEntry.objects.filter(entry_id__in=wanted)
        invoice_ids = {claim.supplier_invoice_id for claim in claims}
        if len(invoice_ids) != 1 or claims.count() != len(wanted):
            return None
        return SupplierInvoice.objects.select_for_update().get(pk=invoice_ids.pop())

    @staticmethod
    def _save_payment_status(invoice):
        if invoice.paid_amount >= invoice.nett_amount:
            invoice.status = SupplierInvoice.STATUS_PAID
        elif invoice.paid_amount > 0:
            invoice.status = SupplierInvoice.STATUS_PARTIAL
        invoice.save(update_fields=['paid_amount', 'status', 'updated_at'])
