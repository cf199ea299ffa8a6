# apps/reporting/services.py
"""
Party reports built from invoices and the cash flow ledger.

PartyReportService handles:
- Party ledger (statement) with balance brought forward and running balance
- Buyer and supplier balance sheets
- Buyer invoice aging

Reports only read; nothing here changes a balance.
"""
from collections import defaultdict

from django.db.models import Max
from django.utils import timezone

from apps.cashflow.models import CashFlowTransaction
from apps.invoicing.models import Invoice, SupplierInvoice
from apps.parties.models import Buyer, Supplier
from apps.parties.services import coerce_pk
from shared.dates import filter_by_day, to_date
from shared.exceptions import NotFoundError, ServiceValidationError
from shared.money import ZERO

BUYER = 'buyer'
SUPPLIER = 'supplier'
PARTY_TYPES = (BUYER, SUPPLIER)

AGING_BUCKETS = ('days_0_30', 'days_31_60', 'days_61_90', 'days_over_90')


def _get_party(model, pk):
    party = model.objects.filter(pk=coerce_pk(pk)).first()
    if party is None:
        raise NotFoundError.for_model(model, pk)
    return party


def _aging_bucket(days_old):
    if days_old <= 30:
        return 'days_0_30'
    if days_old <= 60:
        return 'days_31_60'
    if days_old <= 90:
        return 'days_61_90'
    return 'days_over_90'


def _line(day, particulars, kind, debit=ZERO, credit=ZERO):
    return {
        'date': day,
        'particulars': particulars,
        'type': kind,
        'debit': debit,
        'credit': credit,
        'balance': ZERO,
    }


def _payment_particulars(txn):
    if txn.description:
        return txn.description
    text = f"Payment - {txn.method}"
    if txn.discount:
        text += f" (Disc: {txn.discount})"
    return text


class PartyReportService:
    """
    Stateless reports over buyer and supplier balances.

    Usage:
        PartyReportService.get_ledger('buyer', buyer.id, start_date='2026-10-01')
        PartyReportService.get_buyer_balance_sheet()
        PartyReportService.get_invoice_aging(as_of_date=date(2026, 10, 19))
    """

    # ===== LEDGER =====

    @staticmethod
    def get_ledger(party_type, party_id, start_date=None, end_date=None):
        """
        Statement for one buyer or supplier.

        With a start_date, everything dated before it is folded into
        balance_brought_forward and the running balance starts there.
        Entries are in date order; on the same day invoices come before
        cash movements.

        Buyer side (receivable, positive = they owe us):
            invoice   debit  receivable amount
            Income    credit amount + discount   ("Payment")
            Expense   debit  amount              ("Refund")

        Supplier side (payable, positive = we owe them):
            invoice   credit nett amount
            Expense   debit  amount + discount   ("Payment")
            Income    credit amount              ("Refund")

        Cash movements count for a supplier only when filed under a
        supplier category (Supplier Payment, Advance Payment); for a buyer
        only when they are not.

        Returns:
        {
            'party_type': str,
            'party_id': int,
            'entity_name': str,
            'outstanding': Decimal,
            'balance_brought_forward': Decimal,
            'closing_balance': Decimal,
            'entries': [
                {'date', 'particulars', 'type', 'debit', 'credit', 'balance'},
                ...
            ],
        }
        """
        if party_type not in PARTY_TYPES:
            raise ServiceValidationError(
                f"Unknown party type: {party_type}", field='party_type', choices=list(PARTY_TYPES),
            )
        start_date, end_date = to_date(start_date), to_date(end_date)
        if party_type == BUYER:
            party = _get_party(Buyer, party_id)
            report = PartyReportService._buyer_ledger(party, start_date, end_date)
            sign = 1
        else:
            party = _get_party(Supplier, party_id)
            report = PartyReportService._supplier_ledger(party, start_date, end_date)
            sign = -1

        report['entries'].sort(key=lambda line: line['date'])
        running = report['balance_brought_forward']
        for line in report['entries']:
            running += sign * (line['debit'] - line['credit'])
            line['balance'] = running

        report.update(party_type=party_type, party_id=party.pk, closing_balance=running)
        return report

    @staticmethod
    def _party_transactions(party, supplier_side):
        qs = CashFlowTransaction.objects.filter(
            entity_id=str(party.pk),
            type__in=(CashFlowTransaction.TYPE_INCOME, CashFlowTransaction.TYPE_EXPENSE),
        )
        in_supplier_category = {'category__in': CashFlowTransaction.SUPPLIER_CATEGORIES}
        if supplier_side:
            return qs.filter(**in_supplier_category)
        return qs.exclude(**in_supplier_category)

    @staticmethod
    def _buyer_ledger(buyer, start_date, end_date):
        invoices = Invoice.objects.filter(buyer=buyer)
        transactions = PartyReportService._party_transactions(buyer, supplier_side=False)

        brought_forward = ZERO
        if start_date:
            for invoice in invoices.filter(created_at__date__lt=start_date):
                brought_forward += invoice.receivable_amount
            for txn in transactions.filter(date__lt=start_date):
                if txn.type == CashFlowTransaction.TYPE_INCOME:
                    brought_forward -= txn.credit
                else:
                    brought_forward += txn.amount

        entries = []
        for invoice in filter_by_day(invoices, 'created_at', start_date, end_date).order_by('created_at', 'id'):
            entries.append(_line(
                timezone.localdate(invoice.created_at), f"Invoice #{invoice.invoice_number}", 'Invoice',
                debit=invoice.receivable_amount,
            ))
        for txn in filter_by_day(transactions, 'date', start_date, end_date).order_by('date', 'id'):
            if txn.type == CashFlowTransaction.TYPE_INCOME:
                entries.append(_line(txn.date, _payment_particulars(txn), 'Payment', credit=txn.credit))
            else:
                entries.append(_line(
                    txn.date, txn.description or f"Refund - {txn.method}", 'Refund', debit=txn.amount,
                ))

        return {
            'entity_name': buyer.buyer_name,
            'outstanding': buyer.outstanding,
            'balance_brought_forward': brought_forward,
            'entries': entries,
        }

    @staticmethod
    def _supplier_ledger(supplier, start_date, end_date):
        invoices = SupplierInvoice.objects.filter(supplier=supplier)
        transactions = PartyReportService._party_transactions(supplier, supplier_side=True)

        brought_forward = ZERO
        if start_date:
            for invoice in invoices.filter(created_at__date__lt=start_date):
                brought_forward += invoice.nett_amount
            for txn in transactions.filter(date__lt=start_date):
                if txn.type == CashFlowTransaction.TYPE_EXPENSE:
                    brought_forward -= txn.credit
                else:
                    brought_forward += txn.amount

        entries = []
        for invoice in filter_by_day(invoices, 'created_at', start_date, end_date).order_by('created_at', 'id'):
            entries.append(_line(
                timezone.localdate(invoice.created_at), f"Invoice #{invoice.invoice_number}", 'Invoice',
                credit=invoice.nett_amount,
            ))
        for txn in filter_by_day(transactions, 'date', start_date, end_date).order_by('date', 'id'):
            if txn.type == CashFlowTransaction.TYPE_EXPENSE:
                entries.append(_line(txn.date, _payment_particulars(txn), 'Payment', debit=txn.credit))
            else:
                entries.append(_line(
                    txn.date, txn.description or f"Refund - {txn.method}", 'Refund', credit=txn.amount,
                ))

        return {
            'entity_name': supplier.supplier_name,
            # Stored negative while we owe; the statement shows it as payable.
            'outstanding': abs(supplier.outstanding),
            'balance_brought_forward': brought_forward,
            'entries': entries,
        }

    # ===== BALANCE SHEETS =====

    @staticmethod
    def get_buyer_balance_sheet(as_of_date=None):
        """
        Every buyer's stored outstanding with the date of their latest invoice.

        Balances are the running totals kept on each buyer; as_of_date only
        labels the report (defaults to today).
        """
        as_of_date = to_date(as_of_date) or timezone.localdate()
        buyers = Buyer.objects.annotate(last_invoice_at=Max('invoices__created_at')).order_by('buyer_name', 'id')

        balances = []
        for buyer in buyers:
            balances.append({
                'id': buyer.pk,
                'buyer_name': buyer.buyer_name,
                'contact_number': buyer.contact_number,
                'balance': buyer.outstanding,
                'last_invoice_date': timezone.localdate(buyer.last_invoice_at) if buyer.last_invoice_at else None,
            })

        return {
            'as_of_date': str(as_of_date),
            'balances': balances,
            'total': sum((row['balance'] for row in balances), ZERO),
        }

    @staticmethod
    def get_supplier_balance_sheet(as_of_date=None):
        """Every supplier's stored outstanding; negative means we owe them."""
        as_of_date = to_date(as_of_date) or timezone.localdate()
        balances = [
            {
                'id': supplier.pk,
                'supplier_name': supplier.supplier_name,
                'contact_number': supplier.contact_number,
                'balance': supplier.outstanding,
            }
            for supplier in Supplier.objects.order_by('supplier_name', 'id')
        ]
        return {
            'as_of_date': str(as_of_date),
            'balances': balances,
            'total': sum((row['balance'] for row in balances), ZERO),
        }

    # ===== AGING =====

    @staticmethod
    def get_invoice_aging(as_of_date=None):
        """
        Unpaid buyer invoices grouped by buyer and bucketed by age.

        Age is whole days from the invoice date to as_of_date (default
        today). Invoices dated after as_of_date and invoices with nothing
        left to pay are left out.

        Returns:
        {
            'as_of_date': str,
            'buyers': [
                {
                    'buyer_id': int,
                    'buyer_name': str,
                    'days_0_30': Decimal,
                    'days_31_60': Decimal,
                    'days_61_90': Decimal,
                    'days_over_90': Decimal,
                    'total_overdue': Decimal,
                    'invoices': [...],
                },
                ...
            ],
            'totals': {<bucket>: Decimal, ..., 'total_overdue': Decimal},
            'buyer_count': int,
        }
        """
        as_of_date = to_date(as_of_date) or timezone.localdate()
        open_invoices = (
            Invoice.objects
            .filter(created_at__date__lte=as_of_date)
            .select_related('buyer')
            .order_by('buyer__buyer_name', 'created_at', 'id')
        )

        buyers = defaultdict(lambda: {
            'buyer_id': None,
            'buyer_name': '',
            'days_0_30': ZERO,
            'days_31_60': ZERO,
            'days_61_90': ZERO,
            'days_over_90': ZERO,
            'total_overdue': ZERO,
            'invoices': [],
        })

        for invoice in open_invoices:
            balance = invoice.balance_due
            if balance <= 0:
                continue

            invoice_date = timezone.localdate(invoice.created_at)
            days_old = (as_of_date - invoice_date).days
            bucket = _aging_bucket(days_old)

            row = buyers[invoice.buyer_id]
            row['buyer_id'] = invoice.buyer_id
            row['buyer_name'] = invoice.buyer.buyer_name
            row[bucket] += balance
            row['total_overdue'] += balance
            row['invoices'].append({
                'invoice_id': invoice.pk,
                'invoice_number': invoice.invoice_number,
                'invoice_date': str(invoice_date),
                'nett_amount': invoice.nett_amount,
                'paid_amount': invoice.paid_amount,
                'balance': balance,
                'days_old': days_old,
                'bucket': bucket,
            })

        buyer_list = sorted(buyers.values(), key=lambda row: row['buyer_name'])
        totals = {key: sum((row[key] for row in buyer_list), ZERO) for key in AGING_BUCKETS + ('total_overdue',)}

        return {
            'as_of_date': str(as_of_date),
            'buyers': buyer_list,
            'totals': totals,
            'buyer_count': len(buyer_list),
        }
