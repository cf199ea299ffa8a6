# apps/invoicing/services.py
"""
Invoicing services for buyers and suppliers.

BuyerInvoiceService handles:
- Listing a buyer's auctioned items that are not yet billed
- Creating buyer invoices (with optional payments taken at the counter)
- Updating and deleting buyer invoices with a full revert-then-reapply of
  balances and item links
- Buyer purchase statistics

SupplierInvoiceService handles:
- Settling whole entries for a supplier, net of commission and wages
- Updating and deleting settlements with the same revert-then-reapply
- Settlement analytics

Every mutation runs in a single transaction; balances move only through
BalanceService.
"""
import logging
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.db.models import Q, Sum
from django.utils import timezone

from apps.audit.services import record
from apps.cashflow.models import CashFlowTransaction
from apps.cashflow.services import CashFlowService
from apps.entries.models import Entry, EntryItem
from apps.entries.services import EntryService
from apps.parties.models import Buyer, Product, Supplier
from apps.parties.services import BalanceService, coerce_pk
from shared.dates import filter_by_day, to_datetime
from shared.exceptions import ConflictError, NotFoundError, ServiceValidationError
from shared.money import ZERO, ceil_whole, money, round_whole, to_decimal
from .exceptions import DuplicateInvoicingError
from .models import Invoice, InvoiceLine, SupplierInvoice, SupplierInvoiceEntry, SupplierInvoiceLine

logger = logging.getLogger(__name__)

HUNDRED = Decimal('100')


def next_invoice_number(model, prefix):
    """
    {prefix}-{YYYY}{MM}{DDD}-{NNN} for today.

    The day is zero-padded to three digits, matching every number issued
    so far. The counter continues from the highest number issued today.
    """
    today = timezone.localdate()
    stem = f"{prefix}-{today.year}{today.month:02d}{today.day:03d}-"
    issued = model.objects.filter(invoice_number__startswith=stem).values_list('invoice_number', flat=True)
    counter = max((int(number[len(stem):]) for number in issued), default=0) + 1
    return f"{stem}{counter:03d}"


def _ids(values):
    """Normalize a list of ids or {'id': ...} dicts to ints, keeping order and dropping repeats."""
    result = []
    for value in values or []:
        raw = value.get('id') if isinstance(value, dict) else value
        pk = coerce_pk(raw)
        if pk is None:
            raise ServiceValidationError(f"Invalid id: {raw!r}", value=str(raw))
        if pk not in result:
            result.append(pk)
    return result


def _get(model, pk, lock=False):
    qs = model.objects.select_for_update() if lock else model.objects
    obj = qs.filter(pk=coerce_pk(pk)).first()
    if obj is None:
        raise NotFoundError.for_model(model, pk)
    return obj


class BuyerInvoiceService:
    """
    Service for buyer invoices.

    Usage:
        service = BuyerInvoiceService(actor)

        items = service.get_uninvoiced_items_for_buyer(buyer.id)
        invoice = service.create_invoice(buyer.id, [i.id for i in items], wages=50)
        service.delete_invoice(invoice.id)
    """
    FEATURE = 'BuyerInvoices'

    def __init__(self, actor=None):
        self.actor = actor
        self.balances = BalanceService()
        self.entries = EntryService(actor)
        self.ledger = CashFlowService(actor)

    # ===== QUERIES =====

    def get_invoice(self, invoice_id):
        return _get(Invoice, invoice_id)

    def list_invoices(self, start_date=None, end_date=None):
        qs = Invoice.objects.select_related('buyer').prefetch_related('lines')
        return filter_by_day(qs, 'created_at', start_date, end_date).order_by('-created_at', '-id')

    def get_uninvoiced_items_for_buyer(self, buyer_id):
        """Auctioned items bought by the buyer and not yet on a buyer invoice, oldest entry first."""
        return (
            EntryItem.objects.filter(buyer_id=coerce_pk(buyer_id), invoice__isnull=True)
            .select_related('entry', 'entry__supplier', 'product')
            .order_by('entry__created_at', 'entry_id', 'sub_serial_number')
        )

    def get_buyer_stats(self, buyer_id):
        """Totals over every invoice issued to the buyer."""
        buyer = _get(Buyer, buyer_id)
        totals = Invoice.objects.filter(buyer=buyer).aggregate(
            total_buys=Sum('nett_amount'),
            total_item_value=Sum('total_amount'),
            total_payments=Sum('paid_amount'),
            total_discounts=Sum('discount'),
            total_wages=Sum('wages'),
            positive_adjustments=Sum('adjustments', filter=Q(adjustments__gt=0)),
            negative_adjustments=Sum('adjustments', filter=Q(adjustments__lt=0)),
        )
        return {key: value or ZERO for key, value in totals.items()}

    # ===== CREATE =====

    def create_invoice(self, buyer_id, items, wages=0, adjustments=0, discount=0, created_at=None, payments=None):
        """
        Bill a buyer for auctioned items.

        Args:
            buyer_id: Buyer being billed
            items: entry item ids (or dicts with an 'id') bought by the buyer
            wages, adjustments, discount: invoice-level amounts
            created_at: optional invoice date
            payments: optional list of {amount, discount, method, reference}
                taken at the counter; each becomes an Income transaction

        Returns:
            Invoice
        """
        with transaction.atomic():
            buyer = _get(Buyer, buyer_id)
            entry_items = self._lock_items(items, buyer)

            invoice = Invoice(
                invoice_number=next_invoice_number(Invoice, 'BI'),
                buyer=buyer,
                wages=money(wages),
                adjustments=money(adjustments),
                discount=money(discount),
                paid_amount=ZERO,
                formula_version=Invoice.FORMULA_CURRENT,
            )
            if created_at:
                invoice.created_at = to_datetime(created_at)
            self._apply_totals(invoice, entry_items)
            invoice.save()
            self._write_lines(invoice, entry_items)

            self.balances.adjust_buyer(buyer.pk, invoice.nett_amount, reason=f"Invoice {invoice.invoice_number}")

            for payment in payments or []:
                self._record_payment(invoice, buyer, payment)
            if invoice.paid_amount:
                invoice.save(update_fields=['paid_amount', 'updated_at'])

            self._refresh_entries(self._link_items(invoice, entry_items))

        logger.info(
            "Created buyer invoice %s for buyer %s: nett %s, paid %s",
            invoice.invoice_number, buyer.pk, invoice.nett_amount, invoice.paid_amount,
        )
        record(
            self.actor, 'Create', self.FEATURE,
            f"Created buyer invoice {invoice.invoice_number} for '{buyer.buyer_name}'. "
            f"Total: {invoice.nett_amount}. Paid: {invoice.paid_amount}.",
        )
        return invoice

    # ===== UPDATE =====

    def update_invoice(self, invoice_id, buyer_id, items, wages=0, adjustments=0, discount=0, created_at=None):
        """
        Rewrite a buyer invoice.

        The amount the invoice originally charged is taken off the old
        buyer and its items are unlinked, then totals are recomputed with
        the current formula and charged to the (possibly different) buyer.
        """
        with transaction.atomic():
            invoice = _get(Invoice, invoice_id, lock=True)
            buyer = _get(Buyer, buyer_id)
            entry_items = self._lock_items(items, buyer, invoice=invoice)

            self.balances.adjust_buyer(
                invoice.buyer_id, -invoice.receivable_amount,
                reason=f"Revert invoice {invoice.invoice_number}", missing_ok=True,
            )
            touched = self._unlink_items(invoice)
            invoice.lines.all().delete()

            invoice.buyer = buyer
            invoice.wages = money(wages)
            invoice.adjustments = money(adjustments)
            invoice.discount = money(discount)
            invoice.formula_version = Invoice.FORMULA_CURRENT
            if created_at:
                invoice.created_at = to_datetime(created_at)
            self._apply_totals(invoice, entry_items)
            invoice.save()
            self._write_lines(invoice, entry_items)

            self.balances.adjust_buyer(buyer.pk, invoice.nett_amount, reason=f"Invoice {invoice.invoice_number}")
            touched |= self._link_items(invoice, entry_items)
            self._refresh_entries(touched)

        logger.info("Updated buyer invoice %s: nett %s", invoice.invoice_number, invoice.nett_amount)
        record(
            self.actor, 'Update', self.FEATURE,
            f"Updated buyer invoice {invoice.invoice_number}. New Total: {invoice.nett_amount}.",
        )
        return invoice

    # ===== DELETE =====

    def delete_invoice(self, invoice_id):
        """
        Delete a buyer invoice.

        Advance payments linked to it are kept as standalone credit. Other
        payments linked to it are deleted and their credit is taken back
        from the buyer they were recorded against, if any.
        """
        with transaction.atomic():
            invoice = _get(Invoice, invoice_id, lock=True)
            number = invoice.invoice_number
            self.balances.adjust_buyer(
                invoice.buyer_id, -invoice.receivable_amount,
                reason=f"Delete invoice {number}", missing_ok=True,
            )

            linked = CashFlowTransaction.objects.select_for_update().linked_to_invoice(
                invoice.pk, CashFlowTransaction.TYPE_INCOME,
            )
            for txn in linked:
                if txn.category == CashFlowTransaction.CATEGORY_ADVANCE:
                    txn.unlink_invoice(invoice.pk)
                    txn.save(update_fields=['related_invoice_ids', 'updated_at'])
                else:
                    self.ledger.apply_balance_effect(txn, sign=-1)
                    txn.delete()

            touched = self._unlink_items(invoice)
            invoice.delete()
            self._refresh_entries(touched)

        logger.info("Deleted buyer invoice %s (%d linked transaction(s))", number, len(linked))
        record(self.actor, 'Delete', self.FEATURE, f"Deleted buyer invoice {number}.")

    # ===== HELPERS =====

    def _lock_items(self, items, buyer, invoice=None):
        ids = _ids(items)
        if not ids:
            raise ServiceValidationError('Select at least one item to invoice', field='items')

        rows = {
            row.pk: row
            for row in EntryItem.objects.select_for_update().select_related('entry', 'product').filter(pk__in=ids)
        }
        result = []
        for pk in ids:
            row = rows.get(pk)
            if row is None:
                raise NotFoundError.for_model(EntryItem, pk)
            if row.buyer_id != buyer.pk:
                raise ServiceValidationError(
                    f"Item {row} was not bought by '{buyer.buyer_name}'", item_id=pk,
                )
            if row.invoice_id and (invoice is None or row.invoice_id != invoice.pk):
                raise ConflictError(f"Item {row} is already on another invoice", item_id=pk)
            result.append(row)
        return result

    def _apply_totals(self, invoice, entry_items):
        invoice.total_quantities = sum((item.quantity for item in entry_items), ZERO)
        invoice.total_amount = sum((item.sub_total for item in entry_items), ZERO)
        invoice.nett_amount = invoice.total_amount + invoice.wages + invoice.adjustments - invoice.discount

    def _write_lines(self, invoice, entry_items):
        InvoiceLine.objects.bulk_create([
            InvoiceLine(
                invoice=invoice,
                entry_item=item,
                entry_serial_number=item.entry.serial_number,
                sub_serial_number=item.sub_serial_number,
                product_id=item.product_id,
                product_name=item.product.product_name,
                quantity=item.quantity,
                gross_weight=item.gross_weight,
                shute_weight=item.shute_weight,
                nett_weight=item.nett_weight,
                rate_per_quantity=item.rate_per_quantity or ZERO,
                sub_total=item.sub_total,
            )
            for item in entry_items
        ])

    def _record_payment(self, invoice, buyer, payment):
        amount = money(payment.get('amount'))
        payment_discount = money(payment.get('discount'))
        credit = amount + payment_discount
        if credit <= 0:
            return None

        txn = CashFlowTransaction.objects.create(
            date=timezone.localdate(invoice.created_at),
            type=CashFlowTransaction.TYPE_INCOME,
            category=CashFlowTransaction.CATEGORY_SALES,
            entity_id=str(buyer.pk),
            entity_name=buyer.buyer_name,
            amount=amount,
            discount=payment_discount,
            method=payment.get('method') or CashFlowTransaction.METHOD_CASH,
            reference=payment.get('reference') or '',
            description=f"Payment for invoice {invoice.invoice_number}",
            related_invoice_ids=[invoice.pk],
        )
        invoice.paid_amount += credit
        self.balances.adjust_buyer(buyer.pk, -credit, reason=f"Payment for {invoice.invoice_number}")
        return txn

    def _link_items(self, invoice, entry_items):
        EntryItem.objects.filter(pk__in=[item.pk for item in entry_items]).update(invoice=invoice)
        return {item.entry_id for item in entry_items}

    def _unlink_items(self, invoice):
        touched = set(invoice.entry_items.values_list('entry_id', flat=True))
        invoice.entry_items.update(invoice=None)
        return touched

    def _refresh_entries(self, entry_ids):
        for entry in Entry.objects.filter(pk__in=entry_ids):
            self.entries.refresh_status(entry)


class SupplierInvoiceService:
    """
    Service for supplier settlements.

    Usage:
        service = SupplierInvoiceService(actor)

        invoice = service.create_invoice(
            supplier.id, [entry.id],
            items=[{'product_id': p.id, 'quantity': 10, 'rate_per_quantity': 50, 'sub_total': 500}],
            commission_rate=5,
        )
    """
    FEATURE = 'SupplierInvoices'

    def __init__(self, actor=None):
        self.actor = actor
        self.balances = BalanceService()
        self.entries = EntryService(actor)
        self.ledger = CashFlowService(actor)

    # ===== QUERIES =====

    def get_invoice(self, invoice_id):
        return _get(SupplierInvoice, invoice_id)

    def list_invoices(self, start_date=None, end_date=None):
        qs = SupplierInvoice.objects.select_related('supplier').prefetch_related('lines', 'entry_links')
        return filter_by_day(qs, 'created_at', start_date, end_date).order_by('-created_at', '-id')

    def get_analytics(self):
        """Settlement totals plus the top five suppliers by open payable and by purchases."""
        invoice_count = 0
        total_purchase_value = ZERO
        total_amount_paid = ZERO
        by_supplier = {}

        for invoice in SupplierInvoice.objects.select_related('supplier'):
            invoice_count += 1
            total_purchase_value += invoice.nett_amount
            total_amount_paid += invoice.paid_amount
            data = by_supplier.setdefault(
                invoice.supplier_id,
                {'name': invoice.supplier.supplier_name, 'payable': ZERO, 'purchases': ZERO},
            )
            data['payable'] += invoice.balance_due
            data['purchases'] += invoice.nett_amount

        suppliers = list(by_supplier.values())
        top_by_payable = sorted(
            (s for s in suppliers if s['payable'] > 0), key=lambda s: s['payable'], reverse=True,
        )[:5]
        top_by_purchases = sorted(suppliers, key=lambda s: s['purchases'], reverse=True)[:5]

        return {
            'stats': {
                'invoice_count': invoice_count,
                'total_purchase_value': total_purchase_value,
                'total_amount_paid': total_amount_paid,
                'total_payables': total_purchase_value - total_amount_paid,
            },
            'top_suppliers_by_payable': [{'name': s['name'], 'value': s['payable']} for s in top_by_payable],
            'top_suppliers_by_purchases': [{'name': s['name'], 'value': s['purchases']} for s in top_by_purchases],
        }

    # ===== CREATE =====

    def create_invoice(self, supplier_id, entry_ids, items, commission_rate=None,
                       wages=0, adjustments=0, advance_paid=0):
        """
        Settle entries for a supplier.

        Args:
            supplier_id: Supplier being settled
            entry_ids: entries covered; each may be on one supplier invoice only
            items: lines with product_id, quantity, rate_per_quantity,
                sub_total and optionally entry_item_id
            commission_rate: percent of gross (defaults to DEFAULT_COMMISSION_RATE)
            wages, adjustments, advance_paid: settlement amounts

        Raises:
            DuplicateInvoicingError: an entry is already on another supplier invoice
        """
        entry_ids = self._clean_entry_ids(entry_ids)
        if commission_rate is None:
            commission_rate = settings.AUCTION_SETTINGS['DEFAULT_COMMISSION_RATE']

        with transaction.atomic():
            supplier = _get(Supplier, supplier_id)
            entries = self._lock_entries(entry_ids, supplier)
            self._check_exclusive(entry_ids)
            lines = self._build_lines(items, entries)

            invoice = SupplierInvoice(
                invoice_number=next_invoice_number(SupplierInvoice, 'SI'),
                supplier=supplier,
                commission_rate=to_decimal(commission_rate),
                wages=money(wages),
                adjustments=money(adjustments),
                advance_paid=money(advance_paid),
                status=SupplierInvoice.STATUS_UNPAID,
            )
            self._apply_totals(invoice, lines)
            invoice.paid_amount = invoice.advance_paid
            invoice.save()
            self._attach(invoice, lines, entries)

            self.balances.adjust_supplier(
                supplier.pk, -invoice.nett_amount, reason=f"Invoice {invoice.invoice_number}",
            )
            self._link_entries(invoice, entries, lines)

        logger.info(
            "Created supplier invoice %s for supplier %s: gross %s, commission %s, nett %s",
            invoice.invoice_number, supplier.pk, invoice.gross_total, invoice.commission_amount, invoice.nett_amount,
        )
        record(
            self.actor, 'Create', self.FEATURE,
            f"Created supplier invoice {invoice.invoice_number} for '{supplier.supplier_name}'. "
            f"Nett: {invoice.nett_amount}.",
        )
        return invoice

    # ===== UPDATE =====

    def update_invoice(self, invoice_id, supplier_id, entry_ids, items, commission_rate=None,
                       wages=0, adjustments=0, advance_paid=0, status=None):
        """
        Rewrite a settlement.

        The old nett is given back to the old supplier and every item link
        is cleared, then totals are recomputed, charged to the (possibly
        different) supplier and the entries relinked. ``status`` overrides
        the payment status when given; paid_amount is left as it is.
        """
        entry_ids = self._clean_entry_ids(entry_ids)
        valid_statuses = {choice for choice, _ in SupplierInvoice.STATUS_CHOICES}
        if status and status not in valid_statuses:
            raise ServiceValidationError(f"Unknown status '{status}'", field='status')

        with transaction.atomic():
            invoice = _get(SupplierInvoice, invoice_id, lock=True)
            supplier = _get(Supplier, supplier_id)
            entries = self._lock_entries(entry_ids, supplier)
            self._check_exclusive(entry_ids, exclude=invoice)
            lines = self._build_lines(items, entries)

            self.balances.adjust_supplier(
                invoice.supplier_id, invoice.nett_amount,
                reason=f"Revert invoice {invoice.invoice_number}", missing_ok=True,
            )
            previous_entry_ids = set(invoice.entry_links.values_list('entry_id', flat=True))
            invoice.entry_items.update(supplier_invoice=None)
            invoice.entry_links.all().delete()
            invoice.lines.all().delete()

            invoice.supplier = supplier
            if commission_rate is not None:
                invoice.commission_rate = to_decimal(commission_rate)
            invoice.wages = money(wages)
            invoice.adjustments = money(adjustments)
            invoice.advance_paid = money(advance_paid)
            if status:
                invoice.status = status
            self._apply_totals(invoice, lines)
            invoice.save()
            self._attach(invoice, lines, entries)

            self.balances.adjust_supplier(
                supplier.pk, -invoice.nett_amount, reason=f"Invoice {invoice.invoice_number}",
            )
            self._link_entries(invoice, entries, lines)
            dropped = previous_entry_ids - {entry.pk for entry in entries}
            for entry in Entry.objects.filter(pk__in=dropped):
                self.entries.refresh_status(entry)

        logger.info("Updated supplier invoice %s: nett %s", invoice.invoice_number, invoice.nett_amount)
        record(
            self.actor, 'Update', self.FEATURE,
            f"Updated supplier invoice {invoice.invoice_number} for '{supplier.supplier_name}'.",
        )
        return invoice

    # ===== DELETE =====

    def delete_invoice(self, invoice_id):
        """
        Delete a settlement.

        Linked advance payments stay as standalone credit; linked supplier
        payments are deleted and their effect reversed on the supplier they
        were recorded against, if any.
        """
        with transaction.atomic():
            invoice = _get(SupplierInvoice, invoice_id, lock=True)
            number = invoice.invoice_number
            self.balances.adjust_supplier(
                invoice.supplier_id, invoice.nett_amount,
                reason=f"Delete invoice {number}", missing_ok=True,
            )

            linked = CashFlowTransaction.objects.select_for_update().linked_to_invoice(
                invoice.pk, CashFlowTransaction.TYPE_EXPENSE,
            )
            for txn in linked:
                if txn.category == CashFlowTransaction.CATEGORY_ADVANCE:
                    txn.unlink_invoice(invoice.pk)
                    txn.save(update_fields=['related_invoice_ids', 'updated_at'])
                elif txn.category == CashFlowTransaction.CATEGORY_SUPPLIER_PAYMENT:
                    self.ledger.apply_balance_effect(txn, sign=-1)
                    txn.delete()

            entry_ids = list(invoice.entry_links.values_list('entry_id', flat=True))
            invoice.entry_items.update(supplier_invoice=None)
            invoice.entry_links.all().delete()
            invoice.delete()
            for entry in Entry.objects.filter(pk__in=entry_ids):
                self.entries.refresh_status(entry)

        logger.info("Deleted supplier invoice %s", number)
        record(self.actor, 'Delete', self.FEATURE, f"Deleted supplier invoice {number}")

    # ===== HELPERS =====

    def _clean_entry_ids(self, entry_ids):
        if not isinstance(entry_ids, (list, tuple)):
            raise ServiceValidationError('entryIds must be an array', field='entry_ids')
        ids = _ids(entry_ids)
        if not ids:
            raise ServiceValidationError('entryIds cannot be empty', field='entry_ids')
        return ids

    def _lock_entries(self, entry_ids, supplier):
        found = {entry.pk: entry for entry in Entry.objects.select_for_update().filter(pk__in=entry_ids)}
        entries = []
        for pk in entry_ids:
            entry = found.get(pk)
            if entry is None:
                raise NotFoundError.for_model(Entry, pk)
            if entry.supplier_id != supplier.pk:
                raise ServiceValidationError(
                    f"Entry {entry.serial_number} belongs to another supplier", entry_id=pk,
                )
            entries.append(entry)
        return entries

    def _check_exclusive(self, entry_ids, exclude=None):
        claims = SupplierInvoiceEntry.objects.filter(entry_id__in=entry_ids).select_related('supplier_invoice')
        if exclude is not None:
            claims = claims.exclude(supplier_invoice=exclude)
        claims = list(claims)
        if claims:
            first = claims[0].supplier_invoice
            conflicting = [claim.entry_id for claim in claims if claim.supplier_invoice_id == first.pk]
            logger.warning(
                "Duplicate invoicing rejected: entries %s already on %s", conflicting, first.invoice_number,
            )
            raise DuplicateInvoicingError(first.invoice_number, conflicting)

    def _build_lines(self, items, entries):
        if not isinstance(items, (list, tuple)) or not items:
            raise ServiceValidationError('items cannot be empty', field='items')

        entry_pks = {entry.pk for entry in entries}
        lines = []
        for data in items:
            if not data.get('product_id'):
                raise ServiceValidationError('Every line needs a product', field='product_id')
            product = _get(Product, data.get('product_id'))
            entry_item_id = coerce_pk(data.get('entry_item_id'))
            if entry_item_id is not None and not EntryItem.objects.filter(
                pk=entry_item_id, entry_id__in=entry_pks,
            ).exists():
                raise ServiceValidationError(
                    f"Item {entry_item_id} is not on the selected entries", entry_item_id=entry_item_id,
                )
            gross = to_decimal(data.get('gross_weight'))
            shute = to_decimal(data.get('shute_weight'))
            nett = data.get('nett_weight')
            lines.append(SupplierInvoiceLine(
                entry_item_id=entry_item_id,
                product=product,
                product_name=data.get('product_name') or product.product_name,
                quantity=to_decimal(data.get('quantity')),
                gross_weight=gross,
                shute_weight=shute,
                nett_weight=gross - shute if nett in (None, '') else to_decimal(nett),
                rate_per_quantity=to_decimal(data.get('rate_per_quantity')),
                sub_total=money(data.get('sub_total')),
            ))
        return lines

    def _apply_totals(self, invoice, lines):
        invoice.total_quantities = sum((line.quantity for line in lines), ZERO)
        invoice.gross_total = round_whole(sum((line.sub_total for line in lines), ZERO))
        invoice.commission_amount = ceil_whole(invoice.gross_total * invoice.commission_rate / HUNDRED)
        invoice.nett_amount = round_whole(
            invoice.gross_total - invoice.commission_amount - invoice.wages + invoice.adjustments
        )
        invoice.final_payable = round_whole(invoice.nett_amount - invoice.advance_paid)

    def _attach(self, invoice, lines, entries):
        for line in lines:
            line.supplier_invoice = invoice
        SupplierInvoiceLine.objects.bulk_create(lines)
        SupplierInvoiceEntry.objects.bulk_create([
            SupplierInvoiceEntry(supplier_invoice=invoice, entry=entry) for entry in entries
        ])

    def _link_entries(self, invoice, entries, lines):
        """
        Link entry items to the invoice.

        Lines naming an entry item link exactly that item. Other lines
        link every item on the entries with the same product and a rate
        within RATE_MATCH_TOLERANCE, so an entry can be partly linked.
        """
        tolerance = settings.AUCTION_SETTINGS['RATE_MATCH_TOLERANCE']
        named = {line.entry_item_id for line in lines if line.entry_item_id}
        unnamed = [line for line in lines if not line.entry_item_id]

        matched = []
        for item in EntryItem.objects.filter(entry__in=entries):
            if item.pk in named or (
                item.rate_per_quantity is not None
                and any(
                    line.product_id == item.product_id
                    and abs(line.rate_per_quantity - item.rate_per_quantity) < tolerance
                    for line in unnamed
                )
            ):
                matched.append(item.pk)

        EntryItem.objects.filter(pk__in=matched).update(supplier_invoice=invoice)
        for entry in entries:
            self.entries.refresh_status(entry, has_supplier_invoice_linkage=True)
        logger.info(
            "Linked %d item(s) across %d entries to %s", len(matched), len(entries), invoice.invoice_number,
        )
