# apps/entries/services.py
"""
Entry service for supplier intake.

EntryService handles:
- Creating the day's entry for a supplier (one per supplier per day)
- Daily serial numbering (MMDD-NNN)
- Rewriting an entry's items, with item renumbering before auction and
  frozen numbering after
- Refreshing the derived status after invoicing links or unlinks items
- Deleting entries that nothing has been billed against
"""
import logging

from django.db import IntegrityError, transaction
from django.db.models import ProtectedError
from django.utils import timezone

from apps.audit.services import record
from apps.parties.models import Buyer, Product, Supplier
from apps.parties.services import coerce_pk
from shared.dates import filter_by_day, to_date
from shared.exceptions import ConflictError, NotFoundError, ServiceValidationError
from shared.money import ZERO, money, to_decimal
from .exceptions import DuplicateEntryError, StaleEntryError
from .models import Entry, EntryItem
from .status import compute_status

logger = logging.getLogger(__name__)

FEATURE = 'Entries'


def _item_pk(value):
    """Persisted item ids are integers; client-side ids such as 'temp_...' are new items."""
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


class EntryService:
    """
    Service for entry lifecycle operations.

    Usage:
        service = EntryService(actor)

        entry = service.create_entry(supplier.id, [{'product_id': p.id, 'quantity': 10}])
        entry = service.update_entry(entry.id, items, expected_version=entry.version)
        service.delete_entry(entry.id)
    """

    def __init__(self, actor=None):
        self.actor = actor

    # ===== QUERIES =====

    def get_entry(self, entry_id):
        entry = Entry.objects.filter(pk=coerce_pk(entry_id)).select_related('supplier').first()
        if entry is None:
            raise NotFoundError.for_model(Entry, entry_id)
        return entry

    def list_entries(self, start_date=None, end_date=None):
        """Entries newest first, optionally limited to an inclusive range of intake days."""
        qs = Entry.objects.select_related('supplier').prefetch_related('items')
        qs = filter_by_day(qs, 'entry_date', start_date, end_date)
        return qs.order_by('-created_at', '-id')

    # ===== CREATE =====

    def create_entry(self, supplier_id, items, entry_date=None):
        """
        Record a supplier's delivery for the day.

        Args:
            supplier_id: Supplier delivering the goods
            items: list of dicts with product_id, quantity and optional weights
            entry_date: intake day (defaults to today)

        Returns:
            Entry with items numbered 1..n and status Pending

        Raises:
            DuplicateEntryError: the supplier already has an entry that day
        """
        supplier = Supplier.objects.filter(pk=coerce_pk(supplier_id)).first()
        if supplier is None:
            raise NotFoundError.for_model(Supplier, supplier_id)
        day = to_date(entry_date) or timezone.localdate()

        existing = Entry.objects.filter(supplier=supplier, entry_date=day).first()
        if existing is not None:
            raise DuplicateEntryError(existing)

        rows = [self._clean_item(data) for data in items]
        for row in rows:
            row.setdefault('has_weight', row['gross_weight'] > 0)

        try:
            with transaction.atomic():
                entry = Entry.objects.create(
                    serial_number=self._next_serial_number(day),
                    supplier=supplier,
                    entry_date=day,
                    total_quantities=sum((row['quantity'] for row in rows), ZERO),
                    total_amount=ZERO,
                    last_sub_serial_number=len(rows),
                )
                EntryItem.objects.bulk_create([
                    EntryItem(entry=entry, sub_serial_number=index, **dict(row, sub_total=ZERO))
                    for index, row in enumerate(rows, start=1)
                ])
        except IntegrityError:
            existing = Entry.objects.filter(supplier=supplier, entry_date=day).first()
            if existing is not None:
                raise DuplicateEntryError(existing)
            raise

        logger.info("Created entry %s for supplier %s with %d item(s)", entry.serial_number, supplier.pk, len(rows))
        record(
            self.actor, 'Create', FEATURE,
            f"Created entry {entry.serial_number} for supplier '{supplier.supplier_name}' with {len(rows)} item(s).",
        )
        return entry

    # ===== UPDATE =====

    def update_entry(self, entry_id, items, expected_version=None, has_supplier_invoice_linkage=False):
        """
        Rewrite an entry's item list.

        Before auction (no item has a buyer, stored or incoming) items are
        renumbered 1..n in the given order. Afterwards matched items keep
        their number and new items continue from last_sub_serial_number.

        Invoice links are owned by invoicing: they are kept on matched items
        and never taken from ``items``.

        Raises:
            StaleEntryError: ``expected_version`` given and the entry has moved on
            ConflictError: an item on a buyer or supplier invoice would be removed
        """
        rows = []
        for data in items:
            row = self._clean_item(data)
            row['pk'] = _item_pk(data.get('id'))
            row['sub_total'] = money(data.get('sub_total'))
            rows.append(row)

        with transaction.atomic():
            entry = Entry.objects.select_for_update().filter(pk=coerce_pk(entry_id)).first()
            if entry is None:
                raise NotFoundError.for_model(Entry, entry_id)
            if expected_version is not None and int(expected_version) != entry.version:
                raise StaleEntryError(entry, expected_version)

            existing = {item.pk: item for item in entry.items.all()}
            is_auctioned = (
                any(item.buyer_id for item in existing.values())
                or any(row['buyer_id'] for row in rows)
            )

            kept_pks = {row['pk'] for row in rows if row['pk'] in existing}
            removed = [item for pk, item in existing.items() if pk not in kept_pks]
            for item in removed:
                if item.invoice_id or item.supplier_invoice_id:
                    raise ConflictError(
                        f"Cannot remove item {item.sub_serial_number}: it is on an invoice",
                        item_id=item.pk,
                    )
            EntryItem.objects.filter(pk__in=[item.pk for item in removed]).delete()

            last_number = entry.last_sub_serial_number
            final_items = []
            for index, row in enumerate(rows, start=1):
                pk = row.pop('pk')
                item = existing.get(pk)
                if item is None:
                    item = EntryItem(entry=entry)
                    row.setdefault('has_weight', row['gross_weight'] > 0)
                    if is_auctioned:
                        last_number += 1
                        item.sub_serial_number = last_number
                if not is_auctioned:
                    item.sub_serial_number = index
                for field, value in row.items():
                    setattr(item, field, value)
                item.save()
                final_items.append(item)

            if not is_auctioned:
                last_number = len(final_items)

            entry.last_sub_serial_number = last_number
            entry.total_quantities = sum((item.quantity for item in final_items), ZERO)
            entry.total_amount = sum((item.sub_total for item in final_items), ZERO)
            entry.status = compute_status(final_items, has_supplier_invoice_linkage)
            entry.version += 1
            entry.save()

        logger.info("Updated entry %s to version %d (%d item(s))", entry.serial_number, entry.version, len(final_items))
        record(
            self.actor, 'Update', FEATURE,
            f"Updated entry {entry.serial_number} with {len(final_items)} item(s).",
        )
        return entry

    def refresh_status(self, entry, has_supplier_invoice_linkage=None):
        """
        Recompute and store status after invoicing changed item links.

        Linkage defaults to whether a supplier invoice claims the entry.
        Called inside the invoicing transaction; bumps the version so any
        auction session holding the entry must reload.
        """
        entry = Entry.objects.select_for_update().get(pk=entry.pk)
        if has_supplier_invoice_linkage is None:
            has_supplier_invoice_linkage = entry.has_supplier_invoice
        entry.status = compute_status(entry.items.all(), has_supplier_invoice_linkage)
        entry.version += 1
        entry.save(update_fields=['status', 'version', 'updated_at'])
        return entry

    # ===== DELETE =====

    def delete_entry(self, entry_id):
        """
        Delete an entry nothing has been billed against.

        Raises:
            ConflictError: an item is on a buyer invoice or a supplier invoice
        """
        with transaction.atomic():
            entry = Entry.objects.select_for_update().filter(pk=coerce_pk(entry_id)).first()
            if entry is None:
                raise NotFoundError.for_model(Entry, entry_id)
            if entry.items.filter(invoice__isnull=False).exists():
                raise ConflictError('Cannot delete entry with invoiced items')
            if entry.has_supplier_invoice or entry.items.filter(supplier_invoice__isnull=False).exists():
                raise ConflictError('Cannot delete entry that is on a supplier invoice')
            serial = entry.serial_number
            try:
                entry.delete()
            except ProtectedError:
                raise ConflictError('Cannot delete entry that is on a supplier invoice')

        logger.info("Deleted entry %s", serial)
        record(self.actor, 'Delete', FEATURE, f"Deleted entry {serial}.")

    # ===== HELPERS =====

    def _next_serial_number(self, day):
        """MMDD-NNN, continuing from the highest number already issued that day."""
        issued = Entry.objects.filter(entry_date=day).values_list('serial_number', flat=True)
        counter = max((int(serial.rsplit('-', 1)[1]) for serial in issued), default=0) + 1
        return f"{day:%m%d}-{counter:03d}"

    def _clean_item(self, data):
        """Validate references and coerce numbers for one incoming item."""
        product_id = data.get('product_id')
        if not product_id:
            raise ServiceValidationError('Every item needs a product', field='product_id')
        if not Product.objects.filter(pk=coerce_pk(product_id)).exists():
            raise NotFoundError.for_model(Product, product_id)

        buyer_id = data.get('buyer_id') or None
        if buyer_id is not None and not Buyer.objects.filter(pk=coerce_pk(buyer_id)).exists():
            raise NotFoundError.for_model(Buyer, buyer_id)

        gross = to_decimal(data.get('gross_weight'))
        shute = to_decimal(data.get('shute_weight'))
        rate = data.get('rate_per_quantity')
        row = {
            'product_id': product_id,
            'quantity': to_decimal(data.get('quantity')),
            'gross_weight': gross,
            'shute_weight': shute,
            'nett_weight': gross - shute,
            'rate_per_quantity': None if rate in (None, '') else to_decimal(rate),
            'buyer_id': buyer_id,
        }
        if data.get('has_weight') is not None:
            row['has_weight'] = bool(data['has_weight'])
        return row
