# apps/auction/services.py
"""
Auction workflow for one entry.

AuctionSession holds an entry's items while a clerk assigns buyers, rates
and weights on the floor. Items are edited in memory and saved one at a
time; each save rewrites the entry's item list through EntryService with
the version the session loaded, so a save based on an out-of-date view of
the entry is rejected with StaleEntryError instead of overwriting someone
else's edit.
"""
import logging
import uuid
from dataclasses import dataclass, asdict
from decimal import Decimal

from apps.entries.services import EntryService
from apps.entries.status import CANCELLED, INVOICED
from shared.exceptions import ConflictError, NotFoundError, ServiceValidationError
from shared.money import ZERO, money, to_decimal
from .exceptions import ItemValidationError

logger = logging.getLogger(__name__)

TEMP_PREFIX = 'temp_'

# Edits to these fields leave the item unsaved until save_item().
TRACKED_FIELDS = {'product_id', 'quantity', 'rate_per_quantity', 'buyer_id', 'gross_weight', 'shute_weight'}
EDITABLE_FIELDS = TRACKED_FIELDS | {'has_weight'}
SUB_TOTAL_FIELDS = {'quantity', 'rate_per_quantity', 'gross_weight', 'shute_weight', 'has_weight'}


@dataclass
class AuctionItem:
    id: str
    product_id: int = None
    quantity: Decimal = Decimal('1')
    gross_weight: Decimal = ZERO
    shute_weight: Decimal = ZERO
    nett_weight: Decimal = ZERO
    rate_per_quantity: Decimal = None
    buyer_id: int = None
    sub_total: Decimal = ZERO
    sub_serial_number: int = 0
    invoice_id: int = None
    supplier_invoice_id: int = None
    has_weight: bool = False
    is_saved: bool = False

    @classmethod
    def from_entry_item(cls, item):
        return cls(
            id=str(item.pk),
            product_id=item.product_id,
            quantity=item.quantity,
            gross_weight=item.gross_weight,
            shute_weight=item.shute_weight,
            nett_weight=item.nett_weight,
            rate_per_quantity=item.rate_per_quantity,
            buyer_id=item.buyer_id,
            sub_total=item.sub_total,
            sub_serial_number=item.sub_serial_number,
            invoice_id=item.invoice_id,
            supplier_invoice_id=item.supplier_invoice_id,
            has_weight=item.has_weight,
            is_saved=bool(item.buyer_id),
        )

    @property
    def is_temporary(self):
        return self.id.startswith(TEMP_PREFIX)

    def as_entry_data(self):
        """Payload accepted by EntryService.update_entry."""
        data = asdict(self)
        for key in ('is_saved', 'invoice_id', 'supplier_invoice_id', 'sub_serial_number'):
            data.pop(key)
        return data


def validate_item(item):
    """Return the set of required fields the item is missing; empty means it can be saved."""
    errors = set()
    if not item.product_id:
        errors.add('product_id')
    if not item.quantity or to_decimal(item.quantity) <= 0:
        errors.add('quantity')
    if item.rate_per_quantity is None or to_decimal(item.rate_per_quantity) <= 0:
        errors.add('rate_per_quantity')
    if not item.buyer_id:
        errors.add('buyer_id')
    return errors


def calculate_sub_total(item):
    """nett_weight * rate for weighed lots, quantity * rate otherwise."""
    rate = to_decimal(item.rate_per_quantity)
    if item.has_weight and to_decimal(item.gross_weight) > 0:
        return money(to_decimal(item.nett_weight) * rate)
    return money(to_decimal(item.quantity) * rate)


def update_item(item, field, value):
    """
    Apply one field edit and recompute the derived values.

    Weight edits recompute nett_weight; quantity, rate, weight and the
    weight toggle recompute sub_total. Returns the item.
    """
    if field not in EDITABLE_FIELDS:
        raise ServiceValidationError(f"Field '{field}' cannot be edited during auction", field=field)

    if field == 'has_weight':
        value = bool(value)
    elif field in ('product_id', 'buyer_id'):
        value = value or None
    elif field == 'rate_per_quantity':
        value = None if value in (None, '') else to_decimal(value)
    else:
        value = to_decimal(value)
    setattr(item, field, value)

    if field in ('gross_weight', 'shute_weight'):
        item.nett_weight = to_decimal(item.gross_weight) - to_decimal(item.shute_weight)

    if field in SUB_TOTAL_FIELDS:
        item.sub_total = calculate_sub_total(item)

    if field in TRACKED_FIELDS:
        item.is_saved = False
    return item


class AuctionSession:
    """
    In-memory auction of one entry.

    Usage:
        session = AuctionSession.load(entry.id, actor=actor)
        item = session.add_item()
        session.update_item(item.id, 'product_id', product.id)
        session.update_item(item.id, 'buyer_id', buyer.id)
        session.update_item(item.id, 'rate_per_quantity', 50)
        session.save_item(item.id)
    """

    def __init__(self, entry, actor=None):
        self.actor = actor
        self.entry_service = EntryService(actor)
        self._apply_entry(entry)

    @classmethod
    def load(cls, entry_id, actor=None, expected_version=None):
        """
        Open an entry for auction.

        ``expected_version`` pins the session to a version the caller saw
        earlier (stateless API requests); saves then fail if it moved on.
        """
        entry = EntryService(actor).get_entry(entry_id)
        session = cls(entry, actor=actor)
        if expected_version is not None:
            session.version = int(expected_version)
        return session

    def reload(self):
        """Discard local state and reread the entry."""
        self._apply_entry(self.entry_service.get_entry(self.entry.pk))

    @property
    def is_locked(self):
        return self.entry.status in (INVOICED, CANCELLED)

    @property
    def total(self):
        return sum((item.sub_total or ZERO for item in self.items), ZERO)

    def get_item(self, item_id):
        for item in self.items:
            if item.id == str(item_id):
                return item
        raise NotFoundError(f"Item {item_id} not found on entry {self.entry.serial_number}", id=str(item_id))

    def add_item(self):
        """Append a blank item; it becomes a real entry item once saved."""
        item = AuctionItem(id=f"{TEMP_PREFIX}{uuid.uuid4().hex[:12]}")
        self.items.append(item)
        return item

    def update_item(self, item_id, field, value):
        return update_item(self.get_item(item_id), field, value)

    def save_item(self, item_id):
        """
        Validate one item and persist it.

        Other items are written as last saved, so their pending edits stay
        pending. Never-saved items other than this one are left out.
        """
        if self.is_locked:
            raise ConflictError(f"Entry {self.entry.serial_number} is {self.entry.status}; items cannot be edited")
        item = self.get_item(item_id)
        errors = validate_item(item)
        if errors:
            raise ItemValidationError(item_id, errors)

        payload = []
        for other in self.items:
            if other is item:
                payload.append(other.as_entry_data())
            elif other.id in self._saved:
                payload.append(self._saved[other.id])

        known = set(self._saved)
        entry = self._write(payload)
        if item.is_temporary:
            new_ids = [str(row.pk) for row in entry.items.all() if str(row.pk) not in known]
            fresh_id = new_ids[0]
        else:
            fresh_id = item.id
        return self._sync(entry, saved_item=item, saved_id=fresh_id)

    def remove_item(self, item_id):
        """Drop an item and rewrite the entry; unsaved items are only dropped locally."""
        if self.is_locked:
            raise ConflictError(f"Entry {self.entry.serial_number} is {self.entry.status}; items cannot be removed")
        item = self.get_item(item_id)
        if item.is_temporary:
            self.items.remove(item)
            return
        payload = [self._saved[other.id] for other in self.items if other.id in self._saved and other is not item]
        entry = self._write(payload)
        self.items.remove(item)
        self._sync(entry)

    def _write(self, payload):
        entry = self.entry_service.update_entry(
            self.entry.pk,
            payload,
            expected_version=self.version,
        )
        logger.info("Auction save on entry %s, version %d", entry.serial_number, entry.version)
        return entry

    def _apply_entry(self, entry):
        self.entry = entry
        self.version = entry.version
        self.items = [AuctionItem.from_entry_item(item) for item in entry.items.all()]
        self._saved = {item.id: item.as_entry_data() for item in self.items}

    def _sync(self, entry, saved_item=None, saved_id=None):
        """
        Take numbering, links and saved snapshots from the stored entry
        while keeping other items' pending edits. Returns the refreshed
        copy of ``saved_item``.
        """
        stored = {str(row.pk): AuctionItem.from_entry_item(row) for row in entry.items.all()}
        refreshed = None
        items = []
        for item in self.items:
            if item is saved_item:
                refreshed = stored[saved_id]
                refreshed.is_saved = True
                items.append(refreshed)
                continue
            fresh = stored.get(item.id)
            if fresh is not None:
                item.sub_serial_number = fresh.sub_serial_number
                item.invoice_id = fresh.invoice_id
                item.supplier_invoice_id = fresh.supplier_invoice_id
            items.append(item)

        self.entry = entry
        self.version = entry.version
        self.items = items
        self._saved = {key: value.as_entry_data() for key, value in stored.items()}
        return refreshed
