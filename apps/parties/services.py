# apps/parties/services.py
"""
Party services.

BalanceService is the only code path allowed to change Buyer/Supplier
``outstanding``. Each call locks the party row for the rest of the
surrounding transaction, so concurrent invoice and payment operations on
the same party are applied one after the other instead of overwriting each
other.

PartyService guards deletion of parties that still carry a balance.
"""
import logging

from django.db import transaction
from django.db.models import ProtectedError

from apps.audit.services import record
from shared.exceptions import ConflictError, NotFoundError
from shared.money import to_decimal
from .models import Buyer, Supplier

logger = logging.getLogger(__name__)


def coerce_pk(pk):
    """Party ids arrive as ints or strings; anything non-numeric matches nothing."""
    try:
        return int(pk)
    except (TypeError, ValueError):
        return None


class BalanceService:
    """
    Serialized entry point for outstanding-balance mutations.

    Usage:
        balances = BalanceService()
        balances.adjust_buyer(buyer.id, Decimal('500.00'), reason='Invoice BI-...')
        balances.adjust_supplier(supplier.id, Decimal('-475.00'), reason='Invoice SI-...')
    """

    def adjust_buyer(self, buyer_id, delta, reason='', missing_ok=False):
        """Add ``delta`` to a buyer's receivable. Returns the updated Buyer."""
        return self._adjust(Buyer, buyer_id, delta, reason, missing_ok)

    def adjust_supplier(self, supplier_id, delta, reason='', missing_ok=False):
        """Add ``delta`` to a supplier's payable. Returns the updated Supplier."""
        return self._adjust(Supplier, supplier_id, delta, reason, missing_ok)

    def set_outstanding(self, party, value, reason=''):
        """Overwrite a balance (drift repair only)."""
        model = type(party)
        with transaction.atomic():
            locked = model.objects.select_for_update().get(pk=party.pk)
            old = locked.outstanding
            locked.outstanding = to_decimal(value)
            locked._change_reason = reason or 'Balance repair'
            locked.save(update_fields=['outstanding', 'updated_at'])
        logger.warning(
            "%s %s outstanding overwritten %s -> %s (%s)",
            model.__name__, locked.pk, old, locked.outstanding, reason,
        )
        return locked

    def _adjust(self, model, pk, delta, reason, missing_ok):
        delta = to_decimal(delta)
        lookup = coerce_pk(pk)

        with transaction.atomic():
            party = None
            if lookup is not None:
                party = model.objects.select_for_update().filter(pk=lookup).first()

            if party is None:
                if missing_ok:
                    logger.warning("%s not found for id %r, balance change %s skipped", model.__name__, pk, delta)
                    return None
                raise NotFoundError.for_model(model, pk)

            if not delta:
                return party

            party.outstanding = party.outstanding + delta
            party._change_reason = reason[:100] if reason else None
            party.save(update_fields=['outstanding', 'updated_at'])

        logger.info("%s %s outstanding %+.2f -> %s %s", model.__name__, party.pk, delta, party.outstanding, reason)
        return party


class PartyService:
    """Lifecycle operations for buyers and suppliers that touch balances."""

    def __init__(self, actor=None):
        self.actor = actor

    def delete_buyer(self, buyer_id):
        buyer = self._get(Buyer, buyer_id)
        self._delete_if_settled(buyer, 'Buyers', buyer.buyer_name)

    def delete_supplier(self, supplier_id):
        supplier = self._get(Supplier, supplier_id)
        self._delete_if_settled(supplier, 'Suppliers', supplier.supplier_name)

    def _get(self, model, pk):
        lookup = coerce_pk(pk)
        party = model.objects.filter(pk=lookup).first() if lookup is not None else None
        if party is None:
            raise NotFoundError.for_model(model, pk)
        return party

    def _delete_if_settled(self, party, feature, name):
        label = type(party).__name__.lower()
        if party.outstanding != 0:
            raise ConflictError(
                f"Cannot delete {label} with outstanding balance",
                outstanding=str(party.outstanding),
            )
        pk = party.pk
        try:
            party.delete()
        except ProtectedError:
            raise ConflictError(f"Cannot delete {label} '{name}': it is referenced by existing records")
        record(self.actor, 'Delete', feature, f"Deleted {label} '{name}' (id {pk}).")
