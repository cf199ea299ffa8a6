# apps/audit/services.py
"""
Audit sink used by every mutating service.

record() is fire-and-forget: the row is written inside its own savepoint so
a failing insert neither aborts the caller's transaction nor propagates.
"""
import logging
from dataclasses import dataclass

from django.db import DatabaseError, transaction

from .models import AuditLog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Actor:
    """Already-authenticated identity performing an operation."""
    id: str
    name: str

    @classmethod
    def system(cls):
        return cls(id='system', name='System')

    @classmethod
    def from_user(cls, user):
        if user is None or not getattr(user, 'is_authenticated', False):
            return cls.system()
        get_name = getattr(user, 'get_display_name', None)
        name = get_name() if get_name else user.get_username()
        return cls(id=str(user.pk), name=name)


def record(actor, action, feature, description):
    """Append an audit record. Returns the AuditLog, or None if the write failed."""
    actor = actor or Actor.system()
    try:
        with transaction.atomic():
            return AuditLog.objects.create(
                actor_id=actor.id,
                actor_name=actor.name,
                action=action,
                feature=feature,
                description=description,
            )
    except DatabaseError:
        logger.exception("Failed to record audit log: %s %s by %s", action, feature, actor.id)
        return None
