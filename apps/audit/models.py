# apps/audit/models.py
"""
Audit trail of user-visible business actions.

AuditLog rows are append-only. They are written as a side effect of every
mutating service call and are never read back by the ledger itself.
"""
from django.db import models
from django.utils import timezone


class AuditLog(models.Model):
    """
    One business action performed by an actor.

    Example:
        actor: 'Admin'
        action: 'Create'
        feature: 'BuyerInvoices'
        description: "Created buyer invoice BI-20240305-001 for 'Ravi'. Total: 500."
    """
    ACTION_CHOICES = [
        ('Create', 'Create'),
        ('Update', 'Update'),
        ('Delete', 'Delete'),
    ]

    actor_id = models.CharField(
        max_length=64,
        help_text="Identifier of the user (or 'system') who acted"
    )
    actor_name = models.CharField(
        max_length=255,
        help_text="Display name snapshot at the time of the action"
    )
    action = models.CharField(
        max_length=20,
        choices=ACTION_CHOICES,
    )
    feature = models.CharField(
        max_length=50,
        db_index=True,
        help_text="Feature area, e.g. Entries, BuyerInvoices, CashFlow"
    )
    description = models.TextField()
    timestamp = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ['-timestamp', '-id']

    def __str__(self):
        return f"{self.timestamp:%Y-%m-%d %H:%M} {self.actor_name} {self.action} {self.feature}"
