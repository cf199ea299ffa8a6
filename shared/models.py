# shared/models.py
"""
Abstract base models for the entire application.

TimestampMixin: Adds created_at and updated_at timestamps
"""
from django.db import models
from django.utils import timezone


class TimestampMixin(models.Model):
    """
    Abstract base model that adds timestamp tracking.

    Provides:
    - created_at: Defaults to now, but may be backdated by services
      (invoices accept an explicit creation date)
    - updated_at: Updated every time record is saved
    """
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
