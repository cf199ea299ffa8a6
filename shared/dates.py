"""
Date parsing for query parameters and service arguments.

Date-range filters are inclusive calendar days in the active timezone.
"""
from datetime import date, datetime, time

from django.db import models
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from .exceptions import ServiceValidationError


def to_date(value):
    """Coerce a date, datetime or ISO string to a date; empty values become None."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            return timezone.localdate(value)
        return value.date()
    if isinstance(value, date):
        return value
    parsed = parse_date(str(value)[:10])
    if parsed is None:
        raise ServiceValidationError(f"Invalid date: {value}", value=str(value))
    return parsed


def to_datetime(value):
    """Coerce to an aware datetime; a bare date means the start of that day."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value if timezone.is_aware(value) else timezone.make_aware(value)
    if isinstance(value, str):
        parsed = parse_datetime(value)
        if parsed is not None:
            return parsed if timezone.is_aware(parsed) else timezone.make_aware(parsed)
    day = to_date(value)
    return timezone.make_aware(datetime.combine(day, time.min))


def filter_by_day(queryset, field, start_date=None, end_date=None):
    """Limit ``queryset`` to rows whose ``field`` falls within the inclusive day range."""
    start_date, end_date = to_date(start_date), to_date(end_date)
    lookup = f"{field}__date" if _is_datetime_field(queryset.model, field) else field
    if start_date:
        queryset = queryset.filter(**{f"{lookup}__gte": start_date})
    if end_date:
        queryset = queryset.filter(**{f"{lookup}__lte": end_date})
    return queryset


def _is_datetime_field(model, field):
    return isinstance(model._meta.get_field(field), models.DateTimeField)
