# apps/api/v1/views/base.py
"""
Shared pieces for views that call the service layer.

Domain errors raised by services subclass APIException, so DRF's default
exception handler already returns them with their status code and payload.
"""
from apps.audit.services import Actor


class ServiceViewMixin:
    """Gives views the acting user and the common date-range query params."""

    @property
    def actor(self):
        return Actor.from_user(self.request.user)

    def date_range(self):
        params = self.request.query_params
        return params.get('start_date'), params.get('end_date')
