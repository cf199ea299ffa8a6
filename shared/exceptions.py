# shared/exceptions.py
"""
Domain exception taxonomy shared by every app.

All errors are raised by the service layer before (validation, conflicts)
or during (missing references) a mutation. They subclass DRF's
APIException so the API layer can return them as structured responses
without translating each one.

Hierarchy:
    ServiceError
    ├── NotFoundError            404
    ├── ConflictError            409
    └── ServiceValidationError   400
"""
from rest_framework import status
from rest_framework.exceptions import APIException


class ServiceError(APIException):
    """Base exception for ledger service errors."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'The operation could not be completed.'
    default_code = 'service_error'

    def __init__(self, message=None, **extra):
        self.message = message or str(self.default_detail)
        self.extra = extra
        detail = {'message': self.message, 'code': self.default_code}
        detail.update(extra)
        super().__init__(detail=detail, code=self.default_code)

    def __str__(self):
        return self.message


class NotFoundError(ServiceError):
    """A referenced Entry, Invoice, Transaction, Buyer or Supplier does not exist."""
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Record not found.'
    default_code = 'not_found'

    @classmethod
    def for_model(cls, model, pk):
        return cls(f"{model._meta.verbose_name.capitalize()} {pk} not found", model=model.__name__, id=pk)


class ConflictError(ServiceError):
    """The operation conflicts with the current state of a record."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'The record is in a state that does not allow this operation.'
    default_code = 'conflict'


class ServiceValidationError(ServiceError):
    """Request data is malformed for the requested operation."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid data.'
    default_code = 'invalid'
