# app/core/exceptions.py
"""
Domain errors raised by the service layer.

Routes never build error responses for these themselves; the handlers
registered in app.main render every subclass as {"error": ..., "code": ...}.
"""
from typing import Optional


class BookingAppError(Exception):
    """Base class for all expected application errors"""
    status_code = 500
    code = "error"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class ValidationError(BookingAppError):
    """Malformed or logically invalid input. Never retried."""
    status_code = 400
    code = "validation_error"


class NotFoundError(BookingAppError):
    """A referenced service, booking or block does not exist"""
    status_code = 404
    code = "not_found"


class ServiceNotFoundError(NotFoundError):
    """
    The requested service is unknown or was deleted.

    Kept distinct so the booking wizard can refresh its catalog instead of
    retrying with a stale service id.
    """
    code = "service_not_found"

    def __init__(self, service_id=None):
        super().__init__("Service not found")
        self.service_id = service_id


class ConflictError(BookingAppError):
    """The requested slot was claimed by another booking"""
    status_code = 409
    code = "slot_unavailable"

    def __init__(self, message: str = "The selected time is no longer available, please pick a different time"):
        super().__init__(message)


class ExternalSyncError(BookingAppError):
    """The external calendar call failed. Callers treat this as non-fatal."""
    status_code = 502
    code = "calendar_sync_failed"
