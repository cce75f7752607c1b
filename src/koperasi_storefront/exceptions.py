"""Exception hierarchy for the storefront service.

Each exception carries the HTTP status and user-facing notice it maps to at the
API boundary. Services raise these; the API handler converts them to JSON
responses so no failure propagates past a single request.
"""


class StorefrontError(Exception):
    """Base class for all storefront errors."""

    status_code: int = 500
    notice: str = "Something went wrong"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.notice)
        self.message = message or self.notice


class ValidationError(StorefrontError):
    """Form or field constraint violated before any backend call."""

    status_code = 422
    notice = "Invalid input"


class AuthRequired(StorefrontError):
    """No session is present; the client should redirect to login."""

    status_code = 401
    notice = "You must log in first"
    redirect_to = "/auth"


class PermissionDenied(StorefrontError):
    """Authenticated actor lacks the admin role."""

    status_code = 403
    notice = "Access denied. You are not an admin."
    redirect_to = "/"


class AuthenticationError(StorefrontError):
    """Login or registration rejected by the session service."""

    status_code = 401
    notice = "Login failed"


class NotFoundError(StorefrontError):
    """Requested record does not exist or is not visible to the actor."""

    status_code = 404
    notice = "Not found"


class InvalidTransition(StorefrontError):
    """Order status change rejected by the strict transition table."""

    status_code = 409
    notice = "Order status change is not allowed"

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot transition order from {current} to {target}")
        self.current = current
        self.target = target


class BackendError(StorefrontError):
    """A call to the hosted backend failed."""

    status_code = 502
    notice = "The backend is unavailable, please try again"


class BackendReadError(BackendError):
    """A read from the document store failed."""


class BackendWriteError(BackendError):
    """A create, update or delete against the backend failed."""

    notice = "Failed to save changes, please try again"


class PartialWriteError(BackendWriteError):
    """Order creation left records behind that could not be rolled back."""

    notice = "Failed to create order"

    def __init__(self, order_id: str, message: str | None = None) -> None:
        super().__init__(message or f"Order {order_id} was only partially written")
        self.order_id = order_id


class DataIntegrityError(BackendError):
    """A backend record does not match the expected entity shape."""

    notice = "Stored data is malformed"
