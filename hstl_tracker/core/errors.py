"""
Error Taxonomy
Exceptions raised by the services and translated to JSON responses by the app.
"""
from typing import Dict, Iterable, Optional


class TrackerError(Exception):
    """Base error carrying an HTTP status and a user-facing message."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        self.message = message or self.default_message
        self.headers = headers or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, str]:
        return {"message": self.message}


class ValidationError(TrackerError):
    """Missing or invalid input."""
    status_code = 400
    default_message = "Missing required fields"


class Unauthorized(TrackerError):
    """No credential presented."""
    status_code = 401
    default_message = "Unauthorized"


class InvalidCredentials(Unauthorized):
    """Submitted password does not match the configured hash."""
    default_message = "Invalid password"


class InvalidToken(Unauthorized):
    """Bearer token is garbled, badly signed, expired or lacks the admin claim."""
    default_message = "Invalid token"


class MethodNotAllowed(TrackerError):
    status_code = 405
    default_message = "Method not allowed"

    def __init__(self, method: str, allowed: Iterable[str]):
        self.allowed = sorted(set(allowed))
        super().__init__(
            f"Method {method} not allowed",
            headers={"Allow": ", ".join(self.allowed)},
        )


class InternalError(TrackerError):
    """Store or cryptographic primitive failure."""
    status_code = 500


class StoreError(InternalError):
    """The recruitment store could not complete an operation."""
