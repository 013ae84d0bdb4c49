"""Error taxonomy shared by services and the HTTP layer."""

from fastapi import status


class IdentityServiceError(Exception):
    """Base error carrying the HTTP status and the message shown to callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.public_message)
        if message is not None:
            self.public_message = message


class InvalidRequest(IdentityServiceError):
    """Malformed or insufficient input."""

    status_code = status.HTTP_400_BAD_REQUEST
    public_message = "Invalid request"


class NotFound(IdentityServiceError):
    """Target record is absent or already soft-deleted."""

    status_code = status.HTTP_404_NOT_FOUND
    public_message = "Contact not found"


class ConfirmationRequired(IdentityServiceError):
    """Bulk destructive operation called without explicit confirmation."""

    status_code = status.HTTP_400_BAD_REQUEST
    public_message = "Bulk delete requires confirm=true"


class StoreUnavailable(IdentityServiceError):
    """Contact store connectivity, timeout or transaction failure. Safe to retry."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message = "Internal server error"


class InvariantViolation(IdentityServiceError):
    """Stored clusters are inconsistent (no primary, dangling secondary)."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        # Internal details go to the logs only
        super().__init__(message)
        self.public_message = "Internal server error"
