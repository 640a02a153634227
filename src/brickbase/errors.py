"""Domain error taxonomy.

Learn: Services raise these instead of HTTPException so they stay usable
outside a request (CLI, tests). Each error carries the HTTP status the
API layer maps it to; routes translate them with to_http().
"""

from fastapi import HTTPException


class BrickBaseError(Exception):
    """Base class for every named failure in the service."""

    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_http(self) -> HTTPException:
        return HTTPException(status_code=self.status_code, detail=self.message)


class Unauthenticated(BrickBaseError):
    status_code = 401
    default_message = "Unauthorized Access"

    def to_http(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail=self.message,
            headers={"WWW-Authenticate": "Bearer"},
        )


class Forbidden(BrickBaseError):
    status_code = 403
    default_message = "Forbidden Access"


class InvalidId(BrickBaseError):
    status_code = 400
    default_message = "Invalid ID"


class DuplicateAgreement(BrickBaseError):
    status_code = 400
    default_message = "User already has an existing agreement (pending or approved)."


class ApartmentOccupied(BrickBaseError):
    status_code = 400
    default_message = "This apartment is already assigned to a member."


class InvalidTransition(BrickBaseError):
    status_code = 400
    default_message = "Invalid status transition"


class NotFound(BrickBaseError):
    status_code = 404
    default_message = "Not found"


class StoreUnavailable(BrickBaseError):
    """The database timed out or could not be reached."""

    status_code = 500


class PaymentProviderError(BrickBaseError):
    status_code = 502
    default_message = "Payment provider request failed"


class IdentityProviderUnavailable(BrickBaseError):
    """The identity provider's signing keys could not be fetched."""

    status_code = 500
