"""Typed service errors, rendered into the JSON error envelope by ``blinky.main``."""
from __future__ import annotations


class ServiceError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ServiceError):
    status_code = 400
    default_message = "Invalid input"


class Unauthorized(ServiceError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(ServiceError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(ServiceError):
    status_code = 404
    default_message = "Not found"


class Conflict(ServiceError):
    status_code = 409
    default_message = "Conflict"


class InternalError(ServiceError):
    status_code = 500


class DeliveryError(InternalError):
    """The OTP exists in storage but the email carrying it could not be sent."""

    default_message = "Failed to send verification email"
