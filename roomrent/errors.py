"""
Domain errors raised by the service layer.

The HTTP layer maps each class to a status code; everything else is a bug
and surfaces as a 500.
"""


class ServiceError(Exception):
    """Base class for expected, client-facing failures."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    status_code = 400


class ForbiddenError(ServiceError):
    status_code = 403


class NotFoundError(ServiceError):
    status_code = 404


class ConflictError(ServiceError):
    status_code = 409
