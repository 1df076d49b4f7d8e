"""
Domain errors raised by services and policies.

Routes let these propagate; the handler registered in main.py renders them as
``{"message": ..., "code": ...}`` with the status code carried by the class.
Authentication and ownership guards inside routes keep using HTTPException.
"""

from fastapi import status


class DomainError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "error"
    default_message: str = "Request could not be completed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_message = "Not found."


class ForbiddenError(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    default_message = "This action is unauthorized."


class ValidationError(DomainError):
    status_code = 422
    code = "validation_error"
    default_message = "The given data was invalid."


class CapacityExceededError(DomainError):
    status_code = 422
    code = "capacity_exceeded"
    default_message = "Maximum reactions reached."


class ConflictError(DomainError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"
    default_message = "The resource was modified concurrently, please retry."
