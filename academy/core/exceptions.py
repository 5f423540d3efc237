"""
Service Exceptions

Error taxonomy shared by the services and the backend gateways.

Each error is an HTTPException so FastAPI renders it directly; the detail
carries a machine-readable code next to the human message.
"""

from typing import Optional

from fastapi import HTTPException, status


class ServiceError(HTTPException):
    """Base class for errors raised by the service layer."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "service_error"

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        if code is not None:
            self.code = code
        super().__init__(
            status_code=type(self).status_code,
            detail={"message": message, "code": self.code},
        )

    def __str__(self) -> str:
        return self.message


class ValidationError(ServiceError):
    """A required field is missing or a precondition does not hold."""

    status_code = 422
    code = "validation_error"


class NotFoundError(ServiceError):
    """A referenced enrollment, course or lesson does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class BackendError(ServiceError):
    """The backend could not be reached or rejected the query."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "backend_error"
