"""
exceptions.py
=============
Voyage Central exception hierarchy.

Services raise these; routers translate them into HTTP responses with
``to_http_exception``.

VoyageError
├── ValidationError        400
├── PermissionDeniedError  403
├── NotFoundError          404
├── ConflictError          409
└── NumberingError         500
"""
from typing import Dict, List, Optional

from fastapi import HTTPException, status


class VoyageError(Exception):
    """Base exception for all application errors."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "", *, code: str = "", errors: Optional[Dict[str, List[str]]] = None):
        super().__init__(message)
        self.message = message
        self.code = code              # machine-readable code e.g. "AGENCY_NOT_FOUND"
        self.errors = errors or {}    # field name -> messages

    def to_detail(self) -> dict:
        detail = {"message": self.message}
        if self.code:
            detail["code"] = self.code
        if self.errors:
            detail["fields"] = self.errors
        return {"errors": detail}

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=self.status_code, detail=self.to_detail())


class ValidationError(VoyageError):
    """Raised when request data or uploaded files fail validation."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "Validation failed", **kwargs):
        super().__init__(message, **kwargs)


class PermissionDeniedError(VoyageError):
    """Raised when the current user may not perform the action."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(VoyageError):
    """Raised when a requested record does not exist."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str = "", id_value=None, **kwargs):
        if entity and id_value is not None:
            message = f"{entity} with ID {id_value} not found."
        elif entity:
            message = f"{entity} not found."
        else:
            message = kwargs.pop("message", "Record not found.")
        super().__init__(message, **kwargs)
        self.entity = entity
        self.id_value = id_value


class ConflictError(VoyageError):
    """Raised when a unique constraint would be violated."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, entity: str = "", field: str = "", value=None, **kwargs):
        if entity and field:
            message = f"{entity} with {field} {value!r} already exists."
        else:
            message = kwargs.pop("message", "Duplicate record.")
        if field and "errors" not in kwargs:
            kwargs["errors"] = {field: [message]}
        super().__init__(message, **kwargs)
        self.entity = entity
        self.field = field
        self.value = value


class NumberingError(VoyageError):
    """Raised when a document number cannot be issued."""
