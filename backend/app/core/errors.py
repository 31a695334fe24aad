"""
Domain exceptions raised by the service layer.

Services never raise HTTPException; the handlers registered in app.main
translate these into JSON responses.
"""
import re
from typing import Any, Optional

from fastapi import status


class DomainError(Exception):
    """Base class for errors that map onto a client-facing status code."""
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str, errors: Optional[dict[str, Any]] = None):
        super().__init__(detail)
        self.detail = detail
        self.errors = errors or {}


class NotFoundError(DomainError):
    """A referenced record does not exist."""
    status_code = status.HTTP_404_NOT_FOUND


class BusinessRuleError(DomainError):
    """The request is well formed but breaks a business rule."""
    status_code = status.HTTP_400_BAD_REQUEST


class OperationForbiddenError(DomainError):
    """The operation is not allowed on this record any more."""
    status_code = status.HTTP_403_FORBIDDEN


class ConflictError(DomainError):
    """A uniqueness constraint was violated."""
    status_code = status.HTTP_409_CONFLICT


# SQLite: "UNIQUE constraint failed: memberships.invoice_number"
_SQLITE_UNIQUE = re.compile(r"UNIQUE constraint failed: [\w]+\.(\w+)")
# PostgreSQL: 'Key (invoice_number)=(2324-00001) already exists.'
_PG_KEY = re.compile(r"Key \((\w+)\)=")
# Naming convention from app.db.base: uq_<table>_<column>
_PG_CONSTRAINT = re.compile(r"\"uq_[a-z]+_(\w+)\"")


def integrity_error_field(message: str) -> str:
    """Best-effort extraction of the column named in a unique violation."""
    for pattern in (_SQLITE_UNIQUE, _PG_KEY, _PG_CONSTRAINT):
        match = pattern.search(message)
        if match:
            return match.group(1)
    return "record"
