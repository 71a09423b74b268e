from __future__ import annotations

from dataclasses import dataclass, field

from fastapi import status


@dataclass(eq=False)
class BlogException(Exception):
    message: str
    code: str = "error"
    details: dict | None = None

    def __str__(self) -> str:
        return self.message


class ValidationError(BlogException):
    code = "validation_error"


@dataclass(eq=False)
class PostFormError(ValidationError):
    """Submitted post form failed validation; carries what the form needs to re-render."""

    errors: list[str] = field(default_factory=list)
    title: str = ""
    body: str = ""


class NotFoundError(BlogException):
    code = "not_found"


class DatabaseError(BlogException):
    code = "database_error"


EXC_TO_STATUS: dict[type[BlogException], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    DatabaseError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(exc: BlogException) -> int:
    for typ, st in EXC_TO_STATUS.items():
        if isinstance(exc, typ):
            return st
    return status.HTTP_400_BAD_REQUEST

