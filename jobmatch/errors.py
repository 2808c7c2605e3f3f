"""
Typed errors raised by the service layer.

Routers never build HTTP errors for business failures themselves; they let
these propagate and ``main.py`` maps them to a JSON response in one place.
"""
from __future__ import annotations

from typing import Any


class JobMatchError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message}


class NotFoundError(JobMatchError):
    """Entity absent, or not owned by the caller."""

    status_code = 404


class ConflictError(JobMatchError):
    """Illegal state transition or duplicate resource."""

    status_code = 400


class AuthError(JobMatchError):
    """Missing, invalid or expired credentials (401), or a forbidden actor (403)."""

    status_code = 401


class ValidationError(JobMatchError):
    status_code = 400

    def __init__(self, message: str = "Validation failed", errors: list[dict] | None = None):
        super().__init__(message)
        self.errors = errors or []

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message, "errors": self.errors}


def field_errors(errors: list[dict]) -> list[dict]:
    """Flatten pydantic error dicts into ``{"field", "message"}`` pairs."""
    out = []
    for e in errors:
        loc = [str(p) for p in e.get("loc", ()) if p not in ("body", "query", "path")]
        out.append({"field": ".".join(loc), "message": e.get("msg", "")})
    return out
