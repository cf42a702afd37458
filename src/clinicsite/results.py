"""Tagged success/failure values returned by validators and services."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel


class FailureKind(StrEnum):
    """Why an operation did not succeed."""

    INVALID = "invalid"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    CONFLICT = "conflict"


class Result(BaseModel):
    """Outcome of a validation or store operation.

    ``data`` carries the payload on success; ``error`` carries a message
    that is safe to show to the end user on failure.
    """

    success: bool
    data: Any = None
    error: str = ""
    failure: FailureKind | None = None

    @classmethod
    def ok(cls, data: Any = None) -> Result:
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, failure: FailureKind = FailureKind.INVALID) -> Result:
        return cls(success=False, error=error, failure=failure)

    @classmethod
    def not_found(cls, error: str) -> Result:
        return cls.fail(error, FailureKind.NOT_FOUND)
