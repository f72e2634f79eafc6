"""
Result types returned by the employee service.

Domain failures (unknown id, invalid input) are returned as values so the HTTP
layer decides how to present them. Store failures stay exceptions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"


@dataclass(frozen=True)
class ServiceError:
    kind: ErrorKind
    message: str


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    value: Optional[T] = None
    error: Optional[ServiceError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "ServiceResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "ServiceResult[T]":
        return cls(error=ServiceError(kind=kind, message=message))

    @classmethod
    def not_found(cls, employee_id: int) -> "ServiceResult[T]":
        return cls.failure(ErrorKind.NOT_FOUND, f"Employee not found with ID: {employee_id}")

    @classmethod
    def invalid(cls, message: str) -> "ServiceResult[T]":
        return cls.failure(ErrorKind.INVALID_INPUT, message)


class StoreWriteError(Exception):
    """A write to the record store did not commit."""

    def __init__(self, operation: str, detail: Optional[str] = None):
        self.operation = operation
        self.detail = detail
        message = f"Employee {operation} was rolled back"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
