"""
Result and error types shared by the device core.

Domain outcomes (not found, policy denial, version conflict) travel between
components as values instead of exceptions. Storage faults are the one
exception-shaped failure: stores raise StorageFaultError and nothing in the
core catches it.
"""

# Standard library imports
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Literal, TypeGuard, TypeVar, Union

S = TypeVar("S")
E = TypeVar("E")


class ErrorKind(str, Enum):
    """Error taxonomy surfaced by the device core"""
    NOT_FOUND = "not_found"
    ILLEGAL_OPERATION = "illegal_operation"
    VERSION_CONFLICT = "version_conflict"
    STORAGE_FAULT = "storage_fault"


@dataclass(frozen=True)
class DeviceError:
    """A domain failure: what kind it is and a human-readable message"""
    kind: ErrorKind
    message: str

    @classmethod
    def not_found(cls, device_id: str) -> "DeviceError":
        return cls(ErrorKind.NOT_FOUND, f"Device {device_id} not found")

    @classmethod
    def illegal_operation(cls, reason: str) -> "DeviceError":
        return cls(ErrorKind.ILLEGAL_OPERATION, reason)

    @classmethod
    def version_conflict(cls, device_id: str) -> "DeviceError":
        return cls(
            ErrorKind.VERSION_CONFLICT,
            f"Device {device_id} was modified concurrently",
        )


class StorageFaultError(RuntimeError):
    """Raised by a store when the underlying storage is unavailable or corrupt"""

    kind = ErrorKind.STORAGE_FAULT

    def __init__(self, message: str, operation: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation


@dataclass(frozen=True)
class Success(Generic[S]):
    """Represents a successful result."""

    value: S
    success: Literal[True] = True


@dataclass(frozen=True)
class Failure(Generic[E]):
    """Represents a failed result."""

    error: E
    success: Literal[False] = False


Result = Union[Success[S], Failure[E]]


class ResultHandler:
    """Helpers to create and inspect Result values."""

    @staticmethod
    def is_success(result: "Result[S, E]") -> TypeGuard[Success[S]]:
        return isinstance(result, Success)

    @staticmethod
    def is_failure(result: "Result[S, E]") -> TypeGuard[Failure[E]]:
        return isinstance(result, Failure)

    @staticmethod
    def ok(value: S) -> Success[S]:
        return Success(value)

    @staticmethod
    def fail(error: E) -> Failure[E]:
        return Failure(error)
