"""Typed outcomes returned by allocation transactions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from backend.domain.models import Allocation, Event


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    CAPACITY = "capacity"
    SAFETY = "safety"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class AllocationError:
    kind: ErrorKind
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class AllocationOutcome:
    allocation: Optional[Allocation] = None
    error: Optional[AllocationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, kind: ErrorKind, message: str) -> AllocationOutcome:
        return cls(error=AllocationError(kind=kind, message=message))


@dataclass(frozen=True)
class RemovalOutcome:
    event: Optional[Event] = None
    error: Optional[AllocationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, kind: ErrorKind, message: str) -> RemovalOutcome:
        return cls(error=AllocationError(kind=kind, message=message))
