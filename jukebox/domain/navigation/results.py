from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class LookupStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    INVALID = "invalid"


@dataclass(frozen=True)
class Lookup(Generic[T]):
    """Outcome of a core query: a value, nothing, or unusable input.

    Callers that only care whether they can proceed check ``ok``; INVALID is
    kept distinct so it can be logged and counted, but it is handled exactly
    like NOT_FOUND everywhere on the wire.
    """

    status: LookupStatus
    value: Optional[T] = None
    reason: Optional[str] = None

    @classmethod
    def found(cls, value: T) -> "Lookup[T]":
        return cls(LookupStatus.FOUND, value)

    @classmethod
    def not_found(cls, reason: Optional[str] = None) -> "Lookup[T]":
        return cls(LookupStatus.NOT_FOUND, None, reason)

    @classmethod
    def invalid(cls, reason: Optional[str] = None) -> "Lookup[T]":
        return cls(LookupStatus.INVALID, None, reason)

    @property
    def ok(self) -> bool:
        return self.status is LookupStatus.FOUND

    @property
    def is_invalid(self) -> bool:
        return self.status is LookupStatus.INVALID


__all__ = ["Lookup", "LookupStatus"]
