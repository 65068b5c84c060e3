"""Core value types: Address, NonEmptyStr, Timestamp, position constants."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import ClassVar, TypeAlias, final

from irswap.core.result import Err, Ok

# Seconds since the Unix epoch, as reported by the engine's clock.
Timestamp: TypeAlias = int

LONG: int = 1
SHORT: int = -1
POSITIONS: frozenset[int] = frozenset({LONG, SHORT})


@final
@dataclass(frozen=True, slots=True)
class NonEmptyStr:
    """String constrained to be non-empty."""

    value: str

    def __post_init__(self) -> None:
        if not self.value:
            raise TypeError("NonEmptyStr requires non-empty string")

    @staticmethod
    def parse(raw: str) -> Ok[NonEmptyStr] | Err[str]:
        if not raw:
            return Err("NonEmptyStr requires non-empty string")
        return Ok(NonEmptyStr(value=raw))


@final
@dataclass(frozen=True, slots=True, order=True)
class Address:
    """Account identity on the settlement network.

    Addresses compare case-insensitively: the stored value is lower-cased.
    """

    value: str

    ZERO: ClassVar[Address]  # Assigned after class definition

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value.strip():
            raise TypeError(f"Address requires non-empty string, got {self.value!r}")
        if self.value != self.value.strip().lower():
            object.__setattr__(self, "value", self.value.strip().lower())

    @staticmethod
    def parse(raw: str) -> Ok[Address] | Err[str]:
        if not isinstance(raw, str):
            return Err(f"Address requires str, got {type(raw).__name__}")
        if not raw.strip():
            return Err("Address requires non-empty string")
        return Ok(Address(value=raw))

    @property
    def is_zero(self) -> bool:
        return self == Address.ZERO

    def __str__(self) -> str:
        return self.value


Address.ZERO = Address(value="0x0000000000000000000000000000000000000000")


def to_datetime(ts: Timestamp) -> datetime:
    """UTC datetime for an epoch-seconds timestamp."""
    return datetime.fromtimestamp(ts, tz=UTC)


def from_datetime(dt: datetime) -> Timestamp:
    """Epoch seconds for an aware datetime. Naive datetimes are rejected."""
    if dt.tzinfo is None:
        raise TypeError("from_datetime requires timezone-aware datetime, got naive")
    return int(dt.timestamp())
