"""Infrastructure protocol definitions.

Engine code depends on these abstractions; adapters implement them.
Failures are returned as Err[PersistenceError], never raised.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from irswap.core.errors import PersistenceError
from irswap.core.result import Err, Ok


@runtime_checkable
class EventBus(Protocol):
    """Append-only event transport.

    Messages are keyed for deterministic partitioning. Values are opaque
    bytes; serialization is the caller's responsibility.
    """

    def publish(
        self, topic: str, key: str, value: bytes,
    ) -> Ok[None] | Err[PersistenceError]: ...

    def subscribe(
        self, topic: str, group: str,
    ) -> Ok[None] | Err[PersistenceError]: ...
