"""In-memory event bus.

Test double that lets the suite run without a broker. Not production code.
"""

from __future__ import annotations

from typing import final

from irswap.core.errors import PersistenceError
from irswap.core.result import Err, Ok


def _persistence_error(operation: str, detail: str) -> PersistenceError:
    return PersistenceError(
        message=detail,
        code="PERSISTENCE_ERROR",
        timestamp=0,
        source=f"memory_adapter.{operation}",
        operation=operation,
    )


@final
class InMemoryEventBus:
    """Messages stored per topic as (key, value) pairs.

    When `known_topics` is given, publishing to any other topic fails.
    """

    def __init__(self, known_topics: tuple[str, ...] | None = None) -> None:
        self._known = frozenset(known_topics) if known_topics is not None else None
        self._topics: dict[str, list[tuple[str, bytes]]] = {}
        self._groups: dict[str, set[str]] = {}

    def publish(
        self, topic: str, key: str, value: bytes,
    ) -> Ok[None] | Err[PersistenceError]:
        if self._known is not None and topic not in self._known:
            return Err(_persistence_error("publish", f"Unknown topic: {topic}"))
        self._topics.setdefault(topic, []).append((key, value))
        return Ok(None)

    def subscribe(
        self, topic: str, group: str,
    ) -> Ok[None] | Err[PersistenceError]:
        if self._known is not None and topic not in self._known:
            return Err(_persistence_error("subscribe", f"Unknown topic: {topic}"))
        self._groups.setdefault(topic, set()).add(group)
        return Ok(None)

    def get_messages(self, topic: str) -> list[tuple[str, bytes]]:
        """Test-only helper."""
        return list(self._topics.get(topic, []))

    def topic_count(self) -> int:
        """Test-only helper."""
        return len(self._topics)
