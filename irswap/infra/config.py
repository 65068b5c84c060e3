"""Event bus topic definitions for trade notifications.

No broker client library is imported. Pure configuration data.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import final

# ---------------------------------------------------------------------------
# Topic names
# ---------------------------------------------------------------------------

TOPIC_TRADE_EVENTS: str = "irswap.trade_events"
TOPIC_SETTLEMENTS: str = "irswap.settlements"
TOPIC_DEPLOYMENTS: str = "irswap.deployments"

IRSWAP_TOPICS: tuple[str, ...] = (
    TOPIC_TRADE_EVENTS,
    TOPIC_SETTLEMENTS,
    TOPIC_DEPLOYMENTS,
)

# Temporal task queue served by irswap.workflow.worker.
TASK_QUEUE: str = "irswap-trades"


# ---------------------------------------------------------------------------
# Topic configuration
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class TopicConfig:
    """Broker topic configuration."""

    name: str
    partitions: int
    replication_factor: int
    retention_ms: int              # -1 for infinite retention
    cleanup_policy: str
    min_insync_replicas: int

    def __post_init__(self) -> None:
        if self.partitions <= 0:
            raise TypeError(f"TopicConfig.partitions must be > 0, got {self.partitions}")
        if self.min_insync_replicas > self.replication_factor:
            raise TypeError(
                f"TopicConfig.min_insync_replicas ({self.min_insync_replicas}) "
                f"must be <= replication_factor ({self.replication_factor})"
            )


def irswap_topic_configs() -> tuple[TopicConfig, ...]:
    """Trade events and settlements are kept forever; deployments for 90 days."""
    return (
        TopicConfig(
            name=TOPIC_TRADE_EVENTS,
            partitions=6, replication_factor=3,
            retention_ms=-1,
            cleanup_policy="delete", min_insync_replicas=2,
        ),
        TopicConfig(
            name=TOPIC_SETTLEMENTS,
            partitions=6, replication_factor=3,
            retention_ms=-1,
            cleanup_policy="delete", min_insync_replicas=2,
        ),
        TopicConfig(
            name=TOPIC_DEPLOYMENTS,
            partitions=3, replication_factor=3,
            retention_ms=90 * 24 * 3600 * 1000,
            cleanup_policy="delete", min_insync_replicas=2,
        ),
    )
