"""irswap.infra — event bus protocol, in-memory adapter and topic configuration."""

from irswap.infra.config import IRSWAP_TOPICS as IRSWAP_TOPICS
from irswap.infra.config import TASK_QUEUE as TASK_QUEUE
from irswap.infra.config import TOPIC_DEPLOYMENTS as TOPIC_DEPLOYMENTS
from irswap.infra.config import TOPIC_SETTLEMENTS as TOPIC_SETTLEMENTS
from irswap.infra.config import TOPIC_TRADE_EVENTS as TOPIC_TRADE_EVENTS
from irswap.infra.config import TopicConfig as TopicConfig
from irswap.infra.config import irswap_topic_configs as irswap_topic_configs
from irswap.infra.memory_adapter import InMemoryEventBus as InMemoryEventBus
from irswap.infra.protocols import EventBus as EventBus
