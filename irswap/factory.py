"""Deploys swap engines and keeps them in deployment order.

Each deployed engine owns its own record, escrow and ownership token. The
settlement asset and the oracle are external and shared.
"""

from __future__ import annotations

import logging
from typing import final

from irswap.config import EngineSettings, SwapConfig
from irswap.core.clock import Clock, SystemClock
from irswap.core.result import Err, Ok
from irswap.core.serialization import canonical_bytes, content_hash
from irswap.core.types import Address
from irswap.infra.config import TOPIC_DEPLOYMENTS
from irswap.infra.protocols import EventBus
from irswap.oracle.adapter import RateOracle
from irswap.token.settlement import SettlementAsset
from irswap.trade.engine import SwapEngine

logger = logging.getLogger(__name__)


@final
class SwapFactory:
    """Ordered registry of deployed engines, queryable by count and index."""

    def __init__(
        self,
        address: Address,
        settlement_asset: SettlementAsset,
        oracle: RateOracle,
        clock: Clock | None = None,
        settings: EngineSettings | None = None,
        bus: EventBus | None = None,
    ) -> None:
        self._address = address
        self._settlement_asset = settlement_asset
        self._oracle = oracle
        self._clock: Clock = clock if clock is not None else SystemClock()
        self._settings = settings if settings is not None else EngineSettings()
        self._bus = bus
        self._engines: list[SwapEngine] = []

    def deploy(self, config: SwapConfig) -> Ok[SwapEngine] | Err[str]:
        """Deploy a new engine at an address derived from this factory, the index and the config."""
        index = len(self._engines)
        match content_hash((self._address, index, config)):
            case Err(e):
                return Err(f"SwapFactory.deploy: {e}")
            case Ok(digest):
                pass
        address = Address(value=f"0x{digest[:40]}")
        match SwapEngine.create(
            address=address,
            config=config,
            settlement_asset=self._settlement_asset,
            oracle=self._oracle,
            clock=self._clock,
            settings=self._settings,
            bus=self._bus,
        ):
            case Err() as e:
                return e
            case Ok(engine):
                pass
        self._engines.append(engine)
        logger.info("Factory %s deployed swap #%d at %s", self._address, index, address)
        self._announce(index, engine)
        return Ok(engine)

    def count(self) -> int:
        return len(self._engines)

    def at(self, index: int) -> Ok[SwapEngine] | Err[str]:
        if not 0 <= index < len(self._engines):
            return Err(f"SwapFactory.at: index {index} out of range [0, {len(self._engines)})")
        return Ok(self._engines[index])

    def deployed(self) -> tuple[SwapEngine, ...]:
        return tuple(self._engines)

    def _announce(self, index: int, engine: SwapEngine) -> None:
        if self._bus is None:
            return
        payload = {
            "factory": self._address,
            "index": index,
            "address": engine.address,
            "symbol": engine.config.symbol.value,
        }
        match canonical_bytes(payload):
            case Err(e):
                logger.warning("Factory %s: cannot encode deployment: %s", self._address, e)
                return
            case Ok(value):
                pass
        match self._bus.publish(TOPIC_DEPLOYMENTS, engine.address.value, value):
            case Err(e):
                logger.warning(
                    "Factory %s: publish of deployment %s failed: %s",
                    self._address, engine.address, e.message,
                )
