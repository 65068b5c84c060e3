"""irswap.oracle — benchmark rate requests and callbacks."""

from irswap.oracle.adapter import InMemoryRateOracle as InMemoryRateOracle
from irswap.oracle.adapter import RateConsumer as RateConsumer
from irswap.oracle.adapter import RateOracle as RateOracle
