"""Benchmark-rate oracle: the request side the engine calls, and an in-memory oracle.

The engine asks for a rate with request_rate() and remembers the returned
request id. The answer arrives later through the engine's fulfill_rate()
callback, which rejects any id other than the pending one.
"""

from __future__ import annotations

from typing import Protocol, final, runtime_checkable

from irswap.core.clock import Clock, SystemClock
from irswap.core.errors import FieldViolation, SwapError, ValidationError
from irswap.core.result import Err, Ok
from irswap.core.serialization import content_hash
from irswap.core.types import Address


@runtime_checkable
class RateOracle(Protocol):
    """Oracle job runner identified by an address.

    Invariants:
      - request_rate() returns a request id unique per call.
      - Answers are delivered only to the requester that asked.
    """

    address: Address

    def request_rate(
        self, job_id: str, requester: Address,
    ) -> Ok[str] | Err[ValidationError]: ...


@runtime_checkable
class RateConsumer(Protocol):
    """Callback side of a rate request (the swap engine)."""

    @property
    def address(self) -> Address: ...

    def fulfill_rate(
        self, caller: Address, request_id: str, rate: int,
    ) -> Ok[object] | Err[SwapError]: ...


@final
class InMemoryRateOracle:
    """Oracle double. Test code decides the rate and calls fulfil()."""

    def __init__(self, address: Address, clock: Clock | None = None) -> None:
        self.address = address
        self._clock: Clock = clock if clock is not None else SystemClock()
        self._nonce = 0
        self._pending: dict[str, tuple[str, Address]] = {}

    def request_rate(
        self, job_id: str, requester: Address,
    ) -> Ok[str] | Err[ValidationError]:
        if not job_id:
            return Err(ValidationError(
                message="job_id must be non-empty",
                code="INVALID_JOB_ID",
                timestamp=self._clock.now(),
                source="oracle.adapter.InMemoryRateOracle.request_rate",
                fields=(FieldViolation(
                    path="job_id", constraint="non-empty", actual_value=repr(job_id),
                ),),
            ))
        match content_hash((self.address, job_id, requester, self._nonce)):
            case Err(e):
                return Err(ValidationError(
                    message=e,
                    code="REQUEST_ID",
                    timestamp=self._clock.now(),
                    source="oracle.adapter.InMemoryRateOracle.request_rate",
                    fields=(),
                ))
            case Ok(request_id):
                pass
        self._nonce += 1
        self._pending[request_id] = (job_id, requester)
        return Ok(request_id)

    def fulfil(
        self, consumer: RateConsumer, request_id: str, rate: int,
    ) -> Ok[object] | Err[SwapError]:
        """Deliver `rate` for `request_id` to the consumer that asked for it."""
        pending = self._pending.get(request_id)
        if pending is not None and pending[1] != consumer.address:
            return Err(ValidationError(
                message=f"Request {request_id} was not made by {consumer.address}",
                code="UNKNOWN_REQUEST",
                timestamp=self._clock.now(),
                source="oracle.adapter.InMemoryRateOracle.fulfil",
                fields=(FieldViolation(
                    path="consumer", constraint="must be the requester",
                    actual_value=consumer.address.value,
                ),),
            ))
        result = consumer.fulfill_rate(self.address, request_id, rate)
        if isinstance(result, Ok):
            self._pending.pop(request_id, None)
        return result

    def pending_requests(self) -> tuple[str, ...]:
        """Test-only helper."""
        return tuple(self._pending)
