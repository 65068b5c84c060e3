"""Swap lifecycle engine: one trade, two parties, margin in escrow.

Every operation takes the authenticated caller explicitly and returns
Ok | Err. An operation runs all of its checks before touching the ledger,
the escrow or the record, so an Err means nothing changed. The one raise is
RuntimeError from _commit on an edge outside TRADE_TRANSITIONS, which only
an engine bug can produce.

Handshake:
    propose  INACTIVE -> INCEPTED    (initiator posts margin)
    confirm  INCEPTED -> CONFIRMED   (counterparty posts margin)
    cancel   INCEPTED -> INACTIVE    (initiator margin refunded)

Settlement:
    initiate_settlement  CONFIRMED|SETTLED -> VALUATION  (VALUATION again after oracle_timeout)
    fulfill_rate         VALUATION -> IN_TRANSFER
    perform_settlement   IN_TRANSFER -> SETTLED | MATURED | TERMINATED (default)

Termination and maturity:
    request_termination  CONFIRMED|SETTLED -> IN_TERMINATION
    confirm_termination  IN_TERMINATION -> TERMINATED
    cancel_termination   IN_TERMINATION -> previous state
    mature               SETTLED -> MATURED
"""

from __future__ import annotations

import logging
from typing import final

from irswap.config import EngineSettings, SwapConfig
from irswap.core.clock import Clock, SystemClock
from irswap.core.errors import (
    ConfirmationExpired,
    FieldViolation,
    InconsistentTradeDataOrWrongAddress,
    OracleRequestMismatch,
    SwapError,
    SupplyExceededMaxSupply,
    UnauthorizedCaller,
    ValidationError,
    WrongTradeState,
)
from irswap.core.result import Err, Ok
from irswap.core.serialization import content_hash
from irswap.core.types import Address, Timestamp
from irswap.escrow.margin import MarginEscrow
from irswap.infra.config import TOPIC_SETTLEMENTS, TOPIC_TRADE_EVENTS
from irswap.infra.protocols import EventBus
from irswap.oracle.adapter import RateOracle
from irswap.token.ownership import OwnershipLedger
from irswap.token.settlement import SettlementAsset
from irswap.trade.events import (
    SettlementEvaluated,
    SettlementRequested,
    SettlementTransferred,
    TradeCanceled,
    TradeConfirmed,
    TradeEvent,
    TradeIncepted,
    TradeMatured,
    TradeTerminated,
    TradeTerminationCanceled,
    TradeTerminationConfirmed,
    TradeTerminationRequest,
    encode_event,
)
from irswap.trade.record import (
    ACTIVE_STATES,
    TradeRecord,
    TradeState,
    check_transition,
)
from irswap.trade.terms import TerminationTerms, TradeTerms, terms_fingerprint
from irswap.trade.valuation import settlement_amount, settlement_leg

logger = logging.getLogger(__name__)

_STATE_LABELS: dict[TradeState, str] = {
    TradeState.INACTIVE: "Inactive",
    TradeState.INCEPTED: "Incepted",
    TradeState.CONFIRMED: "Confirmed",
    TradeState.VALUATION: "Valuation",
    TradeState.IN_TRANSFER: "InTransfer",
    TradeState.SETTLED: "Settled",
    TradeState.IN_TERMINATION: "InTermination",
    TradeState.TERMINATED: "Terminated",
    TradeState.MATURED: "Matured",
}


@final
class SwapEngine:
    """Lifecycle state machine for a single interest rate swap.

    Owns the trade record and the margin escrow. Build with create().
    """

    def __init__(
        self,
        address: Address,
        config: SwapConfig,
        ownership: OwnershipLedger,
        escrow: MarginEscrow,
        oracle: RateOracle,
        clock: Clock,
        settings: EngineSettings,
        bus: EventBus | None = None,
    ) -> None:
        self._address = address
        self._config = config
        self._ownership = ownership
        self._escrow = escrow
        self._oracle = oracle
        self._clock = clock
        self._settings = settings
        self._bus = bus
        self._record = TradeRecord.empty()
        self._events: list[TradeEvent] = []

    @classmethod
    def create(
        cls,
        address: Address,
        config: SwapConfig,
        settlement_asset: SettlementAsset,
        oracle: RateOracle,
        clock: Clock | None = None,
        settings: EngineSettings | None = None,
        bus: EventBus | None = None,
    ) -> Ok[SwapEngine] | Err[str]:
        """Deploy: issue the ownership token 50/50 and open an empty escrow."""
        clk: Clock = clock if clock is not None else SystemClock()
        stg = settings if settings is not None else EngineSettings()
        if address in config.irs.parties:
            return Err(f"SwapEngine address {address} must not be a rate payer")
        match OwnershipLedger.issue(
            name=config.name.value,
            symbol=config.symbol.value,
            max_supply=config.max_supply(stg),
            fixed_rate_payer=config.irs.fixed_rate_payer,
            floating_rate_payer=config.irs.floating_rate_payer,
            decimals=stg.ownership_decimals,
            clock=clk,
        ):
            case Err(e):
                return Err(f"SwapEngine ownership token: {e}")
            case Ok(ownership):
                pass
        escrow = MarginEscrow(
            ledger=settlement_asset,
            custodian=address,
            requirements=config.margin_requirements(),
            clock=clk,
        )
        engine = cls(address, config, ownership, escrow, oracle, clk, stg, bus)
        logger.info(
            "Deployed swap %s (%s) between %s and %s",
            address, config.symbol.value,
            config.irs.fixed_rate_payer, config.irs.floating_rate_payer,
        )
        return Ok(engine)

    # -- queries --

    @property
    def address(self) -> Address:
        return self._address

    @property
    def config(self) -> SwapConfig:
        return self._config

    @property
    def ownership(self) -> OwnershipLedger:
        return self._ownership

    @property
    def escrow(self) -> MarginEscrow:
        return self._escrow

    def get_trade_state(self) -> TradeState:
        return self._record.state

    def get_trade_record(self) -> TradeRecord:
        return self._record

    def get_margin_requirement(self, party: Address) -> tuple[int, int]:
        return self._escrow.get_margin_requirement(party)

    def events(self) -> tuple[TradeEvent, ...]:
        return tuple(self._events)

    def max_supply(self) -> int:
        return self._ownership.max_supply()

    def total_supply(self) -> int:
        return self._ownership.total_supply()

    def balance_of(self, holder: Address) -> int:
        return self._ownership.balance_of(holder)

    def mint(
        self, to: Address, amount: int,
    ) -> Ok[int] | Err[SupplyExceededMaxSupply | ValidationError]:
        return self._ownership.mint(to, amount)

    def next_settlement_date(self) -> Timestamp | None:
        dates = self._config.irs.settlement_dates
        done = self._record.settlements_done
        return dates[done] if done < len(dates) else None

    # -- handshake --

    def propose(
        self,
        caller: Address,
        counterparty: Address,
        trade_data: str,
        position: int,
        payment_amount: int,
        settlement_data: str,
    ) -> Ok[str] | Err[SwapError]:
        """Incept a trade. Returns the terms fingerprint (trade id)."""
        _src = "trade.engine.SwapEngine.propose"
        now = self._clock.now()
        if self._record.state is not TradeState.INACTIVE:
            return Err(self._wrong_state(TradeState.INACTIVE, now, _src))
        terms = TradeTerms(
            initiator=caller, counterparty=counterparty, trade_data=trade_data,
            position=position, payment_amount=payment_amount,
            settlement_data=settlement_data,
        )
        violations = terms.violations()
        if violations:
            return Err(ValidationError(
                message=f"Invalid trade terms from {caller}",
                code="INVALID_TERMS", timestamp=now, source=_src, fields=violations,
            ))
        if frozenset({caller, counterparty}) != self._config.irs.parties:
            return Err(UnauthorizedCaller(
                message=f"{caller} and {counterparty} are not the rate payers of this swap",
                code="NOT_A_PARTY", timestamp=now, source=_src,
                caller=caller.value, operation="propose",
            ))
        match self._fingerprint(terms, now, _src):
            case Err() as e:
                return e
            case Ok(fingerprint):
                pass
        match self._escrow.post_margin(caller):
            case Err(e):
                return Err(e)
        record = TradeRecord(
            state=TradeState.INCEPTED,
            terms_fingerprint=fingerprint,
            proposed_at=now,
            confirmation_deadline=now + self._settings.confirmation_window,
            initiator=caller,
            counterparty=counterparty,
        )
        self._commit(record, TradeIncepted(
            initiator=caller, counterparty=counterparty, trade_id=fingerprint,
            trade_data=trade_data, position=position, payment_amount=payment_amount,
            settlement_data=settlement_data, timestamp=now,
        ))
        return Ok(fingerprint)

    def confirm(
        self,
        caller: Address,
        counterparty: Address,
        trade_data: str,
        position: int,
        payment_amount: int,
        settlement_data: str,
    ) -> Ok[str] | Err[SwapError]:
        """Agree to the pending proposal with terms seen from the caller's side.

        The caller's terms must be the exact mirror of the proposal. Checks
        run in order: state, caller, deadline, fingerprint.
        """
        _src = "trade.engine.SwapEngine.confirm"
        now = self._clock.now()
        rec = self._record
        if rec.state is not TradeState.INCEPTED:
            return Err(self._wrong_state(TradeState.INCEPTED, now, _src))
        if caller != rec.counterparty:
            return Err(InconsistentTradeDataOrWrongAddress(
                message=f"{caller} is not the counterparty of the pending proposal",
                code="WRONG_ADDRESS", timestamp=now, source=_src,
                address=caller.value, expected_counterparty=rec.counterparty.value,
                diagnostic=rec.terms_fingerprint,
            ))
        if now >= rec.confirmation_deadline:
            return Err(ConfirmationExpired(
                message="Confirmation deadline has passed",
                code="CONFIRMATION_EXPIRED", timestamp=now, source=_src,
                proposed_at=rec.proposed_at, deadline=rec.confirmation_deadline,
            ))
        confirming = TradeTerms(
            initiator=caller, counterparty=counterparty, trade_data=trade_data,
            position=position, payment_amount=payment_amount,
            settlement_data=settlement_data,
        )
        match self._fingerprint(confirming.mirrored(), now, _src):
            case Err() as e:
                return e
            case Ok(mirrored_fp):
                pass
        if mirrored_fp != rec.terms_fingerprint:
            return Err(InconsistentTradeDataOrWrongAddress(
                message="Confirmed terms do not mirror the proposal",
                code="INCONSISTENT_TRADE_DATA", timestamp=now, source=_src,
                address=caller.value, expected_counterparty=rec.counterparty.value,
                diagnostic=mirrored_fp,
            ))
        match self._escrow.post_margin(caller):
            case Err(e):
                return Err(e)
        self._commit(rec.moved_to(TradeState.CONFIRMED), TradeConfirmed(
            confirmer=caller, trade_id=rec.terms_fingerprint, timestamp=now,
        ))
        return Ok(rec.terms_fingerprint)

    def cancel(
        self,
        caller: Address,
        counterparty: Address,
        trade_data: str,
        position: int,
        payment_amount: int,
        settlement_data: str,
    ) -> Ok[int] | Err[SwapError]:
        """Withdraw an unconfirmed proposal. Returns the amount refunded."""
        _src = "trade.engine.SwapEngine.cancel"
        now = self._clock.now()
        rec = self._record
        if rec.state is not TradeState.INCEPTED:
            return Err(self._wrong_state(TradeState.INCEPTED, now, _src))
        if caller != rec.initiator:
            return Err(UnauthorizedCaller(
                message=f"Only the initiator {rec.initiator} may cancel",
                code="NOT_INITIATOR", timestamp=now, source=_src,
                caller=caller.value, operation="cancel",
            ))
        terms = TradeTerms(
            initiator=caller, counterparty=counterparty, trade_data=trade_data,
            position=position, payment_amount=payment_amount,
            settlement_data=settlement_data,
        )
        match self._fingerprint(terms, now, _src):
            case Err() as e:
                return e
            case Ok(fingerprint):
                pass
        if fingerprint != rec.terms_fingerprint:
            return Err(InconsistentTradeDataOrWrongAddress(
                message="Cancelled terms do not match the proposal",
                code="INCONSISTENT_TRADE_DATA", timestamp=now, source=_src,
                address=caller.value, expected_counterparty=rec.counterparty.value,
                diagnostic=fingerprint,
            ))
        match self._escrow.refund_margin(caller):
            case Err(e):
                return Err(e)
            case Ok(refunded):
                pass
        self._commit(TradeRecord.empty(), TradeCanceled(
            initiator=caller, trade_id=rec.terms_fingerprint,
            refunded=refunded, timestamp=now,
        ))
        return Ok(refunded)

    # -- valuation and settlement --

    def initiate_settlement(self, caller: Address) -> Ok[str] | Err[SwapError]:
        """Request the benchmark fixing for the next due settlement date.

        A request the oracle has not answered within oracle_timeout may be
        replaced; the superseded request id is then rejected on callback.
        """
        _src = "trade.engine.SwapEngine.initiate_settlement"
        now = self._clock.now()
        rec = self._record
        match self._require_party(caller, now, _src):
            case Err() as e:
                return e
        if rec.state is TradeState.VALUATION:
            retry_at = rec.requested_at + self._settings.oracle_timeout
            if now < retry_at:
                return Err(ValidationError(
                    message=f"Rate request {rec.pending_request_id} pending until {retry_at}",
                    code="ORACLE_PENDING", timestamp=now, source=_src,
                    fields=(FieldViolation(
                        path="pending_request_id", constraint=f"unanswered until {retry_at}",
                        actual_value=rec.pending_request_id,
                    ),),
                ))
        elif rec.state not in ACTIVE_STATES:
            return Err(self._wrong_state(TradeState.CONFIRMED, now, _src, also=TradeState.SETTLED))
        due = self.next_settlement_date()
        if due is None:
            return Err(self._schedule_error(
                "No settlement dates remain", "NO_SETTLEMENT_DUE", "None", now, _src,
            ))
        if now < due:
            return Err(self._schedule_error(
                f"Next settlement date {due} not reached", "SETTLEMENT_NOT_DUE",
                str(due), now, _src,
            ))
        match self._oracle.request_rate(self._config.job_id.value, self._address):
            case Err(e):
                return Err(e)
            case Ok(request_id):
                pass
        record = TradeRecord(
            state=TradeState.VALUATION,
            terms_fingerprint=rec.terms_fingerprint,
            proposed_at=rec.proposed_at,
            confirmation_deadline=rec.confirmation_deadline,
            initiator=rec.initiator,
            counterparty=rec.counterparty,
            pending_request_id=request_id,
            requested_at=now,
            settlements_done=rec.settlements_done,
        )
        self._commit(record, SettlementRequested(
            initiator=caller, request_id=request_id, settlement_date=due, timestamp=now,
        ))
        return Ok(request_id)

    def fulfill_rate(
        self, caller: Address, request_id: str, rate: int,
    ) -> Ok[int] | Err[SwapError]:
        """Oracle callback. Returns the signed settlement amount."""
        _src = "trade.engine.SwapEngine.fulfill_rate"
        now = self._clock.now()
        rec = self._record
        if rec.state is not TradeState.VALUATION:
            return Err(self._wrong_state(TradeState.VALUATION, now, _src))
        if caller != self._config.oracle:
            return Err(UnauthorizedCaller(
                message=f"{caller} is not the configured oracle",
                code="NOT_ORACLE", timestamp=now, source=_src,
                caller=caller.value, operation="fulfill_rate",
            ))
        if request_id != rec.pending_request_id:
            return Err(OracleRequestMismatch(
                message=f"Callback for {request_id} does not answer the pending request",
                code="ORACLE_REQUEST_MISMATCH", timestamp=now, source=_src,
                expected_request_id=rec.pending_request_id, actual_request_id=request_id,
            ))
        irs = self._config.irs
        done = rec.settlements_done
        period_start = irs.starting_date if done == 0 else irs.settlement_dates[done - 1]
        match settlement_amount(irs, rate, period_start, irs.settlement_dates[done]):
            case Err(e):
                return Err(e)
            case Ok(amount):
                pass
        record = TradeRecord(
            state=TradeState.IN_TRANSFER,
            terms_fingerprint=rec.terms_fingerprint,
            proposed_at=rec.proposed_at,
            confirmation_deadline=rec.confirmation_deadline,
            initiator=rec.initiator,
            counterparty=rec.counterparty,
            settlement_amount=amount,
            settlements_done=done,
        )
        self._commit(record, SettlementEvaluated(
            request_id=request_id, benchmark_rate=rate,
            settlement_amount=amount, timestamp=now,
        ))
        return Ok(amount)

    def perform_settlement(self, caller: Address) -> Ok[TradeState] | Err[SwapError]:
        """Move the evaluated amount from payer to receiver.

        If the payer's allowance or balance cannot cover it, the payer is in
        default: its margin buffer covers the amount, its termination fee goes
        to the receiver, remaining escrow is released and the trade terminates.
        Returns the state the trade ends in.
        """
        _src = "trade.engine.SwapEngine.perform_settlement"
        now = self._clock.now()
        rec = self._record
        match self._require_party(caller, now, _src):
            case Err() as e:
                return e
        if rec.state is not TradeState.IN_TRANSFER:
            return Err(self._wrong_state(TradeState.IN_TRANSFER, now, _src))
        match self._require_solvent():
            case Err() as e:
                return e
        irs = self._config.irs
        leg = settlement_leg(irs, rec.settlement_amount)
        settled_date = irs.settlement_dates[rec.settlements_done]
        if leg.amount > 0:
            match self._escrow.ledger.transfer_from(
                self._address, leg.payer, leg.receiver, leg.amount,
            ):
                case Err(e):
                    return self._default(leg.payer, leg.receiver, leg.amount, e, now)
        done = rec.settlements_done + 1
        transferred = SettlementTransferred(
            payer=leg.payer, receiver=leg.receiver, amount=leg.amount,
            settlement_date=settled_date, timestamp=now,
        )
        if done == len(irs.settlement_dates) and now >= irs.maturity_date:
            match self._escrow.release_all():
                case Err(e):
                    return Err(e)
                case Ok(refunds):
                    pass
            closed = TradeRecord(
                state=TradeState.MATURED,
                terms_fingerprint=rec.terms_fingerprint,
                proposed_at=rec.proposed_at,
                confirmation_deadline=rec.confirmation_deadline,
                initiator=rec.initiator,
                counterparty=rec.counterparty,
                settlements_done=done,
            )
            self._commit(closed, transferred, TradeMatured(
                trade_id=rec.terms_fingerprint, released=sum(refunds.values()),
                timestamp=now,
            ))
            return Ok(TradeState.MATURED)
        record = TradeRecord(
            state=TradeState.SETTLED,
            terms_fingerprint=rec.terms_fingerprint,
            proposed_at=rec.proposed_at,
            confirmation_deadline=rec.confirmation_deadline,
            initiator=rec.initiator,
            counterparty=rec.counterparty,
            settlements_done=done,
        )
        self._commit(record, transferred)
        return Ok(TradeState.SETTLED)

    # -- termination and maturity --

    def request_termination(
        self, caller: Address, termination_payment: int, terms: str,
    ) -> Ok[str] | Err[SwapError]:
        """Propose early termination. termination_payment > 0 means the caller receives."""
        _src = "trade.engine.SwapEngine.request_termination"
        now = self._clock.now()
        rec = self._record
        match self._require_party(caller, now, _src):
            case Err() as e:
                return e
        if rec.state not in ACTIVE_STATES:
            return Err(self._wrong_state(TradeState.CONFIRMED, now, _src, also=TradeState.SETTLED))
        match self._check_payment(termination_payment, now, _src):
            case Err() as e:
                return e
        request = TerminationTerms(
            requester=caller, counterparty=rec.other_party(caller),
            termination_payment=termination_payment, terms=terms,
        )
        match self._fingerprint(request, now, _src):
            case Err() as e:
                return e
            case Ok(fingerprint):
                pass
        record = TradeRecord(
            state=TradeState.IN_TERMINATION,
            terms_fingerprint=rec.terms_fingerprint,
            proposed_at=rec.proposed_at,
            confirmation_deadline=rec.confirmation_deadline,
            initiator=rec.initiator,
            counterparty=rec.counterparty,
            settlements_done=rec.settlements_done,
            termination_fingerprint=fingerprint,
            termination_requester=caller,
            state_before_termination=rec.state,
        )
        self._commit(record, TradeTerminationRequest(
            requester=caller, trade_id=rec.terms_fingerprint,
            termination_payment=termination_payment, terms=terms, timestamp=now,
        ))
        return Ok(fingerprint)

    def confirm_termination(
        self, caller: Address, termination_payment: int, terms: str,
    ) -> Ok[int] | Err[SwapError]:
        """Accept the pending termination with the mirrored payment.

        Pays the termination payment and releases every party's escrow,
        termination fees included. Returns the total released.
        """
        _src = "trade.engine.SwapEngine.confirm_termination"
        now = self._clock.now()
        rec = self._record
        if rec.state is not TradeState.IN_TERMINATION:
            return Err(self._wrong_state(TradeState.IN_TERMINATION, now, _src))
        requester = rec.termination_requester
        if not rec.involves(caller) or caller == requester:
            return Err(InconsistentTradeDataOrWrongAddress(
                message=f"{caller} cannot confirm a termination requested by {requester}",
                code="WRONG_ADDRESS", timestamp=now, source=_src,
                address=caller.value, expected_counterparty=rec.other_party(requester).value,
                diagnostic=rec.termination_fingerprint,
            ))
        match self._check_payment(termination_payment, now, _src):
            case Err() as e:
                return e
        confirming = TerminationTerms(
            requester=caller, counterparty=requester,
            termination_payment=termination_payment, terms=terms,
        )
        match self._fingerprint(confirming.mirrored(), now, _src):
            case Err() as e:
                return e
            case Ok(mirrored_fp):
                pass
        if mirrored_fp != rec.termination_fingerprint:
            return Err(InconsistentTradeDataOrWrongAddress(
                message="Termination terms do not mirror the request",
                code="INCONSISTENT_TRADE_DATA", timestamp=now, source=_src,
                address=caller.value, expected_counterparty=caller.value,
                diagnostic=mirrored_fp,
            ))
        match self._require_solvent():
            case Err() as e:
                return e
        # termination_payment is from the caller's side: > 0 means the caller receives.
        if termination_payment != 0:
            payer, receiver = (
                (requester, caller) if termination_payment > 0 else (caller, requester)
            )
            match self._escrow.ledger.transfer_from(
                self._address, payer, receiver, abs(termination_payment),
            ):
                case Err(e):
                    return Err(e)
        match self._escrow.release_all():
            case Err(e):
                return Err(e)
            case Ok(refunds):
                pass
        released = sum(refunds.values())
        self._commit(rec.closed(TradeState.TERMINATED), TradeTerminationConfirmed(
            confirmer=caller, trade_id=rec.terms_fingerprint,
            termination_payment=termination_payment, terms=terms, timestamp=now,
        ))
        return Ok(released)

    def cancel_termination(self, caller: Address) -> Ok[TradeState] | Err[SwapError]:
        """Withdraw a termination request. Returns the state restored."""
        _src = "trade.engine.SwapEngine.cancel_termination"
        now = self._clock.now()
        rec = self._record
        if rec.state is not TradeState.IN_TERMINATION:
            return Err(self._wrong_state(TradeState.IN_TERMINATION, now, _src))
        if caller != rec.termination_requester:
            return Err(UnauthorizedCaller(
                message=f"Only the requester {rec.termination_requester} may cancel termination",
                code="NOT_REQUESTER", timestamp=now, source=_src,
                caller=caller.value, operation="cancel_termination",
            ))
        restored = rec.state_before_termination
        record = TradeRecord(
            state=restored,
            terms_fingerprint=rec.terms_fingerprint,
            proposed_at=rec.proposed_at,
            confirmation_deadline=rec.confirmation_deadline,
            initiator=rec.initiator,
            counterparty=rec.counterparty,
            settlements_done=rec.settlements_done,
        )
        self._commit(record, TradeTerminationCanceled(
            requester=caller, trade_id=rec.terms_fingerprint,
            termination_id=rec.termination_fingerprint, timestamp=now,
        ))
        return Ok(restored)

    def mature(self, caller: Address) -> Ok[int] | Err[SwapError]:
        """Close a fully settled trade at maturity. Returns the total released."""
        _src = "trade.engine.SwapEngine.mature"
        now = self._clock.now()
        rec = self._record
        match self._require_party(caller, now, _src):
            case Err() as e:
                return e
        if rec.state is not TradeState.SETTLED:
            return Err(self._wrong_state(TradeState.SETTLED, now, _src))
        due = self.next_settlement_date()
        if due is not None:
            return Err(self._schedule_error(
                f"Settlement date {due} still outstanding", "SETTLEMENTS_OUTSTANDING",
                str(due), now, _src,
            ))
        maturity = self._config.irs.maturity_date
        if now < maturity:
            return Err(self._schedule_error(
                f"Maturity date {maturity} not reached", "NOT_MATURE",
                str(maturity), now, _src,
            ))
        match self._require_solvent():
            case Err() as e:
                return e
        match self._escrow.release_all():
            case Err(e):
                return Err(e)
            case Ok(refunds):
                pass
        released = sum(refunds.values())
        self._commit(rec.closed(TradeState.MATURED), TradeMatured(
            trade_id=rec.terms_fingerprint, released=released, timestamp=now,
        ))
        return Ok(released)

    # -- internals --

    def _default(
        self,
        payer: Address,
        receiver: Address,
        amount: int,
        cause: SwapError,
        now: Timestamp,
    ) -> Ok[TradeState] | Err[SwapError]:
        """Close out a defaulted settlement from escrow."""
        match self._escrow.pay_from_margin(payer, receiver, amount):
            case Err(e):
                return Err(e)
            case Ok(covered):
                pass
        match self._escrow.forfeit_termination_fee(payer, receiver):
            case Err(e):
                return Err(e)
            case Ok(fee):
                pass
        match self._escrow.release_all():
            case Err(e):
                return Err(e)
        logger.warning(
            "Swap %s: %s defaulted on settlement of %d (%s)",
            self._address, payer, amount, cause.code,
        )
        self._commit(self._record.closed(TradeState.TERMINATED), TradeTerminated(
            defaulter=payer, receiver=receiver, covered_from_margin=covered,
            termination_fee_paid=fee, reason=cause.code, timestamp=now,
        ))
        return Ok(TradeState.TERMINATED)

    def _commit(self, record: TradeRecord, *events: TradeEvent) -> None:
        """Install the new record and emit its events.

        Callers check state before committing, so an edge missing from
        TRADE_TRANSITIONS here is a bug in the engine, not a caller error,
        and raises RuntimeError instead of returning Err.
        """
        old = self._record.state
        match check_transition(old, record.state, timestamp=self._clock.now()):
            case Err(e):
                raise RuntimeError(e.message)
        self._record = record
        logger.info("Swap %s: %s -> %s", self._address, old.name, record.state.name)
        for event in events:
            self._events.append(event)
            self._publish(event)

    def _publish(self, event: TradeEvent) -> None:
        if self._bus is None:
            return
        match encode_event(event):
            case Err(e):
                logger.warning("Swap %s: cannot encode %s: %s", self._address,
                               type(event).__name__, e)
                return
            case Ok((key, value)):
                pass
        topics = [TOPIC_TRADE_EVENTS]
        if isinstance(event, SettlementTransferred):
            topics.append(TOPIC_SETTLEMENTS)
        for topic in topics:
            match self._bus.publish(topic, key, value):
                case Err(e):
                    logger.warning(
                        "Swap %s: publish of %s to %s failed: %s",
                        self._address, type(event).__name__, topic, e.message,
                    )

    def _fingerprint(
        self, terms: TradeTerms | TerminationTerms, now: Timestamp, source: str,
    ) -> Ok[str] | Err[ValidationError]:
        match terms_fingerprint(terms) if isinstance(terms, TradeTerms) else content_hash(terms):
            case Err(e):
                return Err(ValidationError(
                    message=e, code="UNSERIALIZABLE_TERMS", timestamp=now, source=source,
                    fields=(),
                ))
            case Ok(fp):
                return Ok(fp)

    def _wrong_state(
        self,
        expected: TradeState,
        now: Timestamp,
        source: str,
        also: TradeState | None = None,
    ) -> WrongTradeState:
        label = _STATE_LABELS[expected]
        if also is not None:
            label = f"{label} or {_STATE_LABELS[also]}"
        actual = _STATE_LABELS[self._record.state]
        return WrongTradeState(
            message=f"trade state is not {label}",
            code="WRONG_TRADE_STATE", timestamp=now, source=source,
            expected=label, actual=actual,
        )

    def _require_party(
        self, caller: Address, now: Timestamp, source: str,
    ) -> Ok[None] | Err[UnauthorizedCaller]:
        if caller in self._config.irs.parties:
            return Ok(None)
        return Err(UnauthorizedCaller(
            message=f"{caller} is not a party to this swap",
            code="NOT_A_PARTY", timestamp=now, source=source,
            caller=caller.value, operation=source.rsplit(".", 1)[-1],
        ))

    def _require_solvent(self) -> Ok[None] | Err[SwapError]:
        """Custody must cover escrow before anything is paid out of it."""
        match self._escrow.check_solvency():
            case Err(e):
                return Err(e)
            case Ok(surplus) if surplus > 0:
                logger.warning(
                    "Swap %s: custody holds %d beyond escrow records", self._address, surplus,
                )
        return Ok(None)

    def _check_payment(
        self, amount: int, now: Timestamp, source: str,
    ) -> Ok[None] | Err[ValidationError]:
        if isinstance(amount, bool) or not isinstance(amount, int):
            return Err(ValidationError(
                message="termination_payment must be int",
                code="INVALID_AMOUNT", timestamp=now, source=source,
                fields=(FieldViolation(
                    path="termination_payment", constraint="must be int",
                    actual_value=repr(amount),
                ),),
            ))
        return Ok(None)

    def _schedule_error(
        self, message: str, code: str, actual: str, now: Timestamp, source: str,
    ) -> ValidationError:
        return ValidationError(
            message=message, code=code, timestamp=now, source=source,
            fields=(FieldViolation(
                path="settlement_dates", constraint="settlement schedule", actual_value=actual,
            ),),
        )
