"""irswap.trade — terms, record, events, valuation and the lifecycle engine."""

from irswap.trade.engine import SwapEngine as SwapEngine
from irswap.trade.events import (
    SettlementEvaluated as SettlementEvaluated,
)
from irswap.trade.events import (
    SettlementRequested as SettlementRequested,
)
from irswap.trade.events import (
    SettlementTransferred as SettlementTransferred,
)
from irswap.trade.events import (
    TradeCanceled as TradeCanceled,
)
from irswap.trade.events import (
    TradeConfirmed as TradeConfirmed,
)
from irswap.trade.events import (
    TradeEvent as TradeEvent,
)
from irswap.trade.events import (
    TradeIncepted as TradeIncepted,
)
from irswap.trade.events import (
    TradeMatured as TradeMatured,
)
from irswap.trade.events import (
    TradeTerminated as TradeTerminated,
)
from irswap.trade.events import (
    TradeTerminationCanceled as TradeTerminationCanceled,
)
from irswap.trade.events import (
    TradeTerminationConfirmed as TradeTerminationConfirmed,
)
from irswap.trade.events import (
    TradeTerminationRequest as TradeTerminationRequest,
)
from irswap.trade.events import (
    encode_event as encode_event,
)
from irswap.trade.record import ACTIVE_STATES as ACTIVE_STATES
from irswap.trade.record import TERMINAL_STATES as TERMINAL_STATES
from irswap.trade.record import TRADE_TRANSITIONS as TRADE_TRANSITIONS
from irswap.trade.record import TradeRecord as TradeRecord
from irswap.trade.record import TradeState as TradeState
from irswap.trade.record import check_transition as check_transition
from irswap.trade.terms import TerminationTerms as TerminationTerms
from irswap.trade.terms import TradeTerms as TradeTerms
from irswap.trade.terms import terms_fingerprint as terms_fingerprint
from irswap.trade.valuation import SettlementLeg as SettlementLeg
from irswap.trade.valuation import settlement_amount as settlement_amount
from irswap.trade.valuation import settlement_leg as settlement_leg
