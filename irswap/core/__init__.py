"""irswap.core — result values, errors, value types, clock and calendar."""

from irswap.core.calendar import DayCountBasis as DayCountBasis
from irswap.core.calendar import accrual_fraction as accrual_fraction
from irswap.core.calendar import day_count_fraction as day_count_fraction
from irswap.core.calendar import generate_settlement_dates as generate_settlement_dates
from irswap.core.clock import Clock as Clock
from irswap.core.clock import ManualClock as ManualClock
from irswap.core.clock import SystemClock as SystemClock
from irswap.core.errors import (
    ConfirmationExpired as ConfirmationExpired,
)
from irswap.core.errors import (
    ConservationViolationError as ConservationViolationError,
)
from irswap.core.errors import (
    FieldViolation as FieldViolation,
)
from irswap.core.errors import (
    IllegalTransitionError as IllegalTransitionError,
)
from irswap.core.errors import (
    InconsistentTradeDataOrWrongAddress as InconsistentTradeDataOrWrongAddress,
)
from irswap.core.errors import (
    InsufficientAllowance as InsufficientAllowance,
)
from irswap.core.errors import (
    InsufficientBalance as InsufficientBalance,
)
from irswap.core.errors import (
    OracleRequestMismatch as OracleRequestMismatch,
)
from irswap.core.errors import (
    PersistenceError as PersistenceError,
)
from irswap.core.errors import (
    SupplyExceededMaxSupply as SupplyExceededMaxSupply,
)
from irswap.core.errors import (
    SwapError as SwapError,
)
from irswap.core.errors import (
    UnauthorizedCaller as UnauthorizedCaller,
)
from irswap.core.errors import (
    ValidationError as ValidationError,
)
from irswap.core.errors import (
    WrongTradeState as WrongTradeState,
)
from irswap.core.money import IRSWAP_DECIMAL_CONTEXT as IRSWAP_DECIMAL_CONTEXT
from irswap.core.money import scale_units as scale_units
from irswap.core.money import to_base_units as to_base_units
from irswap.core.result import Err as Err
from irswap.core.result import Ok as Ok
from irswap.core.result import Result as Result
from irswap.core.result import unwrap as unwrap
from irswap.core.serialization import canonical_bytes as canonical_bytes
from irswap.core.serialization import content_hash as content_hash
from irswap.core.types import LONG as LONG
from irswap.core.types import POSITIONS as POSITIONS
from irswap.core.types import SHORT as SHORT
from irswap.core.types import Address as Address
from irswap.core.types import NonEmptyStr as NonEmptyStr
from irswap.core.types import Timestamp as Timestamp
from irswap.core.types import from_datetime as from_datetime
from irswap.core.types import to_datetime as to_datetime
