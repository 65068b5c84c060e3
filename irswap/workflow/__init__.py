"""irswap.workflow — Temporal.io trade confirmation workflow."""

from irswap.workflow.types import (
    CancelOutput as CancelOutput,
)
from irswap.workflow.types import (
    ConfirmationOutcome as ConfirmationOutcome,
)
from irswap.workflow.types import (
    ConfirmationResult as ConfirmationResult,
)
from irswap.workflow.types import (
    ConfirmInput as ConfirmInput,
)
from irswap.workflow.types import (
    ConfirmOutput as ConfirmOutput,
)
from irswap.workflow.types import (
    CounterpartyConfirmation as CounterpartyConfirmation,
)
from irswap.workflow.types import (
    InceptOutput as InceptOutput,
)
from irswap.workflow.types import (
    TradeProposal as TradeProposal,
)
