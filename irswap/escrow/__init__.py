"""irswap.escrow — margin custody backed by the settlement asset."""

from irswap.escrow.margin import EscrowError as EscrowError
from irswap.escrow.margin import MarginAccount as MarginAccount
from irswap.escrow.margin import MarginEscrow as MarginEscrow
