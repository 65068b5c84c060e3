"""irswap.token — fungible ledgers: settlement asset and capped ownership token."""

from irswap.token.ledger import FungibleLedger as FungibleLedger
from irswap.token.ownership import OwnershipLedger as OwnershipLedger
from irswap.token.ownership import derive_max_supply as derive_max_supply
from irswap.token.settlement import InMemorySettlementLedger as InMemorySettlementLedger
from irswap.token.settlement import SettlementAsset as SettlementAsset
