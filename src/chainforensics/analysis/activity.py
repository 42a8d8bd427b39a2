# File: src/chainforensics/analysis/activity.py
import math
from decimal import Decimal
from typing import Dict, List
import logging

from .ranking import rank
from .results import AddressActivityRecord, BlockGasRecord, LargeTransferRecord
from ..exceptions import ConfigurationError
from ..ledger.snapshot import LedgerSnapshot
from ..utils.config import Config

logger = logging.getLogger(__name__)

def top_gas_blocks(
    snapshot: LedgerSnapshot,
    top_fraction: Decimal = Config.TOP_BLOCK_FRACTION
) -> List[BlockGasRecord]:
    """Blocks in the top fraction by total gas used, heaviest first."""
    top_fraction = Decimal(str(top_fraction))
    if not 0 < top_fraction <= 1:
        raise ConfigurationError(f"top_fraction must be in (0, 1], got {top_fraction}")

    totals: Dict[int, Decimal] = {}
    counts: Dict[int, int] = {}
    for tx in snapshot.transactions:
        totals[tx.block_id] = totals.get(tx.block_id, Decimal(0)) + tx.gas_used
        counts[tx.block_id] = counts.get(tx.block_id, 0) + 1

    keep = math.ceil(len(totals) * top_fraction)
    ranked = rank(totals.items(), key=lambda item: (-item[1], item[0]), limit=keep)
    return [
        BlockGasRecord(
            block_id=block_id,
            total_gas_used=total,
            average_gas_used=total / counts[block_id],
            transaction_count=counts[block_id]
        )
        for block_id, total in ranked
    ]

def address_activity(snapshot: LedgerSnapshot, contracts_only: bool = False) -> List[AddressActivityRecord]:
    """Sent and received transaction counts for every address."""
    sent: Dict[int, int] = {}
    received: Dict[int, int] = {}
    for tx in snapshot.transactions:
        sent[tx.from_address] = sent.get(tx.from_address, 0) + 1
        received[tx.to_address] = received.get(tx.to_address, 0) + 1

    records = [
        AddressActivityRecord(
            address=address.address_hash,
            is_contract=address.is_contract,
            sent_count=sent.get(address.address_id, 0),
            received_count=received.get(address.address_id, 0),
            total_transactions=sent.get(address.address_id, 0) + received.get(address.address_id, 0)
        )
        for address in snapshot.addresses
        if address.is_contract or not contracts_only
    ]
    return rank(records, key=lambda r: (-r.total_transactions, r.address))

def large_transfers(
    snapshot: LedgerSnapshot,
    min_value: Decimal = Config.LARGE_TRANSFER_THRESHOLD
) -> List[LargeTransferRecord]:
    """Transactions moving strictly more than ``min_value``, largest first."""
    min_value = Decimal(str(min_value))
    if min_value < 0:
        raise ConfigurationError(f"min_value must not be negative, got {min_value}")

    matches = [tx for tx in snapshot.transactions if tx.value > min_value]
    return [
        LargeTransferRecord(
            tx_hash=tx.tx_hash,
            value=tx.value,
            from_address=snapshot.address_hash(tx.from_address),
            to_address=snapshot.address_hash(tx.to_address),
            timestamp=tx.timestamp
        )
        for tx in rank(matches, key=lambda tx: (-tx.value, tx.tx_id))
    ]
