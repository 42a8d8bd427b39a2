# File: src/chainforensics/analysis/token_flow.py
from decimal import Decimal
from typing import Dict, List, Tuple
import logging

from .ranking import rank
from .results import TokenPositionRecord, TokenSummary, TokenTransferRecord
from ..ledger.models import TokenTransfer
from ..ledger.snapshot import LedgerSnapshot

logger = logging.getLogger(__name__)

def transfers_of(snapshot: LedgerSnapshot, token_hash: str) -> Tuple[TokenTransfer, ...]:
    """Transfers of the token contract with the given hash."""
    token_ids = set(snapshot.address_ids_for(token_hash))
    if not token_ids:
        logger.debug(f"Token {token_hash} does not appear in the snapshot")
    return tuple(tt for tt in snapshot.token_transfers if tt.token_address in token_ids)

def token_transfers_of(snapshot: LedgerSnapshot, token_hash: str) -> List[TokenTransferRecord]:
    """Transfers of a token with sender and receiver hashes, in transaction order."""
    transfers = sorted(transfers_of(snapshot, token_hash), key=lambda tt: (tt.tx_id, tt.transfer_id))
    return [
        TokenTransferRecord(
            transfer_id=tt.transfer_id,
            tx_hash=snapshot.get_transaction(tt.tx_id).tx_hash,
            from_address=snapshot.address_hash(tt.from_address),
            to_address=snapshot.address_hash(tt.to_address),
            value=tt.value
        )
        for tt in transfers
    ]

def token_summary(snapshot: LedgerSnapshot, token_hash: str) -> TokenSummary:
    transfers = transfers_of(snapshot, token_hash)
    return TokenSummary(
        token_address=token_hash,
        total_volume=sum((tt.value for tt in transfers), Decimal(0)),
        transfer_count=len(transfers),
        unique_senders=len({tt.from_address for tt in transfers}),
        unique_receivers=len({tt.to_address for tt in transfers})
    )

def _totals(snapshot: LedgerSnapshot, token_hash: str) -> Tuple[Dict[int, Decimal], Dict[int, Decimal]]:
    received: Dict[int, Decimal] = {}
    sent: Dict[int, Decimal] = {}
    for tt in transfers_of(snapshot, token_hash):
        received[tt.to_address] = received.get(tt.to_address, Decimal(0)) + tt.value
        sent[tt.from_address] = sent.get(tt.from_address, Decimal(0)) + tt.value
    return received, sent

def token_positions(snapshot: LedgerSnapshot, token_hash: str) -> List[TokenPositionRecord]:
    """Received, sent and net token amounts per address, largest net first."""
    received, sent = _totals(snapshot, token_hash)
    records = []
    for address_id in sorted(set(received) | set(sent)):
        total_received = received.get(address_id, Decimal(0))
        total_sent = sent.get(address_id, Decimal(0))
        records.append(
            TokenPositionRecord(
                address=snapshot.address_hash(address_id),
                total_received=total_received,
                total_sent=total_sent,
                net=total_received - total_sent
            )
        )
    return rank(records, key=lambda r: (-r.net, r.address))

def token_accumulators(snapshot: LedgerSnapshot, token_hash: str) -> List[TokenPositionRecord]:
    """Addresses that received the token and never sent it, by total received."""
    received, sent = _totals(snapshot, token_hash)
    records = [
        TokenPositionRecord(
            address=snapshot.address_hash(address_id),
            total_received=total,
            total_sent=Decimal(0),
            net=total
        )
        for address_id, total in sorted(received.items())
        if address_id not in sent
    ]
    return rank(records, key=lambda r: (-r.total_received, r.address))
