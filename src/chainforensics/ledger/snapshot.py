# File: src/chainforensics/ledger/snapshot.py
from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple
import json
import logging
import os

import yaml
from pydantic import ValidationError

from .models import Address, Block, TokenTransfer, Transaction
from ..exceptions import PreconditionError, SnapshotError

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class IntegrityViolation:
    """A record excluded from the snapshot because a reference did not resolve"""
    collection: str
    record_id: int
    reason: str

class LedgerSnapshot:
    """Immutable, indexed view over the four ledger record collections.

    Records whose foreign keys do not resolve inside the snapshot are excluded
    and reported through ``violations``; with ``strict=True`` the first such
    record raises ``PreconditionError`` instead.
    """

    def __init__(
        self,
        blocks: Iterable[Block] = (),
        addresses: Iterable[Address] = (),
        transactions: Iterable[Transaction] = (),
        token_transfers: Iterable[TokenTransfer] = (),
        strict: bool = False
    ):
        self.strict = strict
        self._violations: List[IntegrityViolation] = []

        self._blocks: Dict[int, Block] = self._index_unique(
            'blocks', blocks, lambda b: b.block_id
        )
        self._addresses: Dict[int, Address] = self._index_unique(
            'addresses', addresses, lambda a: a.address_id
        )

        self._address_ids_by_hash: Dict[str, Tuple[int, ...]] = {}
        for address in sorted(self._addresses.values(), key=lambda a: a.address_id):
            key = address.address_hash.lower()
            self._address_ids_by_hash[key] = self._address_ids_by_hash.get(key, ()) + (address.address_id,)

        # Transactions in (timestamp, tx_id) order
        candidates = self._index_unique('transactions', transactions, lambda t: t.tx_id)
        valid_txs = [tx for tx in candidates.values() if self._check_transaction(tx)]
        valid_txs.sort(key=lambda t: (t.timestamp, t.tx_id))
        self._transactions: Tuple[Transaction, ...] = tuple(valid_txs)
        self._transactions_by_id: Dict[int, Transaction] = {tx.tx_id: tx for tx in valid_txs}
        self._transactions_by_hash: Dict[str, Transaction] = {}
        for tx in valid_txs:
            self._transactions_by_hash.setdefault(tx.tx_hash.lower(), tx)
        self._timestamps: List[datetime] = [tx.timestamp for tx in valid_txs]

        self._transactions_by_address: Dict[int, List[Transaction]] = {}
        for tx in valid_txs:
            self._transactions_by_address.setdefault(tx.from_address, []).append(tx)
            if tx.to_address != tx.from_address:
                self._transactions_by_address.setdefault(tx.to_address, []).append(tx)

        transfer_candidates = self._index_unique(
            'token_transfers', token_transfers, lambda t: t.transfer_id
        )
        valid_transfers = [
            tt for tt in transfer_candidates.values() if self._check_token_transfer(tt)
        ]
        valid_transfers.sort(key=lambda t: (t.tx_id, t.transfer_id))
        self._token_transfers: Tuple[TokenTransfer, ...] = tuple(valid_transfers)

        if self._violations:
            logger.warning(
                f"Snapshot built with {len(self._violations)} excluded records"
            )

    def _index_unique(self, collection: str, records: Iterable[Any], key) -> Dict[int, Any]:
        """Index records by surrogate id, excluding repeated ids."""
        indexed: Dict[int, Any] = {}
        for record in records:
            record_id = key(record)
            if record_id in indexed:
                self._violate(collection, record_id, "duplicate identifier")
                continue
            indexed[record_id] = record
        return indexed

    def _violate(self, collection: str, record_id: int, reason: str) -> None:
        if self.strict:
            raise PreconditionError(f"{collection} record {record_id}: {reason}")
        logger.warning(f"Excluding {collection} record {record_id}: {reason}")
        self._violations.append(IntegrityViolation(collection, record_id, reason))

    def _check_transaction(self, tx: Transaction) -> bool:
        if tx.block_id not in self._blocks:
            self._violate('transactions', tx.tx_id, f"unknown block {tx.block_id}")
            return False
        for field in ('from_address', 'to_address'):
            address_id = getattr(tx, field)
            if address_id not in self._addresses:
                self._violate('transactions', tx.tx_id, f"unknown {field} {address_id}")
                return False
        return True

    def _check_token_transfer(self, transfer: TokenTransfer) -> bool:
        if transfer.tx_id not in self._transactions_by_id:
            self._violate(
                'token_transfers', transfer.transfer_id, f"unknown transaction {transfer.tx_id}"
            )
            return False
        for field in ('token_address', 'from_address', 'to_address'):
            address_id = getattr(transfer, field)
            if address_id not in self._addresses:
                self._violate(
                    'token_transfers', transfer.transfer_id, f"unknown {field} {address_id}"
                )
                return False
        return True

    @property
    def blocks(self) -> Tuple[Block, ...]:
        return tuple(self._blocks[block_id] for block_id in sorted(self._blocks))

    @property
    def addresses(self) -> Tuple[Address, ...]:
        return tuple(self._addresses[address_id] for address_id in sorted(self._addresses))

    @property
    def transactions(self) -> Tuple[Transaction, ...]:
        """Valid transactions ordered by timestamp, then tx_id."""
        return self._transactions

    @property
    def token_transfers(self) -> Tuple[TokenTransfer, ...]:
        return self._token_transfers

    @property
    def violations(self) -> Tuple[IntegrityViolation, ...]:
        return tuple(self._violations)

    def get_block(self, block_id: int) -> Optional[Block]:
        return self._blocks.get(block_id)

    def get_address(self, address_id: int) -> Optional[Address]:
        return self._addresses.get(address_id)

    def address_hash(self, address_id: int) -> str:
        """Human-facing hash for an address id known to the snapshot."""
        return self._addresses[address_id].address_hash

    def address_ids_for(self, address_hash: str) -> Tuple[int, ...]:
        """All address ids recorded under a hash, matched case-insensitively."""
        return self._address_ids_by_hash.get(address_hash.lower(), ())

    def get_transaction(self, tx_id: int) -> Optional[Transaction]:
        return self._transactions_by_id.get(tx_id)

    def find_transaction(self, tx_hash: str) -> Optional[Transaction]:
        return self._transactions_by_hash.get(tx_hash.lower())

    def transactions_for_address(self, address_id: int) -> Tuple[Transaction, ...]:
        """Transactions sent or received by an address, in snapshot order."""
        return tuple(self._transactions_by_address.get(address_id, ()))

    def transactions_between(self, start: datetime, end: datetime) -> Tuple[Transaction, ...]:
        """Transactions with start <= timestamp <= end."""
        lo = bisect_left(self._timestamps, start)
        hi = bisect_right(self._timestamps, end)
        return self._transactions[lo:hi]

    def __len__(self) -> int:
        return len(self._transactions)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], strict: bool = False) -> 'LedgerSnapshot':
        """Build a snapshot from plain record dictionaries."""
        try:
            return cls(
                blocks=[Block(**row) for row in data.get('blocks', [])],
                addresses=[Address(**row) for row in data.get('addresses', [])],
                transactions=[Transaction(**row) for row in data.get('transactions', [])],
                token_transfers=[TokenTransfer(**row) for row in data.get('token_transfers', [])],
                strict=strict
            )
        except ValidationError as e:
            raise SnapshotError(f"Invalid snapshot record: {e}") from e

def load_snapshot(path: str, strict: bool = False) -> LedgerSnapshot:
    """Load a snapshot from a JSON or YAML file."""
    if not os.path.exists(path):
        raise SnapshotError(f"Snapshot file not found: {path}")

    try:
        with open(path, 'r') as f:
            if path.endswith(('.yaml', '.yml')):
                data = yaml.safe_load(f)
            else:
                data = json.load(f, parse_float=Decimal)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise SnapshotError(f"Error reading snapshot {path}: {str(e)}") from e

    if not isinstance(data, dict):
        raise SnapshotError(f"Snapshot {path} must contain a mapping of record collections")

    snapshot = LedgerSnapshot.from_dict(data, strict=strict)
    logger.info(
        f"Loaded snapshot {path}: {len(snapshot.blocks)} blocks, "
        f"{len(snapshot.transactions)} transactions"
    )
    return snapshot
