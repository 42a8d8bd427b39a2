# tests/conftest.py
import os
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from chainforensics.ledger.models import Address, Block, TokenTransfer, Transaction
from chainforensics.ledger.snapshot import LedgerSnapshot, load_snapshot

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)
SAMPLE_SNAPSHOT = os.path.join(os.path.dirname(__file__), '..', 'data', 'sample_snapshot.json')

def at(seconds: float) -> datetime:
    return BASE_TIME + timedelta(seconds=seconds)

class SnapshotBuilder:
    """Builds small synthetic snapshots where address hashes are their names"""

    time = staticmethod(at)

    def __init__(self):
        self.addresses = {}
        self.transactions = []
        self.token_transfers = []
        self.blocks = [
            Block(block_id=1, timestamp=BASE_TIME, block_hash="0xb1", previous_hash="0xb0")
        ]

    def address(self, name: str, is_contract: bool = False) -> int:
        if name not in self.addresses:
            self.addresses[name] = Address(
                address_id=len(self.addresses) + 1,
                address_hash=name,
                first_seen=BASE_TIME,
                is_contract=is_contract
            )
        return self.addresses[name].address_id

    def tx(self, sender: str, receiver: str, value, seconds: float = 0,
           gas_price='0.000000040', gas_used='21000', block_id: int = 1) -> Transaction:
        tx_id = len(self.transactions) + 1
        transaction = Transaction(
            tx_id=tx_id,
            tx_hash=f"0xtx{tx_id}",
            block_id=block_id,
            from_address=self.address(sender),
            to_address=self.address(receiver),
            value=Decimal(str(value)),
            gas_price=Decimal(str(gas_price)),
            gas_used=Decimal(str(gas_used)),
            timestamp=at(seconds)
        )
        self.transactions.append(transaction)
        return transaction

    def token_transfer(self, tx: Transaction, token: str, sender: str, receiver: str, value) -> TokenTransfer:
        transfer = TokenTransfer(
            transfer_id=len(self.token_transfers) + 1,
            tx_id=tx.tx_id,
            token_address=self.address(token, is_contract=True),
            from_address=self.address(sender),
            to_address=self.address(receiver),
            value=Decimal(str(value))
        )
        self.token_transfers.append(transfer)
        return transfer

    def build(self, strict: bool = False) -> LedgerSnapshot:
        return LedgerSnapshot(
            blocks=self.blocks,
            addresses=list(self.addresses.values()),
            transactions=self.transactions,
            token_transfers=self.token_transfers,
            strict=strict
        )

@pytest.fixture
def builder():
    return SnapshotBuilder()

@pytest.fixture
def sample_snapshot():
    """Snapshot of three blocks, eight addresses and seven transactions"""
    return load_snapshot(SAMPLE_SNAPSHOT)
