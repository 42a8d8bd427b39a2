# src/chainforensics/ledger/__init__.py
from .models import Block, Address, Transaction, TokenTransfer
from .snapshot import LedgerSnapshot, IntegrityViolation, load_snapshot

__all__ = [
    'Block', 'Address', 'Transaction', 'TokenTransfer',
    'LedgerSnapshot', 'IntegrityViolation', 'load_snapshot'
]
