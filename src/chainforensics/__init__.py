# src/chainforensics/__init__.py
from .engine import ForensicsEngine
from .graph.index import GraphIndex
from .ledger.snapshot import LedgerSnapshot, load_snapshot

__version__ = "0.1.0"

__all__ = ['ForensicsEngine', 'GraphIndex', 'LedgerSnapshot', 'load_snapshot']
