# File: src/chainforensics/graph/index.py
from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Dict, List, Tuple
import logging

from ..ledger.snapshot import LedgerSnapshot

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class Edge:
    """A single value transfer between two addresses"""
    tx_id: int
    from_address: int
    to_address: int
    value: Decimal
    timestamp: datetime

    @property
    def sort_key(self) -> Tuple[datetime, int]:
        return (self.timestamp, self.tx_id)

class EdgeList:
    """Time-ordered edges with a parallel timestamp list for window lookups."""

    __slots__ = ('edges', 'timestamps')

    def __init__(self, edges: List[Edge]):
        self.edges: Tuple[Edge, ...] = tuple(sorted(edges, key=lambda e: e.sort_key))
        self.timestamps: List[datetime] = [edge.timestamp for edge in self.edges]

    def after(self, moment: datetime, window: timedelta, inclusive_end: bool = True) -> Tuple[Edge, ...]:
        """Edges with moment < timestamp <= moment + window (or < when not inclusive)."""
        lo = bisect_right(self.timestamps, moment)
        limit = moment + window
        if inclusive_end:
            hi = bisect_right(self.timestamps, limit, lo)
        else:
            hi = bisect_left(self.timestamps, limit, lo)
        return self.edges[lo:hi]

    def __len__(self) -> int:
        return len(self.edges)

_EMPTY = EdgeList([])

class GraphIndex:
    """Per-address adjacency built from a snapshot's transactions.

    Outgoing and incoming edge lists are sorted by timestamp with ties broken
    by tx_id ascending, so traversals over the index are reproducible.
    """

    def __init__(self, edges: List[Edge]):
        outgoing: Dict[int, List[Edge]] = {}
        incoming: Dict[int, List[Edge]] = {}
        pairs: Dict[Tuple[int, int], List[Edge]] = {}
        for edge in edges:
            outgoing.setdefault(edge.from_address, []).append(edge)
            incoming.setdefault(edge.to_address, []).append(edge)
            pairs.setdefault((edge.from_address, edge.to_address), []).append(edge)

        self._outgoing = {address: EdgeList(items) for address, items in outgoing.items()}
        self._incoming = {address: EdgeList(items) for address, items in incoming.items()}
        self._pairs = {pair: EdgeList(items) for pair, items in pairs.items()}
        self._edges: Tuple[Edge, ...] = tuple(sorted(edges, key=lambda e: e.sort_key))

    @classmethod
    def from_snapshot(cls, snapshot: LedgerSnapshot) -> 'GraphIndex':
        edges = [
            Edge(
                tx_id=tx.tx_id,
                from_address=tx.from_address,
                to_address=tx.to_address,
                value=tx.value,
                timestamp=tx.timestamp
            )
            for tx in snapshot.transactions
        ]
        index = cls(edges)
        logger.debug(
            f"Built graph index: {len(edges)} edges, {len(index._outgoing)} senders, "
            f"{len(index._incoming)} receivers"
        )
        return index

    def outgoing(self, address_id: int) -> Tuple[Edge, ...]:
        return self._outgoing.get(address_id, _EMPTY).edges

    def incoming(self, address_id: int) -> Tuple[Edge, ...]:
        return self._incoming.get(address_id, _EMPTY).edges

    def between(self, from_address: int, to_address: int) -> Tuple[Edge, ...]:
        """Edges sent from one address directly to another."""
        return self._pairs.get((from_address, to_address), _EMPTY).edges

    def outgoing_within(self, address_id: int, after: datetime, window: timedelta) -> Tuple[Edge, ...]:
        """Outgoing edges strictly after ``after`` and no later than ``after + window``."""
        return self._outgoing.get(address_id, _EMPTY).after(after, window)

    def between_within(
        self,
        from_address: int,
        to_address: int,
        after: datetime,
        window: timedelta,
        inclusive_end: bool = True
    ) -> Tuple[Edge, ...]:
        return self._pairs.get((from_address, to_address), _EMPTY).after(
            after, window, inclusive_end
        )

    def edges(self) -> Tuple[Edge, ...]:
        """All edges ordered by timestamp, then tx_id."""
        return self._edges

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    def __contains__(self, address_id: int) -> bool:
        return address_id in self._outgoing or address_id in self._incoming
