# File: src/chainforensics/analysis/chain_tracer.py
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterator, List, NamedTuple, Optional, Tuple
import logging

from .ranking import rank
from .results import ChainRecord
from ..config.analytics_config import ChainTracerConfig
from ..graph.index import Edge, GraphIndex
from ..ledger.snapshot import LedgerSnapshot

logger = logging.getLogger(__name__)

Path = Tuple[Edge, ...]

class ChainKey(NamedTuple):
    """Grouping key for path instances: visited addresses, origin, elapsed time"""
    addresses: Tuple[int, ...]
    origin: int
    elapsed_seconds: int

@dataclass
class ChainGroup:
    occurrences: int
    total_value: Decimal
    first_seen: datetime

def path_addresses(path: Path) -> Tuple[int, ...]:
    return (path[0].from_address,) + tuple(edge.to_address for edge in path)

def path_value(path: Path) -> Decimal:
    return sum((edge.value for edge in path), Decimal(0))

def path_elapsed_seconds(path: Path) -> int:
    return int((path[-1].timestamp - path[0].timestamp).total_seconds())

class ChainTracer:
    """Finds rapid fund-movement chains: consecutive transfers where each hop
    is sent by the previous hop's receiver shortly after it arrived.
    """

    def __init__(self, config: Optional[ChainTracerConfig] = None):
        self.config = config or ChainTracerConfig()
        self.config.validate()

    def paths_from(self, start: Edge, index: GraphIndex) -> Iterator[Path]:
        """Enumerate every maximal path that begins with ``start``.

        A path is extended by each outgoing edge of its last receiver that
        falls within the hop window; it ends at ``max_hops`` or when no
        continuation exists. Only paths of two or more hops are yielded.
        """
        stack: List[Path] = [(start,)]
        while stack:
            path = stack.pop()
            last = path[-1]
            continuations: Tuple[Edge, ...] = ()
            if len(path) < self.config.max_hops:
                continuations = index.outgoing_within(
                    last.to_address, last.timestamp, self.config.hop_window
                )
            if continuations:
                # Reversed so paths come off the stack in index order
                for edge in reversed(continuations):
                    stack.append(path + (edge,))
            elif len(path) >= 2:
                yield path

    def group_paths(self, index: GraphIndex) -> Dict[ChainKey, ChainGroup]:
        groups: Dict[ChainKey, ChainGroup] = {}
        for start in index.edges():
            for path in self.paths_from(start, index):
                key = ChainKey(
                    addresses=path_addresses(path),
                    origin=start.from_address,
                    elapsed_seconds=path_elapsed_seconds(path)
                )
                group = groups.get(key)
                if group is None:
                    groups[key] = ChainGroup(1, path_value(path), start.timestamp)
                else:
                    group.occurrences += 1
                    group.total_value += path_value(path)
                    group.first_seen = min(group.first_seen, start.timestamp)
        return groups

    def trace(self, snapshot: LedgerSnapshot, index: Optional[GraphIndex] = None) -> List[ChainRecord]:
        """Ranked chain groups, highest total value first."""
        index = index or GraphIndex.from_snapshot(snapshot)
        groups = self.group_paths(index)

        eligible = [
            (key, group) for key, group in groups.items()
            if group.occurrences >= self.config.min_occurrences
        ]

        def sort_key(item):
            key, group = item
            hashes = tuple(snapshot.address_hash(a) for a in key.addresses)
            return (-group.total_value, key.elapsed_seconds, hashes, key.addresses)

        ranked = rank(eligible, key=sort_key, limit=self.config.result_limit)
        records = [
            ChainRecord(
                sequence_id=position,
                start_address=snapshot.address_hash(key.origin),
                path=[snapshot.address_hash(a) for a in key.addresses],
                hop_count=len(key.addresses) - 1,
                occurrences=group.occurrences,
                total_value=group.total_value,
                elapsed_seconds=key.elapsed_seconds,
                first_seen=group.first_seen
            )
            for position, (key, group) in enumerate(ranked, start=1)
        ]
        logger.info(f"Chain tracer found {len(groups)} chain groups, reporting {len(records)}")
        return records

def analyze(
    snapshot: LedgerSnapshot,
    config: Optional[ChainTracerConfig] = None,
    index: Optional[GraphIndex] = None
) -> List[ChainRecord]:
    return ChainTracer(config).trace(snapshot, index)
