# File: src/chainforensics/analysis/cycle_detector.py
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterator, List, Optional, Set, Tuple
import logging

from .ranking import rank
from .results import CycleRecord
from ..config.analytics_config import CycleDetectorConfig
from ..graph.index import Edge, GraphIndex
from ..ledger.snapshot import LedgerSnapshot

logger = logging.getLogger(__name__)

@dataclass
class CycleStats:
    cycle_count: int = 0
    total_value: Decimal = Decimal(0)
    counterparties: Set[int] = field(default_factory=set)

def representative_value(outbound: Edge, inbound: Edge) -> Decimal:
    """Midpoint of the two legs of a round trip."""
    return (outbound.value + inbound.value) / 2

class CycleDetector:
    """Detects two-hop round trips (A -> B, then B -> A) inside a time window.

    Cycles are counted from the origin's point of view only; the same pair
    seen from B (B -> A, then A -> B) is a separate cycle for B.
    """

    def __init__(self, config: Optional[CycleDetectorConfig] = None):
        self.config = config or CycleDetectorConfig()
        self.config.validate()

    def round_trips(self, index: GraphIndex) -> Iterator[Tuple[Edge, Edge]]:
        """Yield (outbound, return) edge pairs with 0 < elapsed < cycle_window."""
        for outbound in index.edges():
            if outbound.from_address == outbound.to_address:
                continue
            returns = index.between_within(
                outbound.to_address,
                outbound.from_address,
                outbound.timestamp,
                self.config.cycle_window,
                inclusive_end=False
            )
            for inbound in returns:
                yield outbound, inbound

    def detect(self, snapshot: LedgerSnapshot, index: Optional[GraphIndex] = None) -> List[CycleRecord]:
        """Per-origin cycle aggregates, most cycles first, then highest value."""
        index = index or GraphIndex.from_snapshot(snapshot)

        stats: Dict[int, CycleStats] = {}
        for outbound, inbound in self.round_trips(index):
            entry = stats.setdefault(outbound.from_address, CycleStats())
            entry.cycle_count += 1
            entry.total_value += representative_value(outbound, inbound)
            entry.counterparties.add(outbound.to_address)

        ranked = rank(
            stats.items(),
            key=lambda item: (
                -item[1].cycle_count,
                -item[1].total_value,
                snapshot.address_hash(item[0]),
                item[0]
            )
        )
        records = [
            CycleRecord(
                address=snapshot.address_hash(origin),
                cycle_count=entry.cycle_count,
                total_value=entry.total_value,
                average_value=entry.total_value / entry.cycle_count,
                counterparties=sorted({snapshot.address_hash(c) for c in entry.counterparties})
            )
            for origin, entry in ranked
        ]
        logger.info(f"Cycle detector found round trips for {len(records)} addresses")
        return records

def analyze(
    snapshot: LedgerSnapshot,
    config: Optional[CycleDetectorConfig] = None,
    index: Optional[GraphIndex] = None
) -> List[CycleRecord]:
    return CycleDetector(config).detect(snapshot, index)
