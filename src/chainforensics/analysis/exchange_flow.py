# File: src/chainforensics/analysis/exchange_flow.py
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, FrozenSet, List, Optional, Set
import logging

from .ranking import rank
from .results import ExchangeFanInRecord, ExchangeFlowRecord
from ..config.analytics_config import ExchangeFlowConfig
from ..graph.index import GraphIndex
from ..ledger.snapshot import LedgerSnapshot

logger = logging.getLogger(__name__)

@dataclass
class FlowStats:
    exchanges: Set[int] = field(default_factory=set)
    sent: Decimal = Decimal(0)
    received: Decimal = Decimal(0)
    tx_ids: Set[int] = field(default_factory=set)

@dataclass
class FanInStats:
    exchanges: Set[int] = field(default_factory=set)
    first_received: Optional[datetime] = None

class ExchangeFlowAggregator:
    """Aggregates value moved between ordinary addresses and known exchanges."""

    def __init__(self, config: Optional[ExchangeFlowConfig] = None):
        self.config = config or ExchangeFlowConfig()
        self.config.validate()

    def exchange_ids(self, snapshot: LedgerSnapshot) -> FrozenSet[int]:
        """Resolve configured exchange hashes to snapshot address ids."""
        ids: Set[int] = set()
        for address_hash in sorted(self.config.exchange_addresses):
            matches = snapshot.address_ids_for(address_hash)
            if not matches:
                logger.debug(f"Exchange {address_hash} does not appear in the snapshot")
            ids.update(matches)
        return frozenset(ids)

    def flows(self, snapshot: LedgerSnapshot, index: Optional[GraphIndex] = None) -> List[ExchangeFlowRecord]:
        """Per-address exchange flow, highest total value first.

        A transaction counts toward the non-exchange party whether the
        exchange sent or received it; a transfer between two exchanges
        counts toward both.
        """
        index = index or GraphIndex.from_snapshot(snapshot)
        stats: Dict[int, FlowStats] = {}

        for exchange in self.exchange_ids(snapshot):
            for edge in index.incoming(exchange):
                entry = stats.setdefault(edge.from_address, FlowStats())
                entry.exchanges.add(exchange)
                entry.sent += edge.value
                entry.tx_ids.add(edge.tx_id)
            for edge in index.outgoing(exchange):
                entry = stats.setdefault(edge.to_address, FlowStats())
                entry.exchanges.add(exchange)
                entry.received += edge.value
                entry.tx_ids.add(edge.tx_id)

        ranked = rank(
            stats.items(),
            key=lambda item: (
                -(item[1].sent + item[1].received),
                snapshot.address_hash(item[0]),
                item[0]
            )
        )
        records = [
            ExchangeFlowRecord(
                address=snapshot.address_hash(address),
                exchanges_used=len(entry.exchanges),
                total_value=entry.sent + entry.received,
                sent_to_exchanges=entry.sent,
                received_from_exchanges=entry.received,
                transaction_count=len(entry.tx_ids)
            )
            for address, entry in ranked
        ]
        logger.info(f"Exchange flow aggregated {len(records)} addresses")
        return records

    def fan_in(self, snapshot: LedgerSnapshot, index: Optional[GraphIndex] = None) -> List[ExchangeFanInRecord]:
        """Addresses funded by at least ``min_distinct_exchanges`` distinct exchanges."""
        self.config.validate(fan_in=True)
        index = index or GraphIndex.from_snapshot(snapshot)
        stats: Dict[int, FanInStats] = {}

        for exchange in self.exchange_ids(snapshot):
            for edge in index.outgoing(exchange):
                entry = stats.setdefault(edge.to_address, FanInStats())
                entry.exchanges.add(exchange)
                if entry.first_received is None or edge.timestamp < entry.first_received:
                    entry.first_received = edge.timestamp

        reported = [
            (address, entry) for address, entry in stats.items()
            if len(entry.exchanges) > self.config.min_distinct_exchanges - 1
        ]
        ranked = rank(
            reported,
            key=lambda item: (
                -len(item[1].exchanges),
                item[1].first_received,
                snapshot.address_hash(item[0]),
                item[0]
            )
        )
        records = [
            ExchangeFanInRecord(
                address=snapshot.address_hash(address),
                exchanges_used=len(entry.exchanges),
                first_received_from_exchange=entry.first_received
            )
            for address, entry in ranked
        ]
        logger.info(f"Exchange fan-in reported {len(records)} addresses")
        return records

def analyze(
    snapshot: LedgerSnapshot,
    config: Optional[ExchangeFlowConfig] = None,
    index: Optional[GraphIndex] = None
) -> List[ExchangeFlowRecord]:
    return ExchangeFlowAggregator(config).flows(snapshot, index)

def analyze_fan_in(
    snapshot: LedgerSnapshot,
    config: Optional[ExchangeFlowConfig] = None,
    index: Optional[GraphIndex] = None
) -> List[ExchangeFanInRecord]:
    return ExchangeFlowAggregator(config).fan_in(snapshot, index)
