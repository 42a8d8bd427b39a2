# File: src/chainforensics/engine.py
import time
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional
import logging

from .analysis import activity, token_flow
from .analysis.chain_tracer import ChainTracer
from .analysis.cycle_detector import CycleDetector
from .analysis.exchange_flow import ExchangeFlowAggregator
from .analysis.outliers import OutlierScorer
from .analysis.results import GasStatistics, TokenSummary
from .config.analytics_config import (
    ChainTracerConfig,
    CycleDetectorConfig,
    ExchangeFlowConfig,
    OutlierConfig
)
from .config.settings import AnalyticsSettings
from .exceptions import AnalysisError
from .graph.index import GraphIndex
from .ledger.snapshot import LedgerSnapshot
from .monitoring.metrics import MetricsCollector
from .utils.config import Config

logger = logging.getLogger(__name__)

class ForensicsEngine:
    """Runs analyzers against one snapshot, sharing a single graph index.

    Explicit config arguments take precedence over the engine's settings.
    """

    def __init__(
        self,
        snapshot: LedgerSnapshot,
        settings: Optional[AnalyticsSettings] = None,
        metrics: Optional[MetricsCollector] = None
    ):
        self.snapshot = snapshot
        self.settings = settings or AnalyticsSettings()
        self.metrics = metrics
        self._index: Optional[GraphIndex] = None

        if self.metrics:
            self.metrics.record_snapshot(len(snapshot.transactions), len(snapshot.violations))

        self._analyses: Dict[str, Callable[..., List[Any]]] = {
            'chains': self.trace_chains,
            'cycles': self.detect_cycles,
            'exchange-flows': self.exchange_flows,
            'exchange-fan-in': self.exchange_fan_in,
            'gas-outliers': self.gas_outliers,
            'fee-ratios': self.fee_ratios,
            'block-gas': self.block_gas,
            'address-activity': self.address_activity,
            'large-transfers': self.large_transfers,
        }

    @property
    def index(self) -> GraphIndex:
        if self._index is None:
            self._index = GraphIndex.from_snapshot(self.snapshot)
        return self._index

    @property
    def analyses(self) -> List[str]:
        return list(self._analyses)

    def run(self, analysis: str, **options) -> List[Any]:
        """Run an analysis by name."""
        if analysis not in self._analyses:
            raise AnalysisError(
                f"Unknown analysis '{analysis}', expected one of: {', '.join(self._analyses)}"
            )
        return self._analyses[analysis](**options)

    def _timed(self, analysis: str, func: Callable[[], List[Any]]) -> List[Any]:
        start = time.perf_counter()
        records = func()
        duration = time.perf_counter() - start
        logger.debug(f"{analysis} produced {len(records)} records in {duration:.3f}s")
        if self.metrics:
            self.metrics.record_analysis(analysis, duration, len(records))
        return records

    def trace_chains(self, config: Optional[ChainTracerConfig] = None) -> List[Any]:
        tracer = ChainTracer(config or self.settings.chain_tracer())
        return self._timed('chains', lambda: tracer.trace(self.snapshot, self.index))

    def detect_cycles(self, config: Optional[CycleDetectorConfig] = None) -> List[Any]:
        detector = CycleDetector(config or self.settings.cycle_detector())
        return self._timed('cycles', lambda: detector.detect(self.snapshot, self.index))

    def exchange_flows(self, config: Optional[ExchangeFlowConfig] = None) -> List[Any]:
        aggregator = ExchangeFlowAggregator(config or self.settings.exchange_flow())
        return self._timed('exchange-flows', lambda: aggregator.flows(self.snapshot, self.index))

    def exchange_fan_in(self, config: Optional[ExchangeFlowConfig] = None) -> List[Any]:
        aggregator = ExchangeFlowAggregator(config or self.settings.exchange_flow())
        return self._timed('exchange-fan-in', lambda: aggregator.fan_in(self.snapshot, self.index))

    def gas_outliers(self, config: Optional[OutlierConfig] = None) -> List[Any]:
        scorer = OutlierScorer(config or self.settings.outliers())
        return self._timed('gas-outliers', lambda: scorer.gas_outliers(self.snapshot))

    def gas_statistics(self, config: Optional[OutlierConfig] = None) -> GasStatistics:
        return OutlierScorer(config or self.settings.outliers()).statistics(self.snapshot)

    def fee_ratios(self) -> List[Any]:
        scorer = OutlierScorer(self.settings.outliers())
        return self._timed('fee-ratios', lambda: scorer.fee_ratios(self.snapshot))

    def block_gas(self, top_fraction: Decimal = Config.TOP_BLOCK_FRACTION) -> List[Any]:
        return self._timed('block-gas', lambda: activity.top_gas_blocks(self.snapshot, top_fraction))

    def address_activity(self, contracts_only: bool = False) -> List[Any]:
        return self._timed(
            'address-activity', lambda: activity.address_activity(self.snapshot, contracts_only)
        )

    def large_transfers(self, min_value: Decimal = Config.LARGE_TRANSFER_THRESHOLD) -> List[Any]:
        return self._timed(
            'large-transfers', lambda: activity.large_transfers(self.snapshot, min_value)
        )

    def token_summary(self, token_hash: str) -> TokenSummary:
        return token_flow.token_summary(self.snapshot, token_hash)

    def token_positions(self, token_hash: str) -> List[Any]:
        return self._timed(
            'token-positions', lambda: token_flow.token_positions(self.snapshot, token_hash)
        )

    def token_accumulators(self, token_hash: str) -> List[Any]:
        return self._timed(
            'token-accumulators', lambda: token_flow.token_accumulators(self.snapshot, token_hash)
        )

    def token_transfers(self, token_hash: str) -> List[Any]:
        return self._timed(
            'token-transfers', lambda: token_flow.token_transfers_of(self.snapshot, token_hash)
        )
