# src/chainforensics/analysis/__init__.py
from .chain_tracer import ChainTracer
from .cycle_detector import CycleDetector
from .exchange_flow import ExchangeFlowAggregator
from .outliers import OutlierScorer
from .ranking import rank, to_json, to_row, to_rows

__all__ = [
    'ChainTracer', 'CycleDetector', 'ExchangeFlowAggregator', 'OutlierScorer',
    'rank', 'to_json', 'to_row', 'to_rows'
]
