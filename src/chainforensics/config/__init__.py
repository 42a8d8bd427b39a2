# src/chainforensics/config/__init__.py
from .analytics_config import (
    ChainTracerConfig,
    CycleDetectorConfig,
    ExchangeFlowConfig,
    OutlierConfig
)
from .settings import AnalyticsSettings

__all__ = [
    'ChainTracerConfig', 'CycleDetectorConfig', 'ExchangeFlowConfig',
    'OutlierConfig', 'AnalyticsSettings'
]
