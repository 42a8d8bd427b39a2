# File: src/chainforensics/config/settings.py

import copy
import os
from datetime import timedelta
from decimal import Decimal
from typing import Any, Dict, Optional

import yaml

from .analytics_config import (
    ChainTracerConfig,
    CycleDetectorConfig,
    ExchangeFlowConfig,
    OutlierConfig
)
from ..exceptions import ConfigurationError
from ..utils.config import Config

DEFAULT_SETTINGS: Dict[str, Any] = {
    "chain_tracer": {
        "max_hops": Config.MAX_HOPS,
        "hop_window_seconds": Config.HOP_WINDOW,
        "result_limit": Config.RESULT_LIMIT,
        "min_occurrences": Config.MIN_CHAIN_OCCURRENCES
    },
    "cycle_detector": {
        "cycle_window_seconds": Config.CYCLE_WINDOW
    },
    "exchange_flow": {
        "exchange_addresses": [],
        "min_distinct_exchanges": Config.MIN_DISTINCT_EXCHANGES
    },
    "outliers": {
        "deviation_threshold": str(Config.DEVIATION_THRESHOLD)
    },
    "monitoring": {
        "metrics_port": None,
        "log_dir": Config.LOG_DIR,
        "log_level": Config.LOG_LEVEL
    },
    "api": {
        "host": Config.API_HOST,
        "port": Config.API_PORT
    }
}

class AnalyticsSettings:
    """Analyzer settings backed by an optional YAML file."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        config = copy.deepcopy(DEFAULT_SETTINGS)
        if not self.config_path or not os.path.exists(self.config_path):
            return config

        try:
            with open(self.config_path, 'r') as f:
                loaded = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Error reading settings {self.config_path}: {str(e)}") from e

        if not isinstance(loaded, dict):
            raise ConfigurationError(f"Settings file {self.config_path} must contain a mapping")

        for section, values in loaded.items():
            if isinstance(values, dict) and isinstance(config.get(section), dict):
                config[section].update(values)
            else:
                config[section] = values
        return config

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        try:
            keys = key.split('.')
            value = self.config
            for k in keys:
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def update(self, key: str, value: Any):
        """Update configuration value."""
        keys = key.split('.')
        config = self.config
        for k in keys[:-1]:
            config = config.setdefault(k, {})
        config[keys[-1]] = value

    def save(self, path: Optional[str] = None):
        """Write the current settings as YAML."""
        target = path or self.config_path
        if not target:
            raise ConfigurationError("No settings path to save to")
        directory = os.path.dirname(target)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(target, 'w') as f:
            yaml.safe_dump(self.config, f)

    def _seconds(self, key: str) -> timedelta:
        value = self.get(key)
        try:
            return timedelta(seconds=float(value))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"{key} must be a number of seconds, got {value!r}") from e

    def chain_tracer(self) -> ChainTracerConfig:
        return ChainTracerConfig(
            max_hops=self.get('chain_tracer.max_hops'),
            hop_window=self._seconds('chain_tracer.hop_window_seconds'),
            result_limit=self.get('chain_tracer.result_limit'),
            min_occurrences=self.get('chain_tracer.min_occurrences', Config.MIN_CHAIN_OCCURRENCES)
        )

    def cycle_detector(self) -> CycleDetectorConfig:
        return CycleDetectorConfig(cycle_window=self._seconds('cycle_detector.cycle_window_seconds'))

    def exchange_flow(self) -> ExchangeFlowConfig:
        return ExchangeFlowConfig(
            exchange_addresses=self.get('exchange_flow.exchange_addresses') or (),
            min_distinct_exchanges=self.get('exchange_flow.min_distinct_exchanges')
        )

    def outliers(self) -> OutlierConfig:
        value = self.get('outliers.deviation_threshold')
        try:
            threshold = Decimal(str(value))
        except ArithmeticError as e:
            raise ConfigurationError(f"outliers.deviation_threshold is not a number: {value!r}") from e
        return OutlierConfig(deviation_threshold=threshold)
