# File: src/chainforensics/config/analytics_config.py
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal
from typing import FrozenSet

from ..exceptions import ConfigurationError
from ..utils.config import Config

def _check_window(name: str, window: timedelta) -> None:
    if not isinstance(window, timedelta):
        raise ConfigurationError(f"{name} must be a timedelta, got {type(window).__name__}")
    if window <= timedelta(0):
        raise ConfigurationError(f"{name} must be positive, got {window}")

def _check_int(name: str, value: int, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise ConfigurationError(f"{name} must be at least {minimum}, got {value}")

@dataclass(frozen=True)
class ChainTracerConfig:
    max_hops: int = Config.MAX_HOPS
    hop_window: timedelta = timedelta(seconds=Config.HOP_WINDOW)
    result_limit: int = Config.RESULT_LIMIT
    min_occurrences: int = Config.MIN_CHAIN_OCCURRENCES

    def validate(self) -> None:
        # A reportable chain needs at least two hops
        _check_int('max_hops', self.max_hops, 2)
        _check_window('hop_window', self.hop_window)
        _check_int('result_limit', self.result_limit, 1)
        _check_int('min_occurrences', self.min_occurrences, 1)

@dataclass(frozen=True)
class CycleDetectorConfig:
    cycle_window: timedelta = timedelta(seconds=Config.CYCLE_WINDOW)

    def validate(self) -> None:
        _check_window('cycle_window', self.cycle_window)

@dataclass(frozen=True)
class ExchangeFlowConfig:
    exchange_addresses: FrozenSet[str] = field(default_factory=frozenset)
    min_distinct_exchanges: int = Config.MIN_DISTINCT_EXCHANGES

    def __post_init__(self):
        # Membership is case-insensitive
        if not isinstance(self.exchange_addresses, (list, tuple, set, frozenset)):
            raise ConfigurationError(
                f"exchange_addresses must be a list of hashes, got {self.exchange_addresses!r}"
            )
        addresses = []
        for address in self.exchange_addresses:
            if not isinstance(address, str):
                raise ConfigurationError(
                    f"Exchange address {address!r} is not a string; quote hex hashes in YAML files"
                )
            addresses.append(address.lower())
        object.__setattr__(self, 'exchange_addresses', frozenset(addresses))

    def validate(self, fan_in: bool = False) -> None:
        _check_int('min_distinct_exchanges', self.min_distinct_exchanges, 1)
        if fan_in and not self.exchange_addresses:
            raise ConfigurationError("exchange_addresses must not be empty for fan-in analysis")

@dataclass(frozen=True)
class OutlierConfig:
    deviation_threshold: Decimal = Config.DEVIATION_THRESHOLD

    def __post_init__(self):
        if isinstance(self.deviation_threshold, (int, float)) and not isinstance(self.deviation_threshold, bool):
            object.__setattr__(self, 'deviation_threshold', Decimal(str(self.deviation_threshold)))

    def validate(self) -> None:
        if not isinstance(self.deviation_threshold, Decimal) or not self.deviation_threshold.is_finite():
            raise ConfigurationError(
                f"deviation_threshold must be a finite number, got {self.deviation_threshold!r}"
            )
        if self.deviation_threshold < 0:
            raise ConfigurationError(
                f"deviation_threshold must not be negative, got {self.deviation_threshold}"
            )
