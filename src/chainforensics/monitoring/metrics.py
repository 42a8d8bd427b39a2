# File: src/chainforensics/monitoring/metrics.py

from typing import Optional
from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, start_http_server

class MetricsCollector:
    def __init__(self, port: Optional[int] = None, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or CollectorRegistry()

        # Analyzer metrics
        self.analyses_run = Counter(
            'forensics_analyses', 'Total analyzer runs',
            ['analysis'], registry=self.registry
        )
        self.analysis_results = Counter(
            'forensics_analysis_results', 'Total result records produced',
            ['analysis'], registry=self.registry
        )
        self.analysis_time = Histogram(
            'forensics_analysis_seconds', 'Analyzer run time',
            ['analysis'], registry=self.registry
        )

        # Snapshot metrics
        self.snapshot_transactions = Gauge(
            'forensics_snapshot_transactions', 'Valid transactions in the loaded snapshot',
            registry=self.registry
        )
        self.excluded_records = Gauge(
            'forensics_excluded_records', 'Snapshot records excluded for broken references',
            registry=self.registry
        )

        # Start metrics server
        if port is not None:
            start_http_server(port, registry=self.registry)

    def record_analysis(self, analysis: str, duration: float, result_count: int):
        self.analyses_run.labels(analysis=analysis).inc()
        self.analysis_results.labels(analysis=analysis).inc(result_count)
        self.analysis_time.labels(analysis=analysis).observe(duration)

    def record_snapshot(self, transaction_count: int, excluded_count: int):
        self.snapshot_transactions.set(transaction_count)
        self.excluded_records.set(excluded_count)

    def value(self, name: str, labels: Optional[dict] = None) -> Optional[float]:
        """Current sample value, mainly for inspection in tests."""
        return self.registry.get_sample_value(name, labels or {})
