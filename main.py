# main.py
import argparse

import uvicorn

from chainforensics.api.server import create_app
from chainforensics.config.settings import AnalyticsSettings
from chainforensics.engine import ForensicsEngine
from chainforensics.ledger.snapshot import load_snapshot
from chainforensics.monitoring.logging_config import LogConfig
from chainforensics.monitoring.metrics import MetricsCollector

def main():
    parser = argparse.ArgumentParser(description='Serve forensics analytics over a ledger snapshot')
    parser.add_argument('snapshot', help='Snapshot file (JSON or YAML)')
    parser.add_argument('--settings', help='YAML settings file')
    args = parser.parse_args()

    # Initialize core components
    settings = AnalyticsSettings(args.settings)
    LogConfig(
        log_dir=settings.get('monitoring.log_dir'),
        console_level=settings.get('monitoring.log_level')
    ).setup_logging()
    metrics = MetricsCollector(port=settings.get('monitoring.metrics_port'))

    snapshot = load_snapshot(args.snapshot)
    engine = ForensicsEngine(snapshot, settings, metrics)

    # Start API server
    uvicorn.run(
        create_app(engine),
        host=settings.get('api.host'),
        port=settings.get('api.port')
    )

if __name__ == "__main__":
    main()
