# src/chainforensics/cli/cli.py
import argparse
import sys
from dataclasses import replace
from datetime import timedelta
from decimal import Decimal
from typing import List, Optional

from ..analysis.ranking import to_json
from ..config.settings import AnalyticsSettings
from ..engine import ForensicsEngine
from ..exceptions import ForensicsError
from ..ledger.snapshot import load_snapshot
from ..utils.config import Config
from ..utils.logger import get_logger

logger = get_logger(__name__)

class CLI:
    def __init__(self):
        self.engine: Optional[ForensicsEngine] = None
        self.settings: Optional[AnalyticsSettings] = None

    def main(self, args: List[str]) -> int:
        parser = self.create_parser()
        args = parser.parse_args(args)
        
        if not hasattr(args, 'func'):
            parser.print_help()
            return 1

        try:
            self.settings = AnalyticsSettings(args.settings)
            snapshot = load_snapshot(args.snapshot, strict=args.strict)
            self.engine = ForensicsEngine(snapshot, self.settings)
            records = args.func(args)
        except ForensicsError as e:
            logger.error(f"Analysis failed: {e}")
            return 1

        print(to_json(records))
        return 0

    def create_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(description='chainforensics CLI')
        parser.add_argument('snapshot', help='Snapshot file (JSON or YAML)')
        parser.add_argument('--settings', help='YAML settings file')
        parser.add_argument('--strict', action='store_true',
                            help='Fail on records with unresolved references')
        subparsers = parser.add_subparsers(title='analyses', dest='analysis')

        chains = subparsers.add_parser('chains', help='Rapid fund-movement chains')
        chains.add_argument('--max-hops', type=int, help='Maximum hops per chain')
        chains.add_argument('--hop-window', type=float, help='Seconds allowed between hops')
        chains.add_argument('--limit', type=int, help='Number of chains to report')
        chains.add_argument('--min-occurrences', type=int, help='Minimum instances per chain')
        chains.set_defaults(func=self.trace_chains)

        cycles = subparsers.add_parser('cycles', help='Round-trip (wash trading) cycles')
        cycles.add_argument('--cycle-window', type=float, help='Seconds allowed for the return leg')
        cycles.set_defaults(func=self.detect_cycles)

        flows = subparsers.add_parser('exchange-flows', help='Value moved to and from exchanges')
        flows.add_argument('--exchange', action='append', default=[],
                           help='Exchange address hash (repeatable)')
        flows.set_defaults(func=self.exchange_flows)

        fan_in = subparsers.add_parser('exchange-fan-in', help='Addresses funded by several exchanges')
        fan_in.add_argument('--exchange', action='append', default=[],
                            help='Exchange address hash (repeatable)')
        fan_in.add_argument('--min-exchanges', type=int, help='Minimum distinct exchanges')
        fan_in.set_defaults(func=self.exchange_fan_in)

        outliers = subparsers.add_parser('gas-outliers', help='Anomalous gas prices')
        outliers.add_argument('-k', '--deviation-threshold', type=Decimal,
                              help='Standard deviations above the mean')
        outliers.set_defaults(func=self.gas_outliers)

        fee_ratios = subparsers.add_parser('fee-ratios', help='Fee cost as a share of value')
        fee_ratios.set_defaults(func=self.fee_ratios)

        block_gas = subparsers.add_parser('block-gas', help='Blocks with the highest gas usage')
        block_gas.add_argument('--top-fraction', type=Decimal, default=Config.TOP_BLOCK_FRACTION)
        block_gas.set_defaults(func=self.block_gas)

        activity = subparsers.add_parser('address-activity', help='Transaction counts per address')
        activity.add_argument('--contracts-only', action='store_true')
        activity.set_defaults(func=self.address_activity)

        large = subparsers.add_parser('large-transfers', help='High-value transfers')
        large.add_argument('--min-value', type=Decimal, default=Config.LARGE_TRANSFER_THRESHOLD)
        large.set_defaults(func=self.large_transfers)

        return parser

    def trace_chains(self, args):
        config = self.settings.chain_tracer()
        if args.max_hops is not None:
            config = replace(config, max_hops=args.max_hops)
        if args.hop_window is not None:
            config = replace(config, hop_window=timedelta(seconds=args.hop_window))
        if args.limit is not None:
            config = replace(config, result_limit=args.limit)
        if args.min_occurrences is not None:
            config = replace(config, min_occurrences=args.min_occurrences)
        return self.engine.trace_chains(config)

    def detect_cycles(self, args):
        config = self.settings.cycle_detector()
        if args.cycle_window is not None:
            config = replace(config, cycle_window=timedelta(seconds=args.cycle_window))
        return self.engine.detect_cycles(config)

    def _exchange_config(self, args):
        config = self.settings.exchange_flow()
        if args.exchange:
            config = replace(config, exchange_addresses=frozenset(args.exchange))
        if getattr(args, 'min_exchanges', None) is not None:
            config = replace(config, min_distinct_exchanges=args.min_exchanges)
        return config

    def exchange_flows(self, args):
        return self.engine.exchange_flows(self._exchange_config(args))

    def exchange_fan_in(self, args):
        return self.engine.exchange_fan_in(self._exchange_config(args))

    def gas_outliers(self, args):
        config = self.settings.outliers()
        if args.deviation_threshold is not None:
            config = replace(config, deviation_threshold=args.deviation_threshold)
        return self.engine.gas_outliers(config)

    def fee_ratios(self, args):
        return self.engine.fee_ratios()

    def block_gas(self, args):
        return self.engine.block_gas(args.top_fraction)

    def address_activity(self, args):
        return self.engine.address_activity(args.contracts_only)

    def large_transfers(self, args):
        return self.engine.large_transfers(args.min_value)

def main():
    cli = CLI()
    sys.exit(cli.main(sys.argv[1:]))

if __name__ == "__main__":
    main()
