# File: src/chainforensics/analysis/outliers.py
from decimal import Decimal, localcontext
from typing import List, Optional
import logging

from .ranking import rank
from .results import FeeRatioRecord, GasOutlierRecord, GasStatistics
from ..config.analytics_config import OutlierConfig
from ..ledger.snapshot import LedgerSnapshot
from ..utils.config import Config

logger = logging.getLogger(__name__)

Z_SCORE_PLACES = Decimal('0.000001')

class OutlierScorer:
    """Flags transactions whose gas price sits unusually far above the mean.

    Statistics are population mean and standard deviation over every valid
    transaction in the snapshot. A transaction is flagged when its gas price
    exceeds ``mean + k * stddev``; with ``k == 0`` the mean itself is included.
    """

    def __init__(self, config: Optional[OutlierConfig] = None):
        self.config = config or OutlierConfig()
        self.config.validate()

    def statistics(self, snapshot: LedgerSnapshot) -> GasStatistics:
        k = self.config.deviation_threshold
        prices = [tx.gas_price for tx in snapshot.transactions]
        if not prices:
            logger.debug("No transactions in snapshot, gas statistics undefined")
            return GasStatistics(
                sample_count=0, mean=None, stddev=None, threshold=None, deviation_threshold=k
            )

        with localcontext() as ctx:
            ctx.prec = Config.STATS_PRECISION
            count = Decimal(len(prices))
            mean = sum(prices, Decimal(0)) / count
            # Two-pass population variance
            variance = sum(((price - mean) ** 2 for price in prices), Decimal(0)) / count
            stddev = variance.sqrt()
            threshold = mean + k * stddev

        if stddev == 0:
            logger.debug("Gas prices are all equal, standard deviation is zero")
        return GasStatistics(
            sample_count=len(prices),
            mean=mean,
            stddev=stddev,
            threshold=threshold,
            deviation_threshold=k
        )

    def is_outlier(self, gas_price: Decimal, stats: GasStatistics) -> bool:
        if stats.threshold is None:
            return False
        if self.config.deviation_threshold == 0:
            return gas_price >= stats.threshold
        return gas_price > stats.threshold

    def gas_outliers(self, snapshot: LedgerSnapshot) -> List[GasOutlierRecord]:
        """Flagged transactions, highest gas price first."""
        stats = self.statistics(snapshot)
        flagged = [tx for tx in snapshot.transactions if self.is_outlier(tx.gas_price, stats)]
        ranked = rank(flagged, key=lambda tx: (-tx.gas_price, tx.tx_id))

        records = []
        for tx in ranked:
            z_score = None
            if stats.stddev:
                with localcontext() as ctx:
                    ctx.prec = Config.STATS_PRECISION
                    z_score = ((tx.gas_price - stats.mean) / stats.stddev).quantize(Z_SCORE_PLACES)
            records.append(
                GasOutlierRecord(
                    tx_hash=tx.tx_hash,
                    gas_price=tx.gas_price,
                    gas_used=tx.gas_used,
                    gas_cost=tx.gas_cost,
                    value=tx.value,
                    z_score=z_score
                )
            )
        logger.info(f"Outlier scorer flagged {len(records)} of {stats.sample_count} transactions")
        return records

    def fee_ratios(self, snapshot: LedgerSnapshot) -> List[FeeRatioRecord]:
        """Fee cost as a percentage of value for positive-value calls into contracts."""
        rows = []
        for tx in snapshot.transactions:
            receiver = snapshot.get_address(tx.to_address)
            if not receiver.is_contract or tx.value <= 0:
                continue
            with localcontext() as ctx:
                ctx.prec = Config.STATS_PRECISION
                percentage = tx.gas_cost / tx.value * 100
            rows.append((tx, receiver.address_hash, percentage))

        ranked = rank(rows, key=lambda row: (-row[2], row[0].tx_id))
        return [
            FeeRatioRecord(
                tx_hash=tx.tx_hash,
                to_address=to_hash,
                value=tx.value,
                gas_cost=tx.gas_cost,
                gas_cost_percentage=percentage
            )
            for tx, to_hash, percentage in ranked
        ]

def analyze(snapshot: LedgerSnapshot, config: Optional[OutlierConfig] = None) -> List[GasOutlierRecord]:
    return OutlierScorer(config).gas_outliers(snapshot)

def analyze_fee_ratios(snapshot: LedgerSnapshot, config: Optional[OutlierConfig] = None) -> List[FeeRatioRecord]:
    return OutlierScorer(config).fee_ratios(snapshot)

def compute_gas_statistics(snapshot: LedgerSnapshot, config: Optional[OutlierConfig] = None) -> GasStatistics:
    return OutlierScorer(config).statistics(snapshot)
