# tests/test_outliers.py
from decimal import Decimal

import pytest

from chainforensics.analysis.outliers import (
    OutlierScorer,
    analyze,
    analyze_fee_ratios,
    compute_gas_statistics
)
from chainforensics.config.analytics_config import OutlierConfig
from chainforensics.exceptions import ConfigurationError
from chainforensics.ledger.snapshot import LedgerSnapshot

class TestOutlierScorer:
    @pytest.fixture
    def skewed_snapshot(self, builder):
        for i, price in enumerate(["10", "10", "10", "100"]):
            builder.tx("A", "B", 1, seconds=i, gas_price=price, gas_used="2")
        return builder.build()

    def test_statistics_use_population_stddev(self, skewed_snapshot):
        stats = compute_gas_statistics(skewed_snapshot)

        assert stats.sample_count == 4
        assert stats.mean == Decimal("32.5")
        assert stats.stddev ** 2 == pytest.approx(Decimal("1518.75"))
        assert stats.threshold == pytest.approx(stats.mean + Decimal("0.5") * stats.stddev)

    def test_only_extreme_price_flagged(self, skewed_snapshot):
        flagged = analyze(skewed_snapshot)

        assert [record.tx_hash for record in flagged] == ["0xtx4"]
        record = flagged[0]
        assert record.gas_price == Decimal("100")
        assert record.gas_cost == Decimal("200")
        assert record.z_score > 0

    def test_flagged_prices_exceed_threshold(self, skewed_snapshot):
        config = OutlierConfig(deviation_threshold=Decimal("0.1"))
        stats = compute_gas_statistics(skewed_snapshot, config)

        for record in analyze(skewed_snapshot, config):
            assert record.gas_price > stats.mean + config.deviation_threshold * stats.stddev

    def test_zero_threshold_includes_mean(self, builder):
        for i, price in enumerate(["1", "2", "3"]):
            builder.tx("A", "B", 1, seconds=i, gas_price=price)

        flagged = analyze(builder.build(), OutlierConfig(deviation_threshold=Decimal("0")))

        assert [record.gas_price for record in flagged] == [Decimal("3"), Decimal("2")]

    def test_equal_prices_flag_nothing(self, builder):
        for i in range(3):
            builder.tx("A", "B", 1, seconds=i, gas_price="0.00000005")
        snapshot = builder.build()

        assert analyze(snapshot) == []
        assert compute_gas_statistics(snapshot).stddev == 0

    def test_empty_snapshot_yields_nothing(self):
        snapshot = LedgerSnapshot()

        assert analyze(snapshot) == []
        stats = compute_gas_statistics(snapshot)
        assert stats.sample_count == 0
        assert stats.mean is None
        assert stats.threshold is None

    def test_ranked_by_gas_price(self, sample_snapshot):
        flagged = analyze(sample_snapshot)

        # mean 44 gwei, stddev 2 gwei, threshold 45 gwei (45 itself is not flagged)
        assert [record.tx_hash for record in flagged] == ["0x7c2d...c583", "0x5e3a...a7b5"]
        assert [record.z_score for record in flagged] == [Decimal("1.5"), Decimal("1")]

    def test_fee_ratios_for_contract_receivers(self, sample_snapshot):
        ratios = analyze_fee_ratios(sample_snapshot)

        assert [record.tx_hash for record in ratios] == [
            "0x5e3a...a7b5", "0x9a4b...e7c1", "0x7c2d...c583"
        ]
        assert ratios[1].gas_cost == Decimal("0.000945")
        assert ratios[1].gas_cost_percentage == Decimal("0.00756")

    def test_fee_ratios_skip_zero_value_and_plain_receivers(self, builder):
        builder.address("C", is_contract=True)
        builder.tx("A", "C", 0, seconds=0)
        builder.tx("A", "B", 5, seconds=1)
        builder.tx("A", "C", 2, seconds=2, gas_price="0.001", gas_used="1000")

        ratios = analyze_fee_ratios(builder.build())

        assert len(ratios) == 1
        assert ratios[0].tx_hash == "0xtx3"
        assert ratios[0].gas_cost_percentage == Decimal("50")

    def test_float_threshold_is_converted(self):
        assert OutlierConfig(deviation_threshold=0.5).deviation_threshold == Decimal("0.5")

    @pytest.mark.parametrize("threshold", [Decimal("-0.1"), Decimal("NaN")])
    def test_invalid_threshold_rejected(self, threshold):
        with pytest.raises(ConfigurationError):
            OutlierScorer(OutlierConfig(deviation_threshold=threshold))
