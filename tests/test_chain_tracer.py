# tests/test_chain_tracer.py
from datetime import timedelta
from decimal import Decimal

import pytest

from chainforensics.analysis.chain_tracer import ChainTracer, analyze
from chainforensics.config.analytics_config import ChainTracerConfig
from chainforensics.exceptions import ConfigurationError
from chainforensics.graph.index import GraphIndex

class TestChainTracer:
    @pytest.fixture
    def tracer(self):
        return ChainTracer()

    def test_two_hop_chain(self, builder):
        builder.tx("A", "B", 10, seconds=0)
        builder.tx("B", "C", 8, seconds=120)

        chains = analyze(builder.build())

        assert len(chains) == 1
        chain = chains[0]
        assert chain.path == ["A", "B", "C"]
        assert chain.start_address == "A"
        assert chain.hop_count == 2
        assert chain.total_value == Decimal("18")
        assert chain.elapsed_seconds == 120
        assert chain.occurrences == 1
        assert chain.sequence_id == 1
        assert chain.first_seen == builder.time(0)

    def test_isolated_transfer_is_not_a_chain(self, builder):
        builder.tx("A", "B", 10, seconds=0)
        builder.tx("C", "D", 10, seconds=10)

        assert analyze(builder.build()) == []

    def test_continuation_outside_window_is_ignored(self, builder):
        builder.tx("A", "B", 10, seconds=0)
        builder.tx("B", "C", 8, seconds=301)

        assert analyze(builder.build()) == []

    def test_continuation_at_window_boundary_is_accepted(self, builder):
        builder.tx("A", "B", 10, seconds=0)
        builder.tx("B", "C", 8, seconds=300)

        assert len(analyze(builder.build())) == 1

    def test_same_timestamp_is_not_a_continuation(self, builder):
        builder.tx("A", "B", 10, seconds=60)
        builder.tx("B", "C", 8, seconds=60)

        assert analyze(builder.build()) == []

    def test_earlier_outgoing_transfer_is_not_a_continuation(self, builder):
        builder.tx("B", "C", 8, seconds=0)
        builder.tx("A", "B", 10, seconds=60)

        assert analyze(builder.build()) == []

    def test_three_hop_chain_reports_maximal_path(self, builder):
        builder.tx("A", "B", 10, seconds=0)
        builder.tx("B", "C", 9, seconds=60)
        builder.tx("C", "D", 8, seconds=120)

        chains = analyze(builder.build())

        paths = [chain.path for chain in chains]
        assert ["A", "B", "C", "D"] in paths
        # The A-B-C prefix has a continuation, so it is not reported alone
        assert ["A", "B", "C"] not in paths
        # B-C-D starts at its own transaction
        assert ["B", "C", "D"] in paths
        top = chains[0]
        assert top.path == ["A", "B", "C", "D"]
        assert top.total_value == Decimal("27")
        assert top.elapsed_seconds == 120

    def test_hop_bound_stops_traversal(self, builder):
        for hop, (sender, receiver) in enumerate([("A", "B"), ("B", "C"), ("C", "D"), ("D", "E")]):
            builder.tx(sender, receiver, 1, seconds=hop * 60)
        config = ChainTracerConfig(max_hops=3)

        chains = analyze(builder.build(), config)

        assert max(chain.hop_count for chain in chains) == 3
        assert ["A", "B", "C", "D"] in [chain.path for chain in chains]
        for chain in chains:
            assert 2 <= chain.hop_count <= config.max_hops
            assert chain.elapsed_seconds <= config.max_hops * config.hop_window.total_seconds()

    def test_larger_hop_bound_follows_longer_chains(self, builder):
        for hop, (sender, receiver) in enumerate([("A", "B"), ("B", "C"), ("C", "D"), ("D", "E")]):
            builder.tx(sender, receiver, 1, seconds=hop * 60)

        chains = analyze(builder.build(), ChainTracerConfig(max_hops=4))

        assert chains[0].path == ["A", "B", "C", "D", "E"]
        assert chains[0].hop_count == 4

    def test_branches_are_enumerated(self, builder):
        builder.tx("A", "B", 10, seconds=0)
        builder.tx("B", "C", 5, seconds=60)
        builder.tx("B", "D", 4, seconds=60)

        chains = analyze(builder.build())

        assert [chain.path for chain in chains] == [["A", "B", "C"], ["A", "B", "D"]]
        assert [chain.total_value for chain in chains] == [Decimal("15"), Decimal("14")]

    def test_paths_from_follows_index_tiebreak(self, builder, tracer):
        start = builder.tx("A", "B", 10, seconds=0)
        builder.tx("B", "D", 5, seconds=60)
        builder.tx("B", "C", 5, seconds=60)
        index = GraphIndex.from_snapshot(builder.build())
        first_edge = index.outgoing(builder.address("A"))[0]

        paths = list(tracer.paths_from(first_edge, index))

        assert first_edge.tx_id == start.tx_id
        assert [[edge.tx_id for edge in path] for path in paths] == [[1, 2], [1, 3]]

    def test_duplicate_instances_are_grouped(self, builder):
        builder.tx("A", "B", 10, seconds=0)
        builder.tx("A", "B", 6, seconds=0)
        builder.tx("B", "C", 4, seconds=90)

        chains = analyze(builder.build())

        assert len(chains) == 1
        assert chains[0].occurrences == 2
        # (10 + 4) + (6 + 4)
        assert chains[0].total_value == Decimal("24")

    def test_different_elapsed_times_are_separate_groups(self, builder):
        builder.tx("A", "B", 10, seconds=0)
        builder.tx("A", "B", 10, seconds=30)
        builder.tx("B", "C", 4, seconds=90)

        chains = analyze(builder.build())

        assert sorted(chain.elapsed_seconds for chain in chains) == [60, 90]

    def test_min_occurrences_filters_groups(self, builder):
        builder.tx("A", "B", 10, seconds=0)
        builder.tx("A", "B", 6, seconds=0)
        builder.tx("B", "C", 4, seconds=90)
        builder.tx("X", "Y", 100, seconds=0)
        builder.tx("Y", "Z", 100, seconds=10)

        chains = analyze(builder.build(), ChainTracerConfig(min_occurrences=2))

        assert [chain.path for chain in chains] == [["A", "B", "C"]]

    def test_total_value_matches_hand_computed_chains(self, builder):
        builder.tx("A", "B", "1.5", seconds=0)
        builder.tx("B", "C", "2.25", seconds=100)
        builder.tx("D", "E", "3", seconds=0)
        builder.tx("E", "F", "4", seconds=200)
        builder.tx("F", "G", "5", seconds=400)

        chains = analyze(builder.build())

        # A-B-C: 3.75; D-E-F-G: 12; E-F-G: 9
        assert sum(chain.total_value for chain in chains) == Decimal("24.75")
        assert [chain.total_value for chain in chains] == [Decimal("12"), Decimal("9"), Decimal("3.75")]

    def test_result_limit_truncates(self, builder):
        for i in range(5):
            builder.tx(f"S{i}", f"M{i}", i + 1, seconds=0)
            builder.tx(f"M{i}", f"R{i}", 1, seconds=10)

        chains = analyze(builder.build(), ChainTracerConfig(result_limit=3))

        assert [chain.start_address for chain in chains] == ["S4", "S3", "S2"]
        assert [chain.sequence_id for chain in chains] == [1, 2, 3]

    def test_deterministic_output(self, builder):
        builder.tx("A", "B", 10, seconds=0)
        builder.tx("B", "C", 5, seconds=60)
        builder.tx("B", "D", 5, seconds=60)
        builder.tx("C", "A", 5, seconds=90)
        snapshot = builder.build()

        assert analyze(snapshot) == analyze(snapshot)

    def test_round_trip_path_is_a_chain(self, builder):
        builder.tx("A", "B", 5, seconds=0)
        builder.tx("B", "A", 5, seconds=60)

        chains = analyze(builder.build())

        assert chains[0].path == ["A", "B", "A"]

    def test_sample_snapshot(self, sample_snapshot):
        chains = analyze(sample_snapshot)

        assert [chain.total_value for chain in chains] == [
            Decimal("1512.5"), Decimal("11.95"), Decimal("7.00")
        ]
        assert chains[0].path == [
            "0x742d35Cc6634C0532925a3b844Bc454e4438f44e",
            "0x28c6c06298d514Db089934071355E5743bf21d60",
            "0x89d24A6b4CcB1B6fAA2625fE562bDD9a23260359"
        ]
        assert chains[0].elapsed_seconds == 88

    @pytest.mark.parametrize("config", [
        ChainTracerConfig(max_hops=0),
        ChainTracerConfig(max_hops=-1),
        ChainTracerConfig(max_hops=1),
        ChainTracerConfig(hop_window=timedelta(seconds=-5)),
        ChainTracerConfig(hop_window=timedelta(0)),
        ChainTracerConfig(result_limit=0),
        ChainTracerConfig(min_occurrences=0),
    ])
    def test_invalid_config_rejected(self, config):
        with pytest.raises(ConfigurationError):
            ChainTracer(config)
