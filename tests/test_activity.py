# tests/test_activity.py
from decimal import Decimal

import pytest

from chainforensics.analysis import activity, token_flow
from chainforensics.exceptions import ConfigurationError

DAI = "0x89d24A6b4CcB1B6fAA2625fE562bDD9a23260359"

class TestActivity:
    def test_top_gas_blocks(self, sample_snapshot):
        blocks = activity.top_gas_blocks(sample_snapshot)

        assert len(blocks) == 1
        assert blocks[0].block_id == 14321001
        assert blocks[0].total_gas_used == Decimal("107000")
        assert blocks[0].average_gas_used == Decimal("53500")
        assert blocks[0].transaction_count == 2

    def test_top_gas_blocks_full_fraction(self, sample_snapshot):
        blocks = activity.top_gas_blocks(sample_snapshot, Decimal("1"))

        assert [block.block_id for block in blocks] == [14321001, 14321000, 14321002]

    @pytest.mark.parametrize("fraction", [Decimal("0"), Decimal("1.5")])
    def test_top_gas_blocks_rejects_bad_fraction(self, sample_snapshot, fraction):
        with pytest.raises(ConfigurationError):
            activity.top_gas_blocks(sample_snapshot, fraction)

    def test_address_activity_counts(self, builder):
        builder.tx("A", "B", 1, seconds=0)
        builder.tx("A", "C", 1, seconds=1)
        builder.tx("B", "A", 1, seconds=2)
        builder.address("IDLE")

        records = {r.address: r for r in activity.address_activity(builder.build())}

        assert (records["A"].sent_count, records["A"].received_count) == (2, 1)
        assert records["A"].total_transactions == 3
        assert records["IDLE"].total_transactions == 0

    def test_contract_activity(self, sample_snapshot):
        records = activity.address_activity(sample_snapshot, contracts_only=True)

        assert [r.address for r in records] == [
            "0x28c6c06298d514Db089934071355E5743bf21d60",
            "0x2fAf55a544C5F73666438BC185aeCC8D685E6b83",
            DAI,
        ]
        assert all(r.is_contract for r in records)

    def test_large_transfers(self, sample_snapshot):
        records = activity.large_transfers(sample_snapshot)

        assert [r.value for r in records] == [Decimal("1500"), Decimal("22.3"), Decimal("12.5")]
        assert records[0].to_address == DAI

class TestTokenFlow:
    def test_token_summary(self, sample_snapshot):
        summary = token_flow.token_summary(sample_snapshot, DAI)

        assert summary.total_volume == Decimal("191250")
        assert summary.transfer_count == 6
        assert summary.unique_senders == 6
        assert summary.unique_receivers == 6

    def test_unknown_token_summary_is_empty(self, sample_snapshot):
        summary = token_flow.token_summary(sample_snapshot, "0xnothing")

        assert summary.total_volume == 0
        assert summary.transfer_count == 0

    def test_token_positions(self, sample_snapshot):
        positions = token_flow.token_positions(sample_snapshot, DAI)

        assert positions[0].address == DAI
        assert positions[0].net == Decimal("150000")
        assert positions[-1].net == Decimal("-150000")
        assert sum(p.net for p in positions) == 0

    def test_token_accumulators(self, sample_snapshot):
        accumulators = token_flow.token_accumulators(sample_snapshot, DAI)

        assert [(a.address, a.total_received) for a in accumulators] == [
            (DAI, Decimal("150000")),
            ("0x742d35Cc6634C0532925a3b844Bc454e4438f44e", Decimal("22300")),
        ]

    def test_zero_value_send_disqualifies_accumulator(self, builder):
        first = builder.tx("A", "B", 1, seconds=0)
        second = builder.tx("B", "C", 1, seconds=1)
        builder.token_transfer(first, "TOKEN", "A", "B", 10)
        builder.token_transfer(second, "TOKEN", "B", "C", 0)

        accumulators = token_flow.token_accumulators(builder.build(), "TOKEN")

        assert [a.address for a in accumulators] == ["C"]

    def test_token_transfers_in_transaction_order(self, sample_snapshot):
        transfers = token_flow.token_transfers_of(sample_snapshot, DAI)

        assert [t.transfer_id for t in transfers] == [1, 2, 3, 4, 5, 6]
        assert transfers[0].tx_hash == "0x8b3c...d6a2"
        assert transfers[0].from_address == "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
        assert transfers[0].to_address == "0x3f5CE5FBFe3E9af3971dD833D26bA9b5C936f0bE"
        assert transfers[0].value == Decimal("3200")

    def test_token_transfers_ordered_by_transaction(self, builder):
        late = builder.tx("A", "B", 1, seconds=10)
        early = builder.tx("B", "C", 1, seconds=0)
        builder.token_transfer(early, "TOKEN", "B", "C", 7)
        builder.token_transfer(late, "TOKEN", "A", "B", 5)

        transfers = token_flow.token_transfers_of(builder.build(), "TOKEN")

        assert [(t.from_address, t.value) for t in transfers] == [("A", Decimal(5)), ("B", Decimal(7))]
        assert token_flow.token_transfers_of(builder.build(), "OTHER") == []
