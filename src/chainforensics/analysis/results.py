# File: src/chainforensics/analysis/results.py
from pydantic import BaseModel, ConfigDict
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

class ResultRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

class ChainRecord(ResultRecord):
    """A group of identical rapid fund-movement paths"""
    sequence_id: int
    start_address: str
    path: List[str]
    hop_count: int
    occurrences: int
    total_value: Decimal
    elapsed_seconds: int
    first_seen: datetime

class CycleRecord(ResultRecord):
    """Round trips originating at one address"""
    address: str
    cycle_count: int
    total_value: Decimal
    average_value: Decimal
    counterparties: List[str]

class ExchangeFlowRecord(ResultRecord):
    address: str
    exchanges_used: int
    total_value: Decimal
    sent_to_exchanges: Decimal
    received_from_exchanges: Decimal
    transaction_count: int

class ExchangeFanInRecord(ResultRecord):
    address: str
    exchanges_used: int
    first_received_from_exchange: datetime

class GasStatistics(ResultRecord):
    sample_count: int
    mean: Optional[Decimal]
    stddev: Optional[Decimal]
    threshold: Optional[Decimal]
    deviation_threshold: Decimal

class GasOutlierRecord(ResultRecord):
    tx_hash: str
    gas_price: Decimal
    gas_used: Decimal
    gas_cost: Decimal
    value: Decimal
    z_score: Optional[Decimal]

class FeeRatioRecord(ResultRecord):
    tx_hash: str
    to_address: str
    value: Decimal
    gas_cost: Decimal
    gas_cost_percentage: Decimal

class BlockGasRecord(ResultRecord):
    block_id: int
    total_gas_used: Decimal
    average_gas_used: Decimal
    transaction_count: int

class AddressActivityRecord(ResultRecord):
    address: str
    is_contract: bool
    sent_count: int
    received_count: int
    total_transactions: int

class LargeTransferRecord(ResultRecord):
    tx_hash: str
    value: Decimal
    from_address: str
    to_address: str
    timestamp: datetime

class TokenSummary(ResultRecord):
    token_address: str
    total_volume: Decimal
    transfer_count: int
    unique_senders: int
    unique_receivers: int

class TokenPositionRecord(ResultRecord):
    address: str
    total_received: Decimal
    total_sent: Decimal
    net: Decimal

class TokenTransferRecord(ResultRecord):
    transfer_id: int
    tx_hash: str
    from_address: str
    to_address: str
    value: Decimal
