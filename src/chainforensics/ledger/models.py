# File: src/chainforensics/ledger/models.py
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from decimal import Decimal

class Block(BaseModel):
    model_config = ConfigDict(frozen=True)

    block_id: int
    timestamp: datetime
    block_hash: str
    previous_hash: str
    difficulty: str = ""
    transaction_count: int = Field(0, ge=0)

class Address(BaseModel):
    model_config = ConfigDict(frozen=True)

    address_id: int
    address_hash: str
    first_seen: datetime
    is_contract: bool = False

class Transaction(BaseModel):
    model_config = ConfigDict(frozen=True)

    tx_id: int
    tx_hash: str
    block_id: int
    from_address: int
    to_address: int
    value: Decimal = Field(..., ge=0)
    gas_price: Decimal = Field(..., ge=0)
    gas_used: Decimal = Field(..., ge=0)
    timestamp: datetime

    @property
    def gas_cost(self) -> Decimal:
        """Absolute fee paid, gas price times gas used."""
        return self.gas_price * self.gas_used

class TokenTransfer(BaseModel):
    model_config = ConfigDict(frozen=True)

    transfer_id: int
    tx_id: int
    token_address: int
    from_address: int
    to_address: int
    value: Decimal = Field(..., ge=0)
