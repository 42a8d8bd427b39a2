# File: src/chainforensics/api/routes/forensics.py
from dataclasses import replace
from datetime import timedelta
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from ...analysis.ranking import to_row, to_rows
from ...engine import ForensicsEngine
from ...utils.config import Config

router = APIRouter(prefix="/api/v1/forensics")

def get_engine(request: Request) -> ForensicsEngine:
    return request.app.state.engine

@router.get("/chains")
async def get_chains(
    max_hops: Optional[int] = None,
    hop_window_seconds: Optional[float] = None,
    limit: Optional[int] = None,
    min_occurrences: Optional[int] = None,
    engine: ForensicsEngine = Depends(get_engine)
):
    config = engine.settings.chain_tracer()
    if max_hops is not None:
        config = replace(config, max_hops=max_hops)
    if hop_window_seconds is not None:
        config = replace(config, hop_window=timedelta(seconds=hop_window_seconds))
    if limit is not None:
        config = replace(config, result_limit=limit)
    if min_occurrences is not None:
        config = replace(config, min_occurrences=min_occurrences)
    return to_rows(engine.trace_chains(config))

@router.get("/cycles")
async def get_cycles(
    cycle_window_seconds: Optional[float] = None,
    engine: ForensicsEngine = Depends(get_engine)
):
    config = engine.settings.cycle_detector()
    if cycle_window_seconds is not None:
        config = replace(config, cycle_window=timedelta(seconds=cycle_window_seconds))
    return to_rows(engine.detect_cycles(config))

def _exchange_config(engine: ForensicsEngine, exchanges: Optional[List[str]], min_distinct: Optional[int]):
    config = engine.settings.exchange_flow()
    if exchanges:
        config = replace(config, exchange_addresses=frozenset(exchanges))
    if min_distinct is not None:
        config = replace(config, min_distinct_exchanges=min_distinct)
    return config

@router.get("/exchanges/flows")
async def get_exchange_flows(
    exchange: Optional[List[str]] = Query(None),
    engine: ForensicsEngine = Depends(get_engine)
):
    return to_rows(engine.exchange_flows(_exchange_config(engine, exchange, None)))

@router.get("/exchanges/fan-in")
async def get_exchange_fan_in(
    exchange: Optional[List[str]] = Query(None),
    min_distinct_exchanges: Optional[int] = None,
    engine: ForensicsEngine = Depends(get_engine)
):
    config = _exchange_config(engine, exchange, min_distinct_exchanges)
    return to_rows(engine.exchange_fan_in(config))

def _outlier_config(engine: ForensicsEngine, k: Optional[Decimal]):
    config = engine.settings.outliers()
    if k is not None:
        config = replace(config, deviation_threshold=k)
    return config

@router.get("/gas/outliers")
async def get_gas_outliers(
    k: Optional[Decimal] = None,
    engine: ForensicsEngine = Depends(get_engine)
):
    return to_rows(engine.gas_outliers(_outlier_config(engine, k)))

@router.get("/gas/statistics")
async def get_gas_statistics(
    k: Optional[Decimal] = None,
    engine: ForensicsEngine = Depends(get_engine)
):
    return to_row(engine.gas_statistics(_outlier_config(engine, k)))

@router.get("/gas/fee-ratios")
async def get_fee_ratios(engine: ForensicsEngine = Depends(get_engine)):
    return to_rows(engine.fee_ratios())

@router.get("/blocks/gas")
async def get_block_gas(
    top_fraction: Decimal = Config.TOP_BLOCK_FRACTION,
    engine: ForensicsEngine = Depends(get_engine)
):
    return to_rows(engine.block_gas(top_fraction))

@router.get("/addresses/activity")
async def get_address_activity(
    contracts_only: bool = False,
    engine: ForensicsEngine = Depends(get_engine)
):
    return to_rows(engine.address_activity(contracts_only))

@router.get("/transfers/large")
async def get_large_transfers(
    min_value: Decimal = Config.LARGE_TRANSFER_THRESHOLD,
    engine: ForensicsEngine = Depends(get_engine)
):
    return to_rows(engine.large_transfers(min_value))

@router.get("/tokens/{token_hash}/positions")
async def get_token_positions(
    token_hash: str,
    accumulators_only: bool = False,
    engine: ForensicsEngine = Depends(get_engine)
):
    if accumulators_only:
        return to_rows(engine.token_accumulators(token_hash))
    return to_rows(engine.token_positions(token_hash))

@router.get("/tokens/{token_hash}/summary")
async def get_token_summary(token_hash: str, engine: ForensicsEngine = Depends(get_engine)):
    return to_row(engine.token_summary(token_hash))

@router.get("/tokens/{token_hash}/transfers")
async def get_token_transfers(token_hash: str, engine: ForensicsEngine = Depends(get_engine)):
    return to_rows(engine.token_transfers(token_hash))
