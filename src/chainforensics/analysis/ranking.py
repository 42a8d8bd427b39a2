# File: src/chainforensics/analysis/ranking.py
import json
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, TypeVar

from pydantic import BaseModel

T = TypeVar('T')

def rank(items: Iterable[T], key: Callable[[T], Any], limit: Optional[int] = None) -> List[T]:
    """Sort items by a total-order key and keep the first ``limit`` of them.

    Keys must never compare equal for distinct items, otherwise output order
    would depend on input order.
    """
    ordered = sorted(items, key=key)
    if limit is not None:
        ordered = ordered[:limit]
    return ordered

def to_row(record: BaseModel) -> Dict[str, Any]:
    """Plain row for export: decimals as strings, timestamps as ISO-8601."""
    return record.model_dump(mode='json')

def to_rows(records: Sequence[BaseModel]) -> List[Dict[str, Any]]:
    return [to_row(record) for record in records]

def to_json(records: Sequence[BaseModel], indent: Optional[int] = 2) -> str:
    return json.dumps(to_rows(records), indent=indent)
