from __future__ import annotations
from collections import deque
from typing import Any, Deque, List, Optional, Union
import json
import logging

from fpgrowth import FPGrowth, Itemset, ItemsetSink
from utils import absolute_support, dedupe_items, validate_relative_support

logger = logging.getLogger("StreamItemsetMiner")


def _as_item(value: Any) -> Any:
    # JSON arrays are unhashable, items are kept as (nested) tuples
    if isinstance(value, list):
        return tuple(_as_item(v) for v in value)
    if isinstance(value, dict):
        raise ValueError(f"Item {value!r} is not hashable")
    return value


def decode_transaction(value: Union[bytes, str]) -> List[Any]:
    """Decode a Kafka message value into a transaction.

    Accepts a JSON list of items or an object with an "items" list. Items
    that cannot be hashed (JSON objects) raise ValueError.
    """
    if isinstance(value, bytes):
        value = value.decode()
    try:
        raw = json.loads(value)
    except json.JSONDecodeError as e:
        raise ValueError(f"Transaction is not valid JSON: {e}") from e
    if isinstance(raw, dict):
        raw = raw.get("items")
    if not isinstance(raw, list):
        raise ValueError(f"Transaction must be a list of items, got {type(raw).__name__}")
    return [_as_item(it) for it in raw]


class StreamItemsetMiner:
    """Mines frequent itemsets over a sliding window of recent transactions."""

    def __init__(
        self,
        *,
        min_support: float = 0.4,
        window_max_transactions: int = 100,
        emit_after_transactions: int = 20,
        on_itemset: Optional[ItemsetSink] = None,
    ) -> None:
        validate_relative_support(min_support)
        if window_max_transactions <= 0 or emit_after_transactions <= 0:
            raise ValueError("Window sizes must be positive")
        self.min_support = min_support
        self.window_max_transactions = window_max_transactions
        self.emit_after_transactions = emit_after_transactions
        self.on_itemset = on_itemset
        self.window: Deque[List[Any]] = deque(maxlen=window_max_transactions)
        self.window_events = 0

    def observe(self, transaction: List[Any]) -> None:
        self.window.append(dedupe_items(transaction))
        self.window_events += 1

    def window_ready(self) -> bool:
        return self.window_events > 0 and self.window_events % self.emit_after_transactions == 0

    def min_support_count(self) -> int:
        return absolute_support(self.min_support, len(self.window))

    def maybe_emit(self) -> List[Itemset]:
        if not self.window_ready():
            return []
        return self.force_emit()

    def force_emit(self) -> List[Itemset]:
        if not self.window:
            return []
        miner = FPGrowth(self.min_support, on_itemset=self.on_itemset)
        result = miner.exec(list(self.window))
        logger.debug(
            "Window of %d transactions -> %d itemsets", result.transaction_count, len(result.itemsets)
        )
        return result.itemsets
