from __future__ import annotations
from typing import Any, Iterable, List
import json
import math

import numpy as np


def json_serialize(obj):
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, np.generic):
        return obj.item()
    if isinstance(obj, (set, frozenset)):
        return sorted(obj, key=item_key)
    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")


def item_key(item: Any) -> str:
    """Canonical string form of an item, used to break support ties."""
    try:
        return json.dumps(item, sort_keys=True, default=json_serialize)
    except TypeError:
        return repr(item)


def dedupe_items(items: Iterable[Any]) -> List[Any]:
    """Drop repeated items of one transaction, keeping first occurrences."""
    seen = set()
    out: List[Any] = []
    for it in items:
        try:
            if it in seen:
                continue
        except TypeError as e:
            raise ValueError(f"Item {it!r} is not hashable") from e
        seen.add(it)
        out.append(it)
    return out


def absolute_support(support: float, transaction_count: int) -> int:
    """Convert a relative support in (0, 1) to a transaction count.

    The product is rounded to 9 decimals before ceil() so that float noise
    (0.7 * 10 == 7.000000000000001) does not raise the threshold.
    """
    validate_relative_support(support)
    return math.ceil(round(support * transaction_count, 9))


def validate_relative_support(support: float) -> None:
    if isinstance(support, bool) or not isinstance(support, (int, float)):
        raise ValueError(f"Support must be a number, got {support!r}")
    if not 0.0 < support < 1.0:
        raise ValueError(f"Relative support must be in (0, 1), got {support}")


def itemset_to_dict(itemset) -> dict:
    return {"items": list(itemset.items), "support": itemset.support}


def encode_itemsets(itemsets, window_size: int, min_support_count: int) -> bytes:
    payload = {
        "window": {"size_transactions": window_size, "min_support_count": min_support_count},
        "itemsets": [itemset_to_dict(i) for i in itemsets],
    }
    return json.dumps(payload, default=json_serialize).encode()
