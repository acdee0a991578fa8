from __future__ import annotations
from dataclasses import dataclass
from numbers import Integral
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence
import logging
import time

from fp_tree import FPNode, FPTree
from utils import absolute_support, dedupe_items, validate_relative_support

logger = logging.getLogger("FPGrowth")


@dataclass
class Itemset:
    items: List[Any]
    support: int


@dataclass
class MiningResult:
    itemsets: List[Itemset]
    execution_time: float # ms
    min_support_count: int
    transaction_count: int


ItemsetSink = Callable[[Itemset], None]


def count_item_supports(transactions: Iterable[Iterable[Any]]) -> Dict[Any, int]:
    """Single scan over the transactions; repeated items count once."""
    supports: Dict[Any, int] = {}
    for transaction in transactions:
        for it in dedupe_items(transaction):
            supports[it] = supports.get(it, 0) + 1
    return supports


def build_fptree(transactions: Sequence[Iterable[Any]], min_support_count: int) -> FPTree:
    supports = count_item_supports(transactions)
    tree = FPTree(supports, min_support_count).from_transactions(transactions)
    logger.debug("Built FP-tree: %d distinct items, %d frequent", len(supports), len(tree.headers))
    return tree


def fpgrowth(
    tree: FPTree,
    prefix_support: int,
    prefix: Sequence[Any] = (),
    emit: Optional[ItemsetSink] = None,
) -> List[Itemset]:
    """Mine every frequent itemset of `tree`, each one extended by `prefix`.

    Headers are visited by ascending support. Each header item yields an
    itemset, then its conditional tree is mined recursively. A tree made of a
    single chain is enumerated directly.
    """
    single_path = tree.get_single_path()
    if single_path is not None:
        return mine_single_path(single_path, prefix_support, prefix, emit)

    results: List[Itemset] = []
    for it in tree.headers:
        support = min(tree.supports[it], prefix_support)
        current = list(prefix) + [it]
        results.append(_emit(current, support, emit))

        child_tree = tree.get_conditional_fp_tree(it)
        if child_tree is not None:
            results.extend(fpgrowth(child_tree, support, current, emit))
    return results


def mine_single_path(
    path: Sequence[FPNode],
    prefix_support: int,
    prefix: Sequence[Any] = (),
    emit: Optional[ItemsetSink] = None,
) -> List[Itemset]:
    """Enumerate all non-empty subsets of a single path in one pass.

    For a path A-B-C the order is A, AB, B, AC, ABC, BC, C: each node is
    appended to every combination seen so far, then taken on its own. The
    support of a combination is the minimum support of its nodes.
    """
    itemsets: List[Itemset] = []
    for node in path:
        extended = [
            _emit(i.items + [node.item], min(i.support, node.support), emit)
            for i in itemsets
        ]
        itemsets.extend(extended)
        itemsets.append(_emit(list(prefix) + [node.item], min(node.support, prefix_support), emit))
    return itemsets


def _emit(items: List[Any], support: int, emit: Optional[ItemsetSink]) -> Itemset:
    itemset = Itemset(items, support)
    if emit is not None:
        emit(itemset)
    return itemset


def mine(
    transactions: Sequence[Iterable[Any]],
    min_support_count: int,
    on_itemset: Optional[ItemsetSink] = None,
) -> List[Itemset]:
    """Mine with an absolute support threshold (a transaction count >= 1)."""
    if isinstance(min_support_count, bool) or not isinstance(min_support_count, Integral) or min_support_count < 1:
        raise ValueError(f"min_support_count must be an integer >= 1, got {min_support_count!r}")
    min_support_count = int(min_support_count)
    transactions = list(transactions)
    tree = build_fptree(transactions, min_support_count)
    return fpgrowth(tree, len(transactions), (), on_itemset)


class FPGrowth:
    """Frequent itemset miner with a relative minimum support.

    Itemsets can be followed as they are found by registering listeners;
    `exec` returns all of them once mining is over.
    """

    def __init__(self, support: float, on_itemset: Optional[ItemsetSink] = None) -> None:
        validate_relative_support(support)
        self.support = support
        self._listeners: List[ItemsetSink] = []
        if on_itemset is not None:
            self._listeners.append(on_itemset)

    def add_listener(self, callback: ItemsetSink) -> "FPGrowth":
        self._listeners.append(callback)
        return self

    def _notify(self, itemset: Itemset) -> None:
        for callback in self._listeners:
            callback(itemset)

    def exec(self, transactions: Iterable[Iterable[Any]]) -> MiningResult:
        start = time.perf_counter()
        transactions = list(transactions)
        min_support_count = absolute_support(self.support, len(transactions))

        tree = build_fptree(transactions, min_support_count)
        itemsets = fpgrowth(tree, len(transactions), (), self._notify)

        elapsed = (time.perf_counter() - start) * 1000
        logger.info(
            "Mined %d frequent itemsets from %d transactions (min support %d) in %.2f ms",
            len(itemsets), len(transactions), min_support_count, elapsed,
        )
        return MiningResult(itemsets, elapsed, min_support_count, len(transactions))


if __name__ == "__main__":
    from config import LOG_LEVEL, MIN_SUPPORT

    logging.basicConfig(level=LOG_LEVEL)

    transactions = [
        [1, 3, 4],
        [2, 3, 5],
        [1, 2, 3, 5],
        [2, 5],
        [1, 2, 3, 5],
    ]

    def print_itemset(itemset: Itemset) -> None:
        print(f"Itemset {{ {', '.join(map(str, itemset.items))} }} is frequent with support {itemset.support}")

    print("Executing FPGrowth...")
    result = FPGrowth(MIN_SUPPORT, on_itemset=print_itemset).exec(transactions)
    print(f"Finished executing FPGrowth. {len(result.itemsets)} frequent itemsets were found in {result.execution_time:.2f}ms.")
