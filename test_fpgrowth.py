from collections import Counter
from itertools import combinations
import random

import numpy as np
import pytest

from fp_tree import FPNode
from fpgrowth import (
    FPGrowth,
    Itemset,
    build_fptree,
    count_item_supports,
    fpgrowth,
    mine,
    mine_single_path,
)
from utils import absolute_support, item_key


TRANSACTIONS = [
    [1, 3, 4],
    [2, 3, 5],
    [1, 2, 3, 5],
    [2, 5],
    [1, 2, 3, 5],
]

EXPECTED = {
    frozenset([1]): 3,
    frozenset([2]): 4,
    frozenset([3]): 4,
    frozenset([5]): 4,
    frozenset([1, 2]): 2,
    frozenset([1, 3]): 3,
    frozenset([1, 5]): 2,
    frozenset([2, 3]): 3,
    frozenset([2, 5]): 4,
    frozenset([3, 5]): 3,
    frozenset([1, 2, 3]): 2,
    frozenset([1, 2, 5]): 2,
    frozenset([1, 3, 5]): 2,
    frozenset([2, 3, 5]): 3,
    frozenset([1, 2, 3, 5]): 2,
}


def brute_force(transactions, min_support_count):
    counts = Counter()
    for transaction in transactions:
        items = set(transaction)
        for size in range(1, len(items) + 1):
            for combo in combinations(items, size):
                counts[frozenset(combo)] += 1
    return {k: v for k, v in counts.items() if v >= min_support_count}


def as_dict(itemsets):
    out = {frozenset(i.items): i.support for i in itemsets}
    # no itemset may be emitted twice
    assert len(out) == len(itemsets)
    for i in itemsets:
        assert len(set(i.items)) == len(i.items)
    return out


def random_transactions(seed, n=40, n_items=8, max_len=6):
    rng = random.Random(seed)
    return [rng.sample(range(n_items), rng.randint(1, max_len)) for _ in range(n)]


# ---- driver ----

def test_example_transactions():
    result = FPGrowth(0.4).exec(TRANSACTIONS)
    assert result.min_support_count == 2
    assert result.transaction_count == 5
    assert result.execution_time >= 0
    assert as_dict(result.itemsets) == EXPECTED
    assert as_dict(result.itemsets) == brute_force(TRANSACTIONS, 2)


def test_example_single_items():
    mined = as_dict(FPGrowth(0.4).exec(TRANSACTIONS).itemsets)
    singles = {next(iter(k)): v for k, v in mined.items() if len(k) == 1}
    assert singles == {1: 3, 2: 4, 3: 4, 5: 4}
    assert count_item_supports(TRANSACTIONS) == {1: 3, 2: 4, 3: 4, 4: 1, 5: 4}


def test_least_supported_header_is_mined_first():
    result = FPGrowth(0.4).exec(TRANSACTIONS)
    assert result.itemsets[0] == Itemset([1], 3)


def test_listeners_receive_every_itemset_in_order():
    seen, also_seen = [], []
    miner = FPGrowth(0.4, on_itemset=seen.append).add_listener(also_seen.append)
    result = miner.exec(TRANSACTIONS)
    assert seen == result.itemsets
    assert also_seen == result.itemsets
    assert all(a is b for a, b in zip(seen, result.itemsets))


def test_exec_is_repeatable():
    miner = FPGrowth(0.4)
    first = miner.exec(TRANSACTIONS)
    second = miner.exec(TRANSACTIONS)
    assert miner.support == 0.4
    assert first.itemsets == second.itemsets


def test_empty_input():
    result = FPGrowth(0.5).exec([])
    assert result.itemsets == []
    assert result.transaction_count == 0


@pytest.mark.parametrize("support", [0, 1, -0.2, 1.5, "0.4", None, True])
def test_invalid_relative_support(support):
    with pytest.raises(ValueError):
        FPGrowth(support)


@pytest.mark.parametrize("count", [0, -1, 1.5, True])
def test_invalid_absolute_support(count):
    with pytest.raises(ValueError):
        mine(TRANSACTIONS, count)


def test_numpy_absolute_support():
    assert as_dict(mine(TRANSACTIONS, np.int64(2))) == EXPECTED
    with pytest.raises(ValueError):
        mine(TRANSACTIONS, np.int64(0))
    with pytest.raises(ValueError):
        mine(TRANSACTIONS, np.float64(2.0))


def test_unhashable_items_fail_fast():
    with pytest.raises(ValueError):
        mine([[["a"], "b"]], 1)


def test_absolute_support():
    assert absolute_support(0.4, 5) == 2
    assert absolute_support(0.7, 10) == 7
    assert absolute_support(0.01, 5) == 1
    assert absolute_support(0.5, 0) == 0


# ---- mining against the brute force reference ----

@pytest.mark.parametrize("seed", [1, 2, 3, 4])
@pytest.mark.parametrize("min_count", [1, 2, 4, 8])
def test_matches_brute_force(seed, min_count):
    transactions = random_transactions(seed)
    mined = as_dict(mine(transactions, min_count))
    assert mined == brute_force(transactions, min_count)
    assert all(s >= min_count for s in mined.values())


def test_support_one_returns_every_present_combination():
    transactions = random_transactions(11, n=15, n_items=6, max_len=4)
    everything = as_dict(mine(transactions, 1))
    assert everything == brute_force(transactions, 1)
    for min_count in (2, 3, 5):
        higher = as_dict(mine(transactions, min_count))
        assert higher.items() <= everything.items()


def test_mining_is_idempotent():
    transactions = random_transactions(5)
    first = mine(transactions, 3)
    second = mine(transactions, 3)
    assert [(i.items, i.support) for i in first] == [(i.items, i.support) for i in second]


def test_duplicate_items_are_counted_once():
    mined = as_dict(mine([["a", "a", "b"], ["a"]], 1))
    assert mined == {frozenset("a"): 2, frozenset("b"): 1, frozenset("ab"): 1}


def test_hashable_non_numeric_items():
    transactions = [[("x", 1), "milk"], ["milk", ("x", 1)], ["milk"]]
    mined = as_dict(mine(transactions, 2))
    assert mined == {frozenset(["milk"]): 3, frozenset([("x", 1)]): 2, frozenset([("x", 1), "milk"]): 2}


def test_numpy_items():
    assert item_key(np.int64(3)) == "3"
    transactions = [list(np.array(t)) for t in TRANSACTIONS]
    assert as_dict(mine(transactions, 2)) == EXPECTED


# ---- single path ----

def test_single_path_shortcut_matches_brute_force():
    transactions = [["a", "b", "c"]] * 3 + [["a", "b"], ["a", "b", "c", "d"]]
    tree = build_fptree(transactions, 1)
    assert tree.is_single_path()
    mined = as_dict(fpgrowth(tree, len(transactions)))
    assert mined == brute_force(transactions, 1)
    assert len(mined) == 15


def test_mine_single_path_enumeration_order():
    root = FPNode()
    a = root.upsert_child("A", 5)
    b = a.upsert_child("B", 4)
    b.upsert_child("C", 2)
    path = [a, b, b.children["C"]]

    emitted = []
    itemsets = mine_single_path(path, 3, ["x"], emitted.append)
    assert [(i.items, i.support) for i in itemsets] == [
        (["x", "A"], 3),
        (["x", "A", "B"], 3),
        (["x", "B"], 3),
        (["x", "A", "C"], 2),
        (["x", "A", "B", "C"], 2),
        (["x", "B", "C"], 2),
        (["x", "C"], 2),
    ]
    assert emitted == itemsets


def test_mine_single_path_empty():
    assert mine_single_path([], 10) == []
