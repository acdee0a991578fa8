from __future__ import annotations
from typing import Any, Callable, Dict, Iterable, List, NamedTuple, Optional, Tuple

from utils import dedupe_items, item_key


class FPTreeError(Exception):
    """Base class for FP-tree contract violations."""


class NotInitializedError(FPTreeError):
    pass


class AlreadyBuiltError(FPTreeError):
    pass


class PrefixPath(NamedTuple):
    path: List[Any]
    support: int


class FPNode:
    __slots__ = ("item", "support", "parent", "children", "next_same_item_node")


    def __init__(self, item: Any = None, parent: Optional["FPNode"] = None, support: int = 1) -> None:
        self.item = item
        self.support = support
        self.parent = parent
        # insertion ordered, keyed by item
        self.children: Dict[Any, FPNode] = {}
        self.next_same_item_node: Optional[FPNode] = None

    def upsert_child(
        self,
        item: Any,
        support: int = 1,
        on_create: Optional[Callable[["FPNode"], None]] = None,
    ) -> "FPNode":
        """Add `support` to the child carrying `item`, creating it if needed.

        `on_create` is only called when a new child node is created, which lets
        the owning tree keep its node-links up to date.
        """
        child = self.get_child(item)
        if child is not None:
            child.support += support
            return child
        child = FPNode(item, self, support)
        self.children[item] = child
        if on_create is not None:
            on_create(child)
        return child

    def get_child(self, item: Any) -> Optional["FPNode"]:
        return self.children.get(item)

    def __repr__(self) -> str:
        return f"FPNode(item={self.item!r}, support={self.support})"


class FPTree:
    """Frequent-pattern tree (Han et al., 2000).

    Built exactly once, either from raw transactions or from weighted prefix
    paths, then queried read-only. Nodes of the same item are chained through
    `next_same_item_node` in insertion order; `first_inserted` holds the head
    of each chain and `last_inserted` its tail.
    """

    def __init__(self, supports: Dict[Any, int], min_support: int) -> None:
        self.root = FPNode()
        self.supports = supports
        self.min_support = min_support
        self.first_inserted: Dict[Any, FPNode] = {}
        self.last_inserted: Dict[Any, FPNode] = {}
        self._headers: List[Any] = []
        self._is_init = False

    @property
    def initialized(self) -> bool:
        return self._is_init

    @property
    def headers(self) -> List[Any]:
        """Items of the tree, ascending by support."""
        self._check_init()
        return self._headers

    # ---- construction ----

    def from_transactions(self, transactions: Iterable[Iterable[Any]]) -> "FPTree":
        if self._is_init:
            raise AlreadyBuiltError("FPTree has already been built")
        for transaction in transactions:
            self._add_items(self._ordered_frequent(transaction))
        return self._finalize()

    def from_prefix_paths(self, prefix_paths: Iterable[Tuple[Iterable[Any], int]]) -> "FPTree":
        """Build from `(path, support)` pairs; each pair counts as `support`
        identical transactions."""
        if self._is_init:
            raise AlreadyBuiltError("FPTree has already been built")
        for path, support in prefix_paths:
            self._add_items(self._ordered_frequent(path), support)
        return self._finalize()

    def _ordered_frequent(self, items: Iterable[Any]) -> List[Any]:
        frequent = [it for it in dedupe_items(items) if self.supports.get(it, 0) >= self.min_support]
        return sorted(frequent, key=self._order_key, reverse=True)

    def _order_key(self, item: Any) -> Tuple[int, str]:
        return self.supports[item], item_key(item)

    def _add_items(self, items: List[Any], support: int = 1) -> None:
        cur = self.root
        for it in items:
            cur = cur.upsert_child(it, support, self._link_node)

    def _link_node(self, node: FPNode) -> None:
        last = self.last_inserted.get(node.item)
        if last is not None:
            last.next_same_item_node = node
        else:
            self.first_inserted[node.item] = node
        self.last_inserted[node.item] = node

    def _finalize(self) -> "FPTree":
        self._headers = sorted(self.first_inserted, key=self._order_key)
        self._is_init = True
        return self

    def _check_init(self) -> None:
        if not self._is_init:
            raise NotInitializedError("FPTree has not been built yet")

    # ---- queries ----

    def get_conditional_fp_tree(self, item: Any) -> Optional["FPTree"]:
        """Return the conditional FP-tree of `item`, or None when there is
        nothing left to mine."""
        start = self.first_inserted.get(item)
        if not self._is_init or start is None:
            return None

        conditional_supports: Dict[Any, int] = {}

        def count(path_item: Any, support: int) -> None:
            conditional_supports[path_item] = conditional_supports.get(path_item, 0) + support

        prefix_paths = self._collect_prefix_paths(start, count)
        tree = FPTree(conditional_supports, self.min_support).from_prefix_paths(prefix_paths)
        if not tree.root.children:
            return None
        return tree

    def get_prefix_paths(self, item: Any) -> List[PrefixPath]:
        self._check_init()
        start = self.first_inserted.get(item)
        if start is None:
            return []
        return self._collect_prefix_paths(start)

    def get_prefix_path(
        self,
        node: FPNode,
        on_item: Optional[Callable[[Any, int], None]] = None,
    ) -> Optional[PrefixPath]:
        """Ancestor items of `node`, nearest first, excluding the root.

        Returns None for a direct child of the root. `on_item` receives each
        ancestor item together with the support of `node`.
        """
        self._check_init()
        path: List[Any] = []
        p = node.parent
        while p is not None and p.parent is not None:
            if on_item is not None:
                on_item(p.item, node.support)
            path.append(p.item)
            p = p.parent
        if not path:
            return None
        return PrefixPath(path, node.support)

    def _collect_prefix_paths(
        self,
        node: Optional[FPNode],
        on_item: Optional[Callable[[Any, int], None]] = None,
    ) -> List[PrefixPath]:
        paths: List[PrefixPath] = []
        while node is not None:
            prefix_path = self.get_prefix_path(node, on_item)
            if prefix_path is not None:
                paths.append(prefix_path)
            node = node.next_same_item_node
        return paths

    def is_single_path(self) -> bool:
        return self.get_single_path() is not None

    def get_single_path(self) -> Optional[List[FPNode]]:
        """Nodes from the root (excluded) down to the leaf, or None if the tree
        branches. An empty tree is an empty path."""
        self._check_init()
        path: List[FPNode] = []
        node = self.root
        while node.children:
            if len(node.children) > 1:
                return None
            node = next(iter(node.children.values()))
            path.append(node)
        return path
