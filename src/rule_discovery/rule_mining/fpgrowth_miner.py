"""
FP-Growth frequent itemset mining.

Transactions are compressed into a prefix tree ordered by item frequency and
mined through conditional trees, without candidate generation. Conditional
trees are processed from an explicit work stack.
"""
import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from tqdm.auto import tqdm

from rule_discovery.rule_mining.base import FrequentItemsetMiner, ItemsetSupports, sort_supports
from rule_discovery.transactions import Transaction
from rule_discovery.types import Itemset, make_itemset

logger = logging.getLogger(__name__)


class FPNode:
    __slots__ = ('item', 'count', 'parent', 'children')

    def __init__(self, item: Optional[str], parent: Optional['FPNode'] = None):
        self.item = item
        self.count = 0
        self.parent = parent
        self.children: Dict[str, 'FPNode'] = {}

    def prefix_path(self) -> List[str]:
        """Items on the path from the root down to (excluding) this node."""
        path = []
        node = self.parent
        while node is not None and node.item is not None:
            path.append(node.item)
            node = node.parent
        path.reverse()
        return path


class FPTree:
    """
    Prefix tree of frequency-ordered transactions with a header table
    (item -> every node holding that item).
    """

    def __init__(self):
        self.root = FPNode(None)
        self.header: Dict[str, List[FPNode]] = defaultdict(list)
        self.item_counts: Dict[str, int] = {}

    @classmethod
    def build(cls, weighted_paths: Iterable[Tuple[Sequence[str], int]], min_count: int) -> 'FPTree':
        """
        Build a tree from (items, weight) pairs keeping only items whose
        weighted count reaches min_count.
        """
        weighted_paths = list(weighted_paths)

        counts: Dict[str, int] = defaultdict(int)
        for items, weight in weighted_paths:
            for item in items:
                counts[item] += weight

        tree = cls()
        tree.item_counts = {item: c for item, c in counts.items() if c >= min_count}

        # Most frequent first, ties broken by label
        order = {
            item: rank for rank, item in enumerate(
                sorted(tree.item_counts, key=lambda i: (-tree.item_counts[i], i)))
        }

        for items, weight in weighted_paths:
            ordered = sorted((i for i in items if i in order), key=order.__getitem__)
            if ordered:
                tree.insert(ordered, weight)

        return tree

    def insert(self, items: Sequence[str], weight: int = 1) -> None:
        node = self.root
        for item in items:
            child = node.children.get(item)
            if child is None:
                child = FPNode(item, parent=node)
                node.children[item] = child
                self.header[item].append(child)
            child.count += weight
            node = child

    def conditional_pattern_base(self, item: str) -> List[Tuple[List[str], int]]:
        """Prefix paths ending just above every node of `item`, weighted by that node's count."""
        paths = []
        for node in self.header.get(item, []):
            path = node.prefix_path()
            if path:
                paths.append((path, node.count))
        return paths

    def is_empty(self) -> bool:
        return not self.root.children


class FPGrowthMiner(FrequentItemsetMiner):
    """FP-Growth (pattern growth over conditional FP-trees)."""

    name = 'fpgrowth'

    def _min_count(self, total: int, min_support: float) -> int:
        # Smallest positive count whose support reaches the threshold
        count = max(1, int(min_support * total))
        while count > 1 and self.evaluator.support(count - 1, total) >= min_support:
            count -= 1
        while self.evaluator.support(count, total) < min_support:
            count += 1
        return count

    def find_frequent_itemsets(
        self,
        transactions: Sequence[Transaction],
        min_support: float
    ) -> ItemsetSupports:
        total = len(transactions)
        if total == 0:
            return {}

        min_count = self._min_count(total, min_support)
        tree = FPTree.build(((tx.items, 1) for tx in transactions), min_count)

        supports: ItemsetSupports = {}
        stack: List[Tuple[FPTree, Itemset]] = [(tree, ())]

        with tqdm(desc="FP-Growth trees", unit="tree", disable=not self.verbose) as progress:
            while stack:
                current, suffix = stack.pop()

                for item, count in current.item_counts.items():
                    itemset = make_itemset(suffix + (item,))
                    supports[itemset] = self.evaluator.support(count, total)

                    conditional = FPTree.build(current.conditional_pattern_base(item), min_count)
                    if not conditional.is_empty():
                        stack.append((conditional, itemset))

                progress.update(1)

        logger.debug("FP-Growth: %d frequent itemsets (min_count=%d)", len(supports), min_count)

        return sort_supports(supports)
