"""
Base interface for frequent itemset mining algorithms.
"""
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence, Tuple

import numpy as np
from joblib import Parallel, delayed, effective_n_jobs

from rule_discovery.rule_mining.quality import RuleQualityEvaluator
from rule_discovery.transactions import Transaction
from rule_discovery.types import FrequentItemset, Itemset

ItemsetSupports = Dict[Itemset, float]


class FrequentItemsetMiner(ABC):
    """
    Base class for frequent itemset mining algorithms.

    Implementations are interchangeable: given the same transactions and
    min_support they return the same itemset -> support map, ordered by
    (itemset size, items). Support is the fraction of transactions containing
    every item of the itemset. Only itemsets that occur at least once are
    reported, even when min_support is 0.
    """

    name = 'base'

    def __init__(self, min_support: float = 0.1, n_jobs: int = 1, verbose: bool = False):
        self.min_support = min_support
        self.n_jobs = n_jobs
        self.verbose = verbose
        self.evaluator = RuleQualityEvaluator()

    @abstractmethod
    def find_frequent_itemsets(
        self,
        transactions: Sequence[Transaction],
        min_support: float
    ) -> ItemsetSupports:
        """
        Find every itemset whose support is >= min_support.

        Args:
            transactions: Transactions to scan (not modified)
            min_support: Support threshold in [0, 1]

        Returns:
            Dict mapping itemset -> support
        """
        pass

    def is_frequent(self, count: int, total: int, min_support: float) -> bool:
        return count > 0 and self.evaluator.support(count, total) >= min_support

    def mine_itemsets(self, transactions: Sequence[Transaction]) -> Tuple[List[FrequentItemset], Dict[str, Any]]:
        """
        Mine frequent itemsets with this miner's threshold.

        Returns:
            Tuple of (itemsets, stats)
        """
        start_time = time.time()
        total = len(transactions)

        supports = self.find_frequent_itemsets(transactions, self.min_support)
        itemsets = [
            FrequentItemset(items=items, support=support, count=int(round(support * total)))
            for items, support in supports.items()
        ]

        stats = {
            'num_itemsets': len(itemsets),
            'max_itemset_size': max((len(i.items) for i in itemsets), default=0),
            'execution_time': time.time() - start_time,
            'average_support': sum(i.support for i in itemsets) / len(itemsets) if itemsets else 0.0,
            'transactions_processed': total,
            'algorithm': self.name,
            'mode': 'itemsets'
        }

        return itemsets, stats

    def __repr__(self):
        return f"{self.__class__.__name__}(min_support={self.min_support}, n_jobs={self.n_jobs})"


def sort_supports(supports: ItemsetSupports) -> ItemsetSupports:
    """Order a support map by (itemset size, items)."""
    return {items: supports[items] for items in sorted(supports, key=lambda i: (len(i), i))}


def _count_chunk(matrix: np.ndarray, column_lists: List[List[int]]) -> np.ndarray:
    return np.array(
        [int(matrix[:, columns].all(axis=1).sum()) for columns in column_lists],
        dtype=np.int64
    )


def count_support(
    matrix: np.ndarray,
    column_index: Dict[str, int],
    candidates: Sequence[Itemset],
    n_jobs: int = 1
) -> Dict[Itemset, int]:
    """
    Count, for every candidate, the transactions (rows) containing all of its items.

    The rows are split into one chunk per job; each chunk is counted
    independently and the partial counts summed. The matrix is only read.

    Args:
        matrix: Boolean one-hot matrix (transactions x items)
        column_index: Item label -> column position
        candidates: Itemsets to count
        n_jobs: Parallel jobs (-1 uses all cores, 1 counts inline)

    Returns:
        Dict mapping candidate -> occurrence count
    """
    if not candidates:
        return {}

    column_lists = [[column_index[item] for item in candidate] for candidate in candidates]
    jobs = min(effective_n_jobs(n_jobs), max(1, matrix.shape[0]))

    if jobs == 1:
        totals = _count_chunk(matrix, column_lists)
    else:
        chunks = np.array_split(matrix, jobs)
        partial = Parallel(n_jobs=jobs)(
            delayed(_count_chunk)(chunk, column_lists) for chunk in chunks
        )
        totals = np.sum(partial, axis=0)

    return {candidate: int(count) for candidate, count in zip(candidates, totals)}
