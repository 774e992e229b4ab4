"""
Apriori frequent itemset mining.

Breadth-first, level-wise search: frequent k-itemsets sharing a (k-1)-item
prefix are joined into (k+1)-candidates, candidates with an infrequent
k-subset are pruned before counting, and the survivors are counted with one
scan of the transaction matrix per level.
"""
import logging
from collections import defaultdict
from itertools import combinations
from typing import Dict, Iterable, List, Sequence, Set

from tqdm.auto import tqdm

from rule_discovery.rule_mining.base import (
    FrequentItemsetMiner,
    ItemsetSupports,
    count_support,
    sort_supports
)
from rule_discovery.transactions import Transaction, encode_transactions
from rule_discovery.types import Itemset

logger = logging.getLogger(__name__)


def generate_candidates(frequent_k: Iterable[Itemset]) -> List[Itemset]:
    """
    Build (k+1)-candidates from frequent k-itemsets.

    Itemsets are bucketed by their (k-1)-prefix; every pair inside a bucket
    joins into one candidate, which is kept only if all of its k-subsets are
    frequent.
    """
    frequent: Set[Itemset] = set(frequent_k)
    by_prefix: Dict[Itemset, List[str]] = defaultdict(list)
    for itemset in frequent:
        by_prefix[itemset[:-1]].append(itemset[-1])

    candidates = []
    for prefix in sorted(by_prefix):
        tails = sorted(by_prefix[prefix])
        for i, first in enumerate(tails):
            for second in tails[i + 1:]:
                candidate = prefix + (first, second)
                if has_infrequent_subset(candidate, frequent):
                    continue
                candidates.append(candidate)

    return candidates


def has_infrequent_subset(candidate: Itemset, frequent_k: Set[Itemset]) -> bool:
    k = len(candidate) - 1
    return any(subset not in frequent_k for subset in combinations(candidate, k))


class AprioriMiner(FrequentItemsetMiner):
    """Classic Apriori (level-wise candidate generation and pruning)."""

    name = 'apriori'

    def find_frequent_itemsets(
        self,
        transactions: Sequence[Transaction],
        min_support: float
    ) -> ItemsetSupports:
        total = len(transactions)
        if total == 0:
            return {}

        df_encoded = encode_transactions(transactions)
        if df_encoded.shape[1] == 0:
            return {}

        matrix = df_encoded.to_numpy(dtype=bool)
        column_index = {item: i for i, item in enumerate(df_encoded.columns)}

        supports: ItemsetSupports = {}

        # Level 1: every distinct item
        candidates: List[Itemset] = [(item,) for item in df_encoded.columns]
        level = 1

        with tqdm(desc="Apriori levels", unit="level", disable=not self.verbose) as progress:
            while candidates:
                counts = count_support(matrix, column_index, candidates, self.n_jobs)

                frequent_k = [
                    itemset for itemset in candidates
                    if self.is_frequent(counts[itemset], total, min_support)
                ]
                logger.debug(
                    "Level %d: %d candidates, %d frequent", level, len(candidates), len(frequent_k))

                if not frequent_k:
                    break

                for itemset in frequent_k:
                    supports[itemset] = self.evaluator.support(counts[itemset], total)

                candidates = generate_candidates(frequent_k)
                level += 1
                progress.update(1)

        return sort_supports(supports)
