"""
Sequential pattern mining over time-ordered event groups.

Transactions are grouped by an actor/session key and sorted by timestamp.
Every contiguous window of two or more events whose consecutive gaps all stay
within max_time_gap is a candidate sequence. Support is the fraction of groups
containing a sequence at least once.
"""
import logging
import time
from collections import defaultdict
from datetime import timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple

from tqdm.auto import tqdm

from rule_discovery.config import GroupKey
from rule_discovery.rule_mining.quality import RuleQualityEvaluator
from rule_discovery.transactions import Transaction, check_timestamp_convention
from rule_discovery.types import Itemset, SequentialPattern, make_itemset

logger = logging.getLogger(__name__)

ItemsetSequence = Tuple[Itemset, ...]


class SequentialPatternMiner:
    """
    Time-windowed sequential pattern miner.

    Reported time_gaps are those of the first occurrence, scanning groups in
    sorted key order and windows by start position; average_time_gaps are
    averaged over every occurrence.
    """

    def __init__(
        self,
        min_support: float = 0.1,
        max_time_gap: Optional[timedelta] = None,
        group_key: GroupKey = GroupKey.ACTOR,
        max_length: Optional[int] = None,
        evaluator: RuleQualityEvaluator = None,
        verbose: bool = False
    ):
        self.min_support = min_support
        self.max_time_gap = max_time_gap
        self.group_key = GroupKey(group_key)
        self.max_length = max_length
        self.evaluator = evaluator or RuleQualityEvaluator()
        self.verbose = verbose

    def group_transactions(self, transactions: Sequence[Transaction]) -> Dict[str, List[Transaction]]:
        """
        Group transactions by the configured key, each group sorted by
        (timestamp, id). Transactions with no key value are skipped.

        Raises:
            InvalidTransactionError: If naive and timezone-aware timestamps are mixed
        """
        check_timestamp_convention(transactions)

        groups: Dict[str, List[Transaction]] = defaultdict(list)
        skipped = 0
        for tx in transactions:
            key = getattr(tx, self.group_key.value)
            if key is None:
                skipped += 1
                continue
            groups[key].append(tx)

        if skipped:
            logger.debug("Skipped %d transactions without '%s'", skipped, self.group_key.value)

        return {
            key: sorted(groups[key], key=lambda tx: (tx.timestamp, tx.id))
            for key in sorted(groups)
        }

    def _within_gap(self, gap: timedelta) -> bool:
        return self.max_time_gap is None or gap <= self.max_time_gap

    def _windows(self, events: List[Transaction]):
        """Yield (sequence, gaps) for every valid contiguous window of length >= 2."""
        itemsets = [make_itemset(tx.items) for tx in events]
        limit = self.max_length or len(events)

        for start in range(len(events) - 1):
            gaps: List[timedelta] = []
            for end in range(start + 1, min(start + limit, len(events))):
                gap = events[end].timestamp - events[end - 1].timestamp
                if not self._within_gap(gap):
                    break
                gaps.append(gap)
                yield tuple(itemsets[start:end + 1]), tuple(gaps)

    def find_sequential_patterns(self, transactions: Sequence[Transaction]) -> List[SequentialPattern]:
        """
        Find all sequences whose group support is >= min_support.

        Returns:
            Patterns ranked by support, then length (both descending), then sequence
        """
        groups = self.group_transactions(transactions)
        total_groups = len(groups)
        if total_groups == 0:
            return []

        counts: Dict[ItemsetSequence, int] = defaultdict(int)
        first_gaps: Dict[ItemsetSequence, Tuple[timedelta, ...]] = {}
        gap_sums: Dict[ItemsetSequence, List[timedelta]] = {}
        occurrences: Dict[ItemsetSequence, int] = defaultdict(int)

        for key in tqdm(groups, desc="Sequence groups", unit="group", disable=not self.verbose):
            events = [tx for tx in groups[key] if tx.items]
            if len(events) < 2:
                continue

            seen_in_group = set()
            for sequence, gaps in self._windows(events):
                if sequence not in first_gaps:
                    first_gaps[sequence] = gaps
                    gap_sums[sequence] = list(gaps)
                else:
                    gap_sums[sequence] = [a + b for a, b in zip(gap_sums[sequence], gaps)]
                occurrences[sequence] += 1

                if sequence not in seen_in_group:
                    seen_in_group.add(sequence)
                    counts[sequence] += 1

        patterns = []
        for sequence, count in counts.items():
            support = self.evaluator.support(count, total_groups)
            if support < self.min_support:
                continue
            n = occurrences[sequence]
            patterns.append(SequentialPattern(
                sequence=sequence,
                time_gaps=first_gaps[sequence],
                support=support,
                count=count,
                average_time_gaps=tuple(total / n for total in gap_sums[sequence])
            ))

        patterns.sort(key=lambda p: (-p.support, -len(p.sequence), p.sequence))
        return patterns

    def mine_patterns(self, transactions: Sequence[Transaction]) -> Tuple[List[SequentialPattern], Dict[str, Any]]:
        """
        Mine sequential patterns.

        Returns:
            Tuple of (patterns, stats)
        """
        start_time = time.time()
        patterns = self.find_sequential_patterns(transactions)
        keys = [getattr(tx, self.group_key.value) for tx in transactions]
        total_groups = len(set(keys) - {None})

        stats = {
            'num_patterns': len(patterns),
            'num_groups': total_groups,
            'ungrouped_transactions': keys.count(None),
            'execution_time': time.time() - start_time,
            'average_support': sum(p.support for p in patterns) / len(patterns) if patterns else 0.0,
            'max_sequence_length': max((len(p.sequence) for p in patterns), default=0),
            'transactions_processed': len(transactions),
            'algorithm': 'windowed_sequences',
            'mode': 'sequences'
        }

        return patterns, stats

    def __repr__(self):
        return (f"SequentialPatternMiner(min_support={self.min_support}, "
                f"max_time_gap={self.max_time_gap}, group_key='{self.group_key.value}', "
                f"max_length={self.max_length})")
