"""
Value types produced by the mining engine.

Itemsets are plain tuples of item labels in sorted order, so they hash and
compare canonically and can key support maps directly.
"""
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Iterable, Tuple

Itemset = Tuple[str, ...]


def make_itemset(items: Iterable[str]) -> Itemset:
    """
    Canonicalize items into a sorted, de-duplicated itemset.

    Raises:
        ValueError: If no items are given
    """
    itemset = tuple(sorted(set(items)))
    if not itemset:
        raise ValueError("An itemset needs at least one item")
    return itemset


def format_itemset(itemset: Itemset) -> str:
    return ', '.join(itemset)


@dataclass(frozen=True)
class FrequentItemset:
    items: Itemset
    support: float
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {'items': self.items, 'support': self.support, 'count': self.count}


@dataclass(frozen=True)
class PatternMetrics:
    """
    Rule quality metrics.

    support: P(antecedent and consequent)
    confidence: P(consequent | antecedent)
    lift: confidence / P(consequent) (>1 positive, <1 negative correlation)
    conviction: (1 - P(consequent)) / (1 - confidence), +inf when confidence is 1
    """
    support: float
    confidence: float
    lift: float
    conviction: float


@dataclass(frozen=True)
class AssociationRule:
    antecedent: Itemset
    consequent: Itemset
    metrics: PatternMetrics

    def __post_init__(self):
        if not self.antecedent or not self.consequent:
            raise ValueError("Antecedent and consequent must both be non-empty")
        if set(self.antecedent) & set(self.consequent):
            raise ValueError(
                f"Antecedent {self.antecedent} and consequent {self.consequent} overlap")

    @property
    def items(self) -> Itemset:
        return make_itemset(self.antecedent + self.consequent)

    @property
    def quality_score(self) -> float:
        """Ranking score: confidence x lift."""
        return self.metrics.confidence * self.metrics.lift

    def to_dict(self) -> Dict[str, Any]:
        return {
            'antecedent': list(self.antecedent),
            'consequent': list(self.consequent),
            'support': self.metrics.support,
            'confidence': self.metrics.confidence,
            'lift': self.metrics.lift,
            'conviction': self.metrics.conviction,
            'quality_score': self.quality_score
        }

    def __str__(self):
        return f"{{{format_itemset(self.antecedent)}}} => {{{format_itemset(self.consequent)}}}"


@dataclass(frozen=True)
class SequentialPattern:
    """
    Ordered itemsets observed in at least `count` groups.

    time_gaps holds the gaps of the first occurrence found (groups in key
    order, then window start); average_time_gaps the mean over all occurrences.
    """
    sequence: Tuple[Itemset, ...]
    time_gaps: Tuple[timedelta, ...]
    support: float
    count: int = 0
    average_time_gaps: Tuple[timedelta, ...] = ()

    def __post_init__(self):
        if len(self.time_gaps) != len(self.sequence) - 1:
            raise ValueError(
                f"Expected {len(self.sequence) - 1} time gaps, got {len(self.time_gaps)}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sequence': [list(itemset) for itemset in self.sequence],
            'time_gaps_seconds': [gap.total_seconds() for gap in self.time_gaps],
            'average_time_gaps_seconds': [gap.total_seconds() for gap in self.average_time_gaps],
            'support': self.support,
            'count': self.count
        }

    def __str__(self):
        return ' -> '.join(f"[{format_itemset(itemset)}]" for itemset in self.sequence)
