"""
Association rule generation from frequent itemsets.
"""
import logging
from itertools import combinations
from typing import List, Mapping

from rule_discovery.postprocessing.rule import filter_bidirectional_rules, rank_rules
from rule_discovery.rule_mining.quality import RuleQualityEvaluator
from rule_discovery.types import AssociationRule, Itemset

logger = logging.getLogger(__name__)


class RuleGenerator:
    """
    Splits every frequent itemset I (|I| >= 2) into A => I \\ A for each proper,
    non-empty subset A, scores the split and keeps it when it clears the
    confidence and lift thresholds.

    Surviving rules go through bidirectional filtering (one rule per
    A => C / C => A pair) and are ranked by confidence x lift.
    """

    def __init__(
        self,
        min_confidence: float = 0.7,
        min_lift: float = 1.0,
        min_support: float = 0.0,
        evaluator: RuleQualityEvaluator = None
    ):
        self.min_confidence = min_confidence
        self.min_lift = min_lift
        self.min_support = min_support
        self.evaluator = evaluator or RuleQualityEvaluator()

    def _lookup(self, supports: Mapping[Itemset, float], itemset: Itemset) -> float:
        # Anti-monotonicity guarantees every subset of a frequent itemset is present
        try:
            return supports[itemset]
        except KeyError:
            logger.warning(
                "Anomalous support lookup, using 0.0: subset %s missing from frequent itemsets",
                itemset)
            return 0.0

    def candidate_rules(self, supports: Mapping[Itemset, float]) -> List[AssociationRule]:
        """
        Score every antecedent/consequent split and apply the thresholds.
        """
        rules = []
        for itemset in sorted(supports, key=lambda i: (len(i), i)):
            if len(itemset) < 2:
                continue
            union_support = supports[itemset]
            if union_support < self.min_support:
                continue

            for size in range(1, len(itemset)):
                for antecedent in combinations(itemset, size):
                    consequent = tuple(item for item in itemset if item not in antecedent)

                    metrics = self.evaluator.evaluate(
                        union_support,
                        self._lookup(supports, antecedent),
                        self._lookup(supports, consequent)
                    )

                    if metrics.confidence >= self.min_confidence and metrics.lift >= self.min_lift:
                        rules.append(AssociationRule(antecedent, consequent, metrics))

        return rules

    def generate_rules(self, supports: Mapping[Itemset, float]) -> List[AssociationRule]:
        """
        Generate the final, ranked rule list from an itemset -> support map.
        """
        candidates = self.candidate_rules(supports)
        rules = rank_rules(filter_bidirectional_rules(candidates))

        logger.debug(
            "Rule generation: %d candidate rules, %d after bidirectional filtering",
            len(candidates), len(rules))

        return rules

    def __repr__(self):
        return (f"RuleGenerator(min_confidence={self.min_confidence}, "
                f"min_lift={self.min_lift}, min_support={self.min_support})")
