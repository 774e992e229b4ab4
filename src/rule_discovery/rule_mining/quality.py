"""
Rule quality metrics.

Every support, confidence, lift and conviction value in the package is
computed here, for association rules and sequential patterns alike.
"""
import logging
import math

from rule_discovery.errors import ComputationError
from rule_discovery.types import PatternMetrics

logger = logging.getLogger(__name__)


def _divide(numerator: float, denominator: float, metric: str) -> float:
    if denominator == 0:
        raise ComputationError(f"{metric}: zero denominator (numerator={numerator})")
    return numerator / denominator


class RuleQualityEvaluator:
    """
    Stateless metric formulas.

    A zero denominator is an internal invariant violation (mined itemsets
    always have positive support). It is logged as anomalous and the metric
    falls back to 0.0.
    """

    def _guarded(self, numerator: float, denominator: float, metric: str) -> float:
        try:
            return _divide(numerator, denominator, metric)
        except ComputationError as e:
            logger.warning("Anomalous metric computation, using 0.0: %s", e)
            return 0.0

    def support(self, count: int, total: int) -> float:
        """Fraction of transactions (or groups) containing the pattern."""
        if total == 0:
            return 0.0
        return self._guarded(count, total, 'support')

    def confidence(self, union_support: float, antecedent_support: float) -> float:
        return self._guarded(union_support, antecedent_support, 'confidence')

    def lift(self, confidence: float, consequent_support: float) -> float:
        return self._guarded(confidence, consequent_support, 'lift')

    def conviction(self, consequent_support: float, confidence: float) -> float:
        if confidence >= 1.0:
            return math.inf
        return self._guarded(1.0 - consequent_support, 1.0 - confidence, 'conviction')

    def evaluate(
        self,
        union_support: float,
        antecedent_support: float,
        consequent_support: float
    ) -> PatternMetrics:
        """
        Score a rule A -> C from the supports of A u C, A and C.
        """
        confidence = self.confidence(union_support, antecedent_support)
        return PatternMetrics(
            support=union_support,
            confidence=confidence,
            lift=self.lift(confidence, consequent_support),
            conviction=self.conviction(consequent_support, confidence)
        )
