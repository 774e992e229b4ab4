import logging
import math

import pytest

from rule_discovery.rule_mining.quality import RuleQualityEvaluator


@pytest.fixture
def evaluator():
    return RuleQualityEvaluator()


def test_support(evaluator):
    assert evaluator.support(3, 4) == 0.75
    assert evaluator.support(0, 0) == 0.0


def test_laptop_mouse_metrics(evaluator):
    metrics = evaluator.evaluate(union_support=0.75, antecedent_support=0.75, consequent_support=0.75)
    assert metrics.support == 0.75
    assert metrics.confidence == 1.0
    assert metrics.lift == pytest.approx(4 / 3)
    assert math.isinf(metrics.conviction)


def test_conviction_finite_below_full_confidence(evaluator):
    metrics = evaluator.evaluate(union_support=0.4, antecedent_support=0.5, consequent_support=0.6)
    assert metrics.confidence == pytest.approx(0.8)
    assert metrics.lift == pytest.approx(0.8 / 0.6)
    assert metrics.conviction == pytest.approx((1 - 0.6) / (1 - 0.8))


def test_negative_correlation_lift_below_one(evaluator):
    metrics = evaluator.evaluate(union_support=0.1, antecedent_support=0.5, consequent_support=0.5)
    assert metrics.lift == pytest.approx(0.4)
    assert metrics.conviction >= 0


def test_zero_denominators_fall_back_to_zero(evaluator, caplog):
    with caplog.at_level(logging.WARNING, logger='rule_discovery.rule_mining.quality'):
        assert evaluator.confidence(0.5, 0.0) == 0.0
        assert evaluator.lift(0.5, 0.0) == 0.0
    assert "Anomalous" in caplog.text


def test_zero_antecedent_support_gives_zero_metrics(evaluator):
    metrics = evaluator.evaluate(union_support=0.0, antecedent_support=0.0, consequent_support=0.0)
    assert metrics.confidence == 0.0
    assert metrics.lift == 0.0
    assert metrics.conviction == 1.0
