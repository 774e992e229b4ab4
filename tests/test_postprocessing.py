import pytest

from rule_discovery import AssociationRule, FrequentItemset, PatternMetrics
from rule_discovery.postprocessing import (
    filter_bidirectional_rules,
    filter_itemsets,
    filter_rules,
    filter_rules_by_antecedent,
    filter_rules_by_consequent,
    filter_rules_by_pattern,
    rank_rules
)


def rule(antecedent, consequent, support=0.5, confidence=0.8, lift=1.5, conviction=2.0):
    return AssociationRule(
        tuple(antecedent), tuple(consequent),
        PatternMetrics(support=support, confidence=confidence, lift=lift, conviction=conviction))


@pytest.fixture
def rules():
    return [
        rule(['Laptop'], ['Mouse'], confidence=1.0, lift=1.33),
        rule(['Phone'], ['Phone Case'], support=0.25, confidence=0.9, lift=4.0),
        rule(['Bread', 'Butter'], ['Milk'], confidence=0.6, lift=1.1),
    ]


def test_association_rule_invariants():
    with pytest.raises(ValueError):
        rule(['A'], ['A', 'B'])
    with pytest.raises(ValueError):
        rule([], ['B'])


def test_filter_rules_by_metric(rules):
    assert len(filter_rules(rules, 'confidence', 0.9)) == 2
    assert filter_rules(rules, 'lift', 2.0) == [rules[1]]
    assert filter_rules(rules, 'quality_score', 3.0) == [rules[1]]
    assert filter_rules(rules, 'unknown_metric', 0.0) == []


def test_filter_rules_accepts_dicts(rules):
    rows = [r.to_dict() for r in rules]
    assert filter_rules(rows, 'support', 0.5) == [rows[0], rows[2]]


def test_filter_by_pattern(rules):
    assert filter_rules_by_antecedent(rules, ['laptop']) == [rules[0]]
    assert filter_rules_by_consequent(rules, ['case', 'milk']) == [rules[1], rules[2]]
    assert filter_rules_by_pattern(rules, antecedent_contains=['bread', 'butter']) == [rules[2]]
    assert filter_rules_by_pattern(rules, consequent_excludes=['mouse']) == rules[1:]


def test_filter_by_pattern_on_exported_rows():
    rows = [{'antecedent': 'Bread, Butter', 'consequent': 'Milk'},
            {'antecedent': 'Laptop', 'consequent': 'Mouse'}]
    assert filter_rules_by_pattern(rows, antecedent_contains=['butter', 'bread']) == [rows[0]]
    assert filter_rules_by_pattern(rows, antecedent_contains=['tea', 'lap'], match_any=True) == [rows[1]]
    assert filter_rules_by_pattern([{}], consequent_contains=['milk']) == []


def test_filter_bidirectional_keeps_order_of_survivors():
    forward = rule(['A'], ['B'], confidence=0.5)
    backward = rule(['B'], ['A'], confidence=0.9)
    other = rule(['C'], ['D'])
    assert filter_bidirectional_rules([forward, other, backward]) == [other, backward]


def test_filter_bidirectional_tie_breaks():
    by_lift = [rule(['A'], ['B'], lift=1.2), rule(['B'], ['A'], lift=1.4)]
    assert filter_bidirectional_rules(by_lift) == [by_lift[1]]
    by_label = [rule(['B'], ['A']), rule(['A'], ['B'])]
    assert filter_bidirectional_rules(by_label) == [by_label[1]]


def test_multi_item_pairs_are_bidirectional():
    rules = [rule(['A'], ['B', 'C'], confidence=0.7), rule(['B', 'C'], ['A'], confidence=0.95)]
    assert filter_bidirectional_rules(rules) == [rules[1]]


def test_rank_rules(rules):
    ranked = rank_rules(rules)
    assert ranked[0] is rules[1]
    assert ranked[-1] is rules[2]


def test_rank_rules_ties_by_support_then_label():
    a = rule(['B'], ['C'], support=0.4)
    b = rule(['A'], ['C'], support=0.4)
    c = rule(['Z'], ['C'], support=0.6)
    assert rank_rules([a, b, c]) == [c, b, a]


def test_filter_itemsets():
    itemsets = [
        FrequentItemset(('A',), 0.8, 4),
        FrequentItemset(('A', 'B'), 0.4, 2),
    ]
    filtered, stats = filter_itemsets(itemsets, 'support', 0.5)
    assert filtered == itemsets[:1]
    assert stats == {'num_itemsets': 1, 'average_support': 0.8}

    filtered, stats = filter_itemsets(itemsets, 'count', 10)
    assert filtered == []
    assert stats['num_itemsets'] == 0
