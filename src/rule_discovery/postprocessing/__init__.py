from .rule import (
    filter_rules,
    filter_rules_by_pattern,
    filter_rules_by_antecedent,
    filter_rules_by_consequent,
    filter_bidirectional_rules,
    rank_rules,
    filter_itemsets
)

__all__ = [
    'filter_rules',
    'filter_rules_by_pattern',
    'filter_rules_by_antecedent',
    'filter_rules_by_consequent',
    'filter_bidirectional_rules',
    'rank_rules',
    'filter_itemsets'
]
