from typing import Any, Dict, Iterable, List, Sequence, Tuple, Union

from rule_discovery.types import AssociationRule, FrequentItemset

RuleLike = Union[AssociationRule, Dict[str, Any]]


def _rule_value(rule: RuleLike, criterion: str) -> float:
    if isinstance(rule, AssociationRule):
        if criterion == 'quality_score':
            return rule.quality_score
        return getattr(rule.metrics, criterion, float("-inf"))
    return rule.get(criterion, float("-inf"))


def filter_rules(rules: Iterable[RuleLike], criterion: str, threshold: float) -> List[RuleLike]:
    """
    Filters rules based on a criterion >= threshold.

    Args:
        rules: AssociationRule objects or rule dicts (AssociationRule.to_dict())
        criterion: The rule metric to filter on ('support', 'confidence', 'lift',
                   'conviction', 'quality_score')
        threshold: Minimum value for the criterion (inclusive)

    Returns:
        List of rules meeting the criterion, order preserved
    """
    return [rule for rule in rules if _rule_value(rule, criterion) >= threshold]


def _sides(rule: RuleLike) -> Tuple[Sequence[str], Sequence[str]]:
    if isinstance(rule, AssociationRule):
        return rule.antecedent, rule.consequent
    return rule.get('antecedent') or (), rule.get('consequent') or ()


def _labels(side) -> List[str]:
    if isinstance(side, str):
        side = [label.strip() for label in side.split(',')]
    return [str(label).lower() for label in side]


def _mentions(labels: List[str], pattern: str) -> bool:
    pattern = pattern.lower()
    return any(pattern in label for label in labels)


def _side_matches(labels: List[str], include, exclude, match_any: bool) -> bool:
    if include:
        hits = [_mentions(labels, p) for p in include]
        if not (any(hits) if match_any else all(hits)):
            return False
    return not any(_mentions(labels, p) for p in exclude or ())


def filter_rules_by_pattern(
    rules: Iterable[RuleLike],
    antecedent_contains: list = None,
    consequent_contains: list = None,
    antecedent_excludes: list = None,
    consequent_excludes: list = None,
    match_any: bool = False
) -> List[RuleLike]:
    """
    Keep rules whose item labels contain (or avoid) the given substrings,
    compared case-insensitively. Rule dicts may carry either item tuples or
    'A, B' strings as written by the Excel export.

    match_any switches the *_contains lists from "every pattern" to
    "at least one pattern"; exclusions always reject on any hit.
    """
    kept = []
    for rule in rules:
        antecedent, consequent = (_labels(side) for side in _sides(rule))
        if (_side_matches(antecedent, antecedent_contains, antecedent_excludes, match_any)
                and _side_matches(consequent, consequent_contains, consequent_excludes, match_any)):
            kept.append(rule)
    return kept


def filter_rules_by_consequent(rules, targets: list, match_any: bool = True):
    """Keep only rules whose consequent matches one of (or all) target patterns."""
    return filter_rules_by_pattern(rules, consequent_contains=targets, match_any=match_any)


def filter_rules_by_antecedent(rules, patterns: list, match_any: bool = True):
    """Keep only rules whose antecedent matches one of (or all) patterns."""
    return filter_rules_by_pattern(rules, antecedent_contains=patterns, match_any=match_any)


def _preference_key(rule: AssociationRule):
    return (-rule.metrics.confidence, -rule.metrics.lift, rule.antecedent, rule.consequent)


def filter_bidirectional_rules(rules: Iterable[AssociationRule]) -> List[AssociationRule]:
    """
    Drop one rule of every A => C / C => A pair.

    The survivor has the higher confidence, then the higher lift, then the
    lexicographically smaller antecedent. Input order is kept for survivors.
    """
    rules = list(rules)
    best: Dict[frozenset, AssociationRule] = {}
    for rule in rules:
        pair = frozenset((rule.antecedent, rule.consequent))
        current = best.get(pair)
        if current is None or _preference_key(rule) < _preference_key(current):
            best[pair] = rule

    kept = {id(rule) for rule in best.values()}
    return [rule for rule in rules if id(rule) in kept]


def rank_rules(rules: Iterable[AssociationRule]) -> List[AssociationRule]:
    """
    Sort by confidence x lift (descending), then support (descending), then
    antecedent and consequent labels.
    """
    return sorted(
        rules,
        key=lambda r: (-r.quality_score, -r.metrics.support, r.antecedent, r.consequent)
    )


def filter_itemsets(
    itemsets: Iterable[FrequentItemset],
    criterion: str = 'support',
    threshold: float = 0.0
) -> Tuple[List[FrequentItemset], Dict[str, Any]]:
    """
    Filters frequent itemsets based on a criterion >= threshold.

    Args:
        itemsets: FrequentItemset objects
        criterion: The attribute to filter on ('support' or 'count')
        threshold: Minimum value for the criterion (inclusive)

    Returns:
        Tuple of (filtered_itemsets, stats)
    """
    filtered_itemset_list = [
        itemset for itemset in itemsets
        if getattr(itemset, criterion, float("-inf")) >= threshold
    ]

    count = len(filtered_itemset_list)
    if count == 0:
        return filtered_itemset_list, {"num_itemsets": 0, "average_support": 0.0}

    avg_support = sum(item.support for item in filtered_itemset_list) / count

    stats = {
        "num_itemsets": count,
        "average_support": round(avg_support, 3),
    }

    return filtered_itemset_list, stats
