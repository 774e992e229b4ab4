import time
from typing import Any, Dict, List, Sequence, Tuple

from rule_discovery.config import FilterConfig, MiningAlgorithm, MiningConfig
from rule_discovery.errors import ConfigError
from rule_discovery.postprocessing.rule import filter_itemsets, filter_rules
from rule_discovery.rule_mining.apriori_miner import AprioriMiner
from rule_discovery.rule_mining.base import FrequentItemsetMiner
from rule_discovery.rule_mining.fpgrowth_miner import FPGrowthMiner
from rule_discovery.rule_mining.rule_generator import RuleGenerator
from rule_discovery.rule_mining.sequential_miner import SequentialPatternMiner
from rule_discovery.transactions import Transaction

ITEMSET_MINERS = {
    MiningAlgorithm.APRIORI: AprioriMiner,
    MiningAlgorithm.FPGROWTH: FPGrowthMiner,
}

MODES = ('rules', 'itemsets', 'sequences', 'all')


def create_itemset_miner(config: MiningConfig) -> FrequentItemsetMiner:
    config.validate()
    try:
        miner_cls = ITEMSET_MINERS[config.algorithm]
    except KeyError:
        raise ConfigError(f"Unknown algorithm: {config.algorithm}") from None
    return miner_cls(min_support=config.min_support, n_jobs=config.n_jobs, verbose=config.verbose)


def create_rule_generator(config: MiningConfig) -> RuleGenerator:
    return RuleGenerator(
        min_confidence=config.min_confidence,
        min_lift=config.min_lift,
        min_support=config.min_support
    )


def create_sequential_miner(config: MiningConfig) -> SequentialPatternMiner:
    return SequentialPatternMiner(
        min_support=config.min_support,
        max_time_gap=config.max_time_gap,
        group_key=config.group_key,
        max_length=config.max_sequence_length,
        verbose=config.verbose
    )


def apply_filters(data: List[Any], filters: Sequence[FilterConfig], mode: str = 'rules') -> List[Any]:
    if not filters:
        return data

    result = data
    for f in filters:
        if mode == 'rules':
            result = filter_rules(result, criterion=f.metric, threshold=f.threshold)
        elif mode == 'itemsets':
            result, _ = filter_itemsets(result, criterion=f.metric, threshold=f.threshold)
        else:
            result = [item for item in result if getattr(item, f.metric, float("-inf")) >= f.threshold]

    return result


def mine_rules(
    transactions: Sequence[Transaction],
    config: MiningConfig
) -> Tuple[List[Any], Dict[str, Any]]:
    """
    Frequent itemsets -> scored, filtered, ranked association rules.

    Returns:
        Tuple of (rules, stats)
    """
    start_time = time.time()
    miner = create_itemset_miner(config)
    supports = miner.find_frequent_itemsets(transactions, config.min_support)
    rules = create_rule_generator(config).generate_rules(supports)

    stats = {
        'num_rules': len(rules),
        'num_itemsets': len(supports),
        'execution_time': time.time() - start_time,
        'average_support': sum(r.metrics.support for r in rules) / len(rules) if rules else 0.0,
        'average_confidence': sum(r.metrics.confidence for r in rules) / len(rules) if rules else 0.0,
        'average_lift': sum(r.metrics.lift for r in rules) / len(rules) if rules else 0.0,
        'transactions_processed': len(transactions),
        'algorithm': miner.name,
        'mode': 'rules'
    }

    return rules, stats


def run_rule_mining(
    transactions: Sequence[Transaction],
    config: MiningConfig,
    mode: str = 'rules',
    filters: Sequence[FilterConfig] = ()
) -> Tuple[Dict[str, List[Any]], Dict[str, Dict[str, Any]]]:
    """
    Run one or all mining paths over the same transactions.

    Args:
        transactions: Transactions to mine
        config: Mining configuration (validated before any scan)
        mode: 'rules', 'itemsets', 'sequences' or 'all'
        filters: Extra metric filters applied to each result list

    Returns:
        Tuple of (results, stats), both keyed by mode
    """
    if mode not in MODES:
        raise ConfigError(f"mode must be one of {list(MODES)}, got '{mode}'")
    config.validate()
    transactions = tuple(transactions)

    results = {}
    stats = {}

    if mode in ('itemsets', 'all'):
        itemsets, itemset_stats = create_itemset_miner(config).mine_itemsets(transactions)
        results['itemsets'] = apply_filters(itemsets, filters, mode='itemsets')
        stats['itemsets'] = itemset_stats
        stats['itemsets']['count'] = len(results['itemsets'])

    if mode in ('rules', 'all'):
        rules, rule_stats = mine_rules(transactions, config)
        results['rules'] = apply_filters(rules, filters, mode='rules')
        stats['rules'] = rule_stats
        stats['rules']['count'] = len(results['rules'])

    if mode in ('sequences', 'all'):
        patterns, pattern_stats = create_sequential_miner(config).mine_patterns(transactions)
        results['sequences'] = apply_filters(patterns, filters, mode='sequences')
        stats['sequences'] = pattern_stats
        stats['sequences']['count'] = len(results['sequences'])

    return results, stats
