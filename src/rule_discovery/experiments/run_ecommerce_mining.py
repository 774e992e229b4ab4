"""
Rule Mining Experiment: E-commerce Baskets and Checkout Funnels

Mines association rules from product baskets and sequential patterns from
customer click streams, then writes everything to one Excel workbook.
"""
import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List

from rule_discovery.config import MiningConfig
from rule_discovery.miner import RuleMiner
from rule_discovery.transactions import Transaction
from rule_discovery.utils.excel_io import save_mining_results
from rule_discovery.utils.log import setup_logging

# =============================================================================
# CONFIGURATION
# =============================================================================

OUTPUT_DIR = "./out/ecommerce_rules"

START = datetime(2024, 1, 1, 9, 0)

BASKETS = [
    ['Laptop', 'Mouse', 'Keyboard'],
    ['Laptop', 'Mouse'],
    ['Laptop', 'Mouse', 'USB-C Hub'],
    ['Phone', 'Phone Case'],
    ['Phone', 'Phone Case', 'Screen Protector'],
    ['Laptop', 'Laptop Bag'],
]

# customer -> [(event, minutes after START)]
CLICK_STREAMS = {
    'c1': [('View', 0), ('AddToCart', 5), ('Checkout', 10)],
    'c2': [('View', 0), ('AddToCart', 3), ('Checkout', 9)],
    'c3': [('View', 0), ('AddToCart', 2)],
    'c4': [('View', 0), ('Search', 1), ('View', 4)],
}

BASKET_CONFIG = {
    'min_support': 0.3,
    'min_confidence': 0.7,
    'min_lift': 1.2,
    'algorithm': 'apriori'
}

SEQUENCE_CONFIG = {
    'min_support': 0.5,
    'max_time_gap': timedelta(hours=24),
    'group_key': 'actor_id'
}


def build_baskets() -> List[Transaction]:
    return [
        Transaction(f"order_{i}", tuple(items), START + timedelta(hours=i))
        for i, items in enumerate(BASKETS, start=1)
    ]


def build_click_streams() -> List[Transaction]:
    events = []
    for customer, steps in CLICK_STREAMS.items():
        for n, (event, minutes) in enumerate(steps, start=1):
            events.append(Transaction(
                f"{customer}_e{n}", (event,), START + timedelta(minutes=minutes), actor_id=customer))
    return events


# =============================================================================
# EXPERIMENT
# =============================================================================

def run_experiment(output_dir: str = OUTPUT_DIR) -> Dict[str, Any]:
    setup_logging(logging.INFO)

    print("=" * 70)
    print("E-COMMERCE RULE MINING EXPERIMENT")
    print("=" * 70)

    print("\n[1] Mining basket rules...")
    basket_config = MiningConfig(**BASKET_CONFIG)
    basket_miner = RuleMiner(basket_config)
    basket_miner.add_transactions(build_baskets())
    rules, rule_stats = basket_miner.mine_association_rules()
    itemsets, _ = basket_miner.mine_itemsets()

    print(f"  Transactions: {basket_miner.transaction_count()}")
    print(f"  Discovered {len(rules)} rules:")
    for rule in rules:
        print(f"    {rule}  (conf: {rule.metrics.confidence:.0%}, "
              f"support: {rule.metrics.support:.0%}, lift: {rule.metrics.lift:.2f})")

    print("\n[2] Mining checkout funnels...")
    sequence_config = MiningConfig(**SEQUENCE_CONFIG)
    sequence_miner = RuleMiner(sequence_config)
    sequence_miner.add_transactions(build_click_streams())
    patterns, pattern_stats = sequence_miner.mine_sequential_patterns()

    print(f"  Customers: {pattern_stats['num_groups']}")
    print(f"  Discovered {len(patterns)} sequential patterns:")
    for pattern in patterns:
        gaps = ', '.join(str(gap) for gap in pattern.time_gaps)
        print(f"    {pattern}  (support: {pattern.support:.0%}, gaps: {gaps})")

    print(f"\n{'=' * 70}")
    print("SAVING RESULTS")
    print("=" * 70)

    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    output_path = save_mining_results(
        Path(output_dir) / f"{timestamp}_ecommerce_rules_experiment",
        rules=rules,
        itemsets=itemsets,
        patterns=patterns,
        stats={**{f"rules_{k}": v for k, v in rule_stats.items()},
               **{f"sequences_{k}": v for k, v in pattern_stats.items()}},
        parameters={
            **{f"basket_{k}": v for k, v in basket_config.to_dict().items()},
            **{f"sequence_{k}": v for k, v in sequence_config.to_dict().items()},
            'timestamp': datetime.now().isoformat()
        }
    )
    print(f"Output: {output_path}")

    return {
        'rules': rules,
        'itemsets': itemsets,
        'patterns': patterns,
        'output_path': output_path
    }


if __name__ == '__main__':
    run_experiment()
