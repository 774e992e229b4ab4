"""
Main entry point: a transaction log plus a mining configuration.
"""
import logging
from typing import Any, Dict, Iterable, List, Tuple

from rule_discovery.config import MiningConfig
from rule_discovery.pipeline import create_itemset_miner, create_sequential_miner, mine_rules
from rule_discovery.transactions import Transaction, TransactionStore
from rule_discovery.types import AssociationRule, FrequentItemset, SequentialPattern

logger = logging.getLogger(__name__)


class RuleMiner:
    """
    Rule and pattern miner over an append-only transaction log.

    Every mine_* call validates the configuration first, then recomputes all
    itemsets, rules and patterns from a snapshot of the log and returns them
    with a stats dict. Nothing is cached between calls.

    Example:
        miner = RuleMiner(MiningConfig(min_support=0.3, min_confidence=0.7, min_lift=1.2))
        miner.add_transactions(transactions)
        rules, stats = miner.mine_association_rules()
    """

    def __init__(self, config: MiningConfig = None, store: TransactionStore = None):
        self.config = config if config is not None else MiningConfig()
        self.config.validate()
        self.store = store if store is not None else TransactionStore()

    def add_transaction(self, transaction: Transaction) -> None:
        self.store.add_transaction(transaction)

    def add_transactions(self, transactions: Iterable[Transaction]) -> int:
        return self.store.add_transactions(transactions)

    def transaction_count(self) -> int:
        return len(self.store)

    def mine_itemsets(self) -> Tuple[List[FrequentItemset], Dict[str, Any]]:
        self.config.validate()
        itemsets, stats = create_itemset_miner(self.config).mine_itemsets(self.store.snapshot())
        logger.info(
            "Itemset mining: %d transactions, %d frequent itemsets (algorithm=%s, min_support=%s)",
            stats['transactions_processed'], stats['num_itemsets'],
            stats['algorithm'], self.config.min_support)
        return itemsets, stats

    def mine_association_rules(self) -> Tuple[List[AssociationRule], Dict[str, Any]]:
        self.config.validate()
        rules, stats = mine_rules(self.store.snapshot(), self.config)
        logger.info(
            "Rule mining: %d transactions, %d frequent itemsets, %d rules (algorithm=%s)",
            stats['transactions_processed'], stats['num_itemsets'],
            stats['num_rules'], stats['algorithm'])
        return rules, stats

    def mine_sequential_patterns(self) -> Tuple[List[SequentialPattern], Dict[str, Any]]:
        self.config.validate()
        patterns, stats = create_sequential_miner(self.config).mine_patterns(self.store.snapshot())
        logger.info(
            "Sequence mining: %d groups, %d patterns found (min_support=%s, max_time_gap=%s)",
            stats['num_groups'], stats['num_patterns'],
            self.config.min_support, self.config.max_time_gap)
        return patterns, stats

    def __repr__(self):
        return f"RuleMiner(config={self.config!r}, transactions={len(self.store)})"
