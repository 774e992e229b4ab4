"""
Automatic rule discovery from historical transactions.

Association rules (Apriori / FP-Growth) and time-windowed sequential patterns.
"""
from .config import FilterConfig, GroupKey, MiningAlgorithm, MiningConfig
from .errors import ComputationError, ConfigError, InvalidTransactionError, MiningError
from .miner import RuleMiner
from .pipeline import create_itemset_miner, run_rule_mining
from .transactions import Transaction, TransactionStore
from .types import (
    AssociationRule,
    FrequentItemset,
    Itemset,
    PatternMetrics,
    SequentialPattern,
    make_itemset
)

__version__ = '0.1.0'

__all__ = [
    'FilterConfig',
    'GroupKey',
    'MiningAlgorithm',
    'MiningConfig',
    'ComputationError',
    'ConfigError',
    'InvalidTransactionError',
    'MiningError',
    'RuleMiner',
    'create_itemset_miner',
    'run_rule_mining',
    'Transaction',
    'TransactionStore',
    'AssociationRule',
    'FrequentItemset',
    'Itemset',
    'PatternMetrics',
    'SequentialPattern',
    'make_itemset'
]
