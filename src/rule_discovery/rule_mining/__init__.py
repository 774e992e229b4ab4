"""
Rule Mining Module

- Frequent itemset mining (Apriori, FP-Growth)
- Association rule generation and quality scoring
- Time-windowed sequential pattern mining
"""
from .base import FrequentItemsetMiner, count_support
from .apriori_miner import AprioriMiner
from .fpgrowth_miner import FPGrowthMiner
from .quality import RuleQualityEvaluator
from .rule_generator import RuleGenerator
from .sequential_miner import SequentialPatternMiner

__all__ = [
    'FrequentItemsetMiner',
    'count_support',
    'AprioriMiner',
    'FPGrowthMiner',
    'RuleQualityEvaluator',
    'RuleGenerator',
    'SequentialPatternMiner'
]
