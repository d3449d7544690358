"""
Rule Mining Module

Association rule mining over categorical attributes:
- Transaction encoding against an attribute schema
- Frequent itemset generation (level-wise Apriori)
- Rule generation and ranking by lift, confidence or support
- MLxtend reference backend
"""
from .base import (
    ConfigurationError,
    MiningError,
    RANKING_METRICS,
    HybridMiner,
    validate_mining_params
)
from .models import Item, FrequentItemset, AssociationRule
from .schema import AttributeSchema, SchemaError, TIME_SLOT, PRECINCT, TIME_SLOT_DOMAIN
from .encoding import TransactionEncoder, encode_transactions
from .apriori import generate_frequent_itemsets, apriori_gen, count_support
from .rules import generate_rules
from .ranking import rank_rules, top_rules
from .apriori_miner import AprioriMiner, mine_association_rules

__all__ = [
    'ConfigurationError', 'MiningError', 'RANKING_METRICS', 'HybridMiner', 'validate_mining_params',
    'Item', 'FrequentItemset', 'AssociationRule',
    'AttributeSchema', 'SchemaError', 'TIME_SLOT', 'PRECINCT', 'TIME_SLOT_DOMAIN',
    'TransactionEncoder', 'encode_transactions',
    'generate_frequent_itemsets', 'apriori_gen', 'count_support',
    'generate_rules',
    'rank_rules', 'top_rules',
    'AprioriMiner', 'mine_association_rules'
]
