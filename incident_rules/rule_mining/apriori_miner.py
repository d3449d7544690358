"""
Apriori rule miner: encoder -> frequent itemsets -> rules -> ranking.

Each stage takes its inputs as arguments and returns new values, so the
miner holds configuration only and can be reused across datasets.
"""
import logging
import time
from typing import Dict, List, Tuple, Any

from incident_rules.rule_mining.apriori import generate_frequent_itemsets
from incident_rules.rule_mining.base import HybridMiner, MiningInput, validate_mining_params
from incident_rules.rule_mining.encoding import TransactionEncoder
from incident_rules.rule_mining.models import AssociationRule, FrequentItemset
from incident_rules.rule_mining.ranking import rank_rules
from incident_rules.rule_mining.rules import generate_rules
from incident_rules.rule_mining.schema import AttributeSchema

logger = logging.getLogger(__name__)


def mine_association_rules(
    data: MiningInput,
    min_support: float,
    min_confidence: float,
    max_len: int,
    metric: str,
    schema: AttributeSchema = None,
    n_jobs: int = 1
) -> List[AssociationRule]:
    """
    Run the full pipeline and return ranked rules.

    All thresholds are required; invalid values raise ConfigurationError
    before the data is touched. Empty input yields an empty list.
    """
    validate_mining_params(min_support, min_confidence, max_len, metric)

    transactions = TransactionEncoder(schema).encode(data)
    universe = schema.items() if schema is not None else None
    itemsets = generate_frequent_itemsets(transactions, min_support, max_len, n_jobs=n_jobs, universe=universe)
    rules = generate_rules(itemsets, len(transactions), min_confidence)
    return rank_rules(rules, metric)


class AprioriMiner(HybridMiner):
    """
    Level-wise Apriori miner over categorical attributes.

    Can generate:
    - Frequent itemsets with support and count
    - Association rules with support, confidence, lift and count, ranked by metric
    """

    def __init__(
        self,
        min_support: float,
        min_confidence: float,
        max_len: int,
        metric: str,
        schema: AttributeSchema = None,
        n_jobs: int = 1,
        verbose: bool = False,
        **kwargs
    ):
        """
        Initialize Apriori miner.

        Args:
            min_support: Minimum support threshold (inclusive)
            min_confidence: Minimum confidence threshold (inclusive)
            max_len: Maximum number of items in an itemset
            metric: Ranking metric ('lift', 'confidence', 'support')
            schema: Attribute schema to encode and validate rows with;
                    None uses every column as an open attribute
            n_jobs: Workers for support counting
            verbose: Show level progress
        """
        validate_mining_params(min_support, min_confidence, max_len, metric)
        super().__init__(min_support, min_confidence, max_len, **kwargs)
        self.metric = metric
        self.schema = schema
        self.n_jobs = n_jobs
        self.verbose = verbose

    def _frequent_itemsets(self, data: MiningInput) -> Tuple[List[FrequentItemset], int]:
        transactions = TransactionEncoder(self.schema).encode(data)
        itemsets = generate_frequent_itemsets(
            transactions,
            min_support=self.min_support,
            max_len=self.max_len,
            n_jobs=self.n_jobs,
            verbose=self.verbose,
            universe=self.schema.items() if self.schema is not None else None
        )
        return itemsets, len(transactions)

    def find_rules(self, data: MiningInput) -> List[AssociationRule]:
        """Ranked AssociationRule objects, without the dict conversion of mine_rules."""
        itemsets, n_transactions = self._frequent_itemsets(data)
        rules = generate_rules(itemsets, n_transactions, self.min_confidence)
        return rank_rules(rules, self.metric)

    def mine_itemsets(self, data: MiningInput) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        """
        Mine frequent itemsets.

        Args:
            data: DataFrame or sequence of rows with categorical values

        Returns:
            Tuple of (itemsets, stats)
        """
        start_time = time.time()

        frequent, n_transactions = self._frequent_itemsets(data)
        itemsets = [f.to_dict() for f in frequent]

        stats = {
            'num_itemsets': len(itemsets),
            'num_transactions': n_transactions,
            'max_itemset_size': max((len(f) for f in frequent), default=0),
            'execution_time': time.time() - start_time,
            'average_support': sum(i['support'] for i in itemsets) / len(itemsets) if itemsets else 0.0,
            'algorithm': 'Apriori',
            'mode': 'itemsets'
        }
        logger.info("Mined %d frequent itemsets from %d transactions", len(itemsets), n_transactions)

        return itemsets, stats

    def mine_rules(self, data: MiningInput) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        """
        Mine association rules, ranked by the configured metric.

        Args:
            data: DataFrame or sequence of rows with categorical values

        Returns:
            Tuple of (rules, stats)
        """
        start_time = time.time()

        frequent, n_transactions = self._frequent_itemsets(data)
        ranked = rank_rules(generate_rules(frequent, n_transactions, self.min_confidence), self.metric)
        rules = [rule.to_dict() for rule in ranked]

        stats = {
            'num_rules': len(rules),
            'num_itemsets': len(frequent),
            'num_transactions': n_transactions,
            'execution_time': time.time() - start_time,
            'average_support': sum(r['support'] for r in rules) / len(rules) if rules else 0.0,
            'average_confidence': sum(r['confidence'] for r in rules) / len(rules) if rules else 0.0,
            'average_lift': sum(r['lift'] for r in rules) / len(rules) if rules else 0.0,
            'ranked_by': self.metric,
            'algorithm': 'Apriori',
            'mode': 'rules'
        }
        logger.info("Mined %d rules from %d frequent itemsets", len(rules), len(frequent))

        return rules, stats

    def __repr__(self):
        return (f"AprioriMiner(min_support={self.min_support}, min_confidence={self.min_confidence}, "
                f"max_len={self.max_len}, metric='{self.metric}')")
