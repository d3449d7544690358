"""
MLxtend-based rule mining using various algorithms.

Supports multiple algorithms: Apriori, FP-Growth, FPMax (itemsets only).
Produces the same itemset and rule records as AprioriMiner, which makes it
a drop-in reference backend.
"""
import time
from typing import Dict, List, Tuple, Any

import pandas as pd
from mlxtend.frequent_patterns import fpgrowth, apriori, fpmax, association_rules
from mlxtend.preprocessing import TransactionEncoder as MLxtendEncoder

from incident_rules.rule_mining.base import HybridMiner, MiningInput, validate_mining_params
from incident_rules.rule_mining.encoding import TransactionEncoder
from incident_rules.rule_mining.models import AssociationRule, Item, make_itemset
from incident_rules.rule_mining.ranking import rank_rules
from incident_rules.rule_mining.schema import AttributeSchema

ITEM_SEPARATOR = '__'


def _parse_item(label: str) -> Item:
    attribute, value = label.split(ITEM_SEPARATOR, 1)
    return Item(attribute, value)


class MLxtendMiner(HybridMiner):
    """
    MLxtend rule miner with multiple algorithm support.

    Supports algorithms:
    - 'apriori': Apriori (classic algorithm)
    - 'fpgrowth': FP-Growth (fast)
    - 'fpmax': FPMax (maximal itemsets, no rules)
    """

    ALGORITHMS = ['apriori', 'fpgrowth', 'fpmax']

    def __init__(
        self,
        algorithm: str = 'fpgrowth',
        min_support: float = 0.01,
        min_confidence: float = 0.5,
        max_len: int = 2,
        metric: str = 'lift',
        schema: AttributeSchema = None,
        **kwargs
    ):
        """
        Initialize MLxtend miner.

        Args:
            algorithm: Mining algorithm ('apriori', 'fpgrowth', 'fpmax')
            min_support: Minimum support threshold
            min_confidence: Minimum confidence threshold
            max_len: Maximum number of items in an itemset
            metric: Ranking metric for rules ('lift', 'confidence', 'support')
            schema: Attribute schema used to encode rows
        """
        validate_mining_params(min_support, min_confidence, max_len, metric)
        super().__init__(min_support, min_confidence, max_len, **kwargs)
        self.algorithm = algorithm.lower()
        self.metric = metric
        self.schema = schema

        if self.algorithm not in self.ALGORITHMS:
            raise ValueError(f"Algorithm must be one of {self.ALGORITHMS}, got '{self.algorithm}'")

    def _prepare_data(self, data: MiningInput) -> pd.DataFrame:
        """
        Convert rows to a one-hot encoded frame with 'attribute__value' columns.

        Rows go through the same TransactionEncoder as AprioriMiner so both
        backends see identical items.
        """
        transactions = TransactionEncoder(self.schema).encode(data)
        labels = [
            sorted(f"{item.attribute}{ITEM_SEPARATOR}{item.value}" for item in transaction)
            for transaction in transactions
        ]

        te = MLxtendEncoder()
        te_array = te.fit(labels).transform(labels)
        return pd.DataFrame(te_array, columns=te.columns_)

    def _frequent_itemsets(self, df_encoded: pd.DataFrame) -> pd.DataFrame:
        if self.algorithm == 'fpgrowth':
            func = fpgrowth
        elif self.algorithm == 'apriori':
            func = apriori
        else:
            func = fpmax
        return func(
            df_encoded,
            min_support=self.min_support,
            use_colnames=True,
            max_len=self.max_len
        )

    def mine_itemsets(self, data: MiningInput) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        """
        Mine frequent itemsets.

        Args:
            data: DataFrame or sequence of rows with categorical values

        Returns:
            Tuple of (itemsets, stats)
        """
        start_time = time.time()

        df_encoded = self._prepare_data(data)
        n_transactions = len(df_encoded)

        itemsets = []
        if n_transactions > 0 and df_encoded.shape[1] > 0:
            frequent_itemsets_df = self._frequent_itemsets(df_encoded)
            for _, row in frequent_itemsets_df.iterrows():
                items = make_itemset(_parse_item(label) for label in row['itemsets'])
                support = float(row['support'])
                itemsets.append({
                    'items': [item.to_dict() for item in items],
                    'support': support,
                    'count': int(round(support * n_transactions))
                })

        stats = {
            'num_itemsets': len(itemsets),
            'num_transactions': n_transactions,
            'execution_time': time.time() - start_time,
            'average_support': sum(i['support'] for i in itemsets) / len(itemsets) if itemsets else 0.0,
            'algorithm': f'MLxtend_{self.algorithm}',
            'mode': 'itemsets'
        }

        return itemsets, stats

    def mine_rules(self, data: MiningInput) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        """
        Mine association rules.

        Args:
            data: DataFrame or sequence of rows with categorical values

        Returns:
            Tuple of (rules, stats)
        """
        if self.algorithm == 'fpmax':
            raise ValueError("fpmax yields maximal itemsets only; use 'apriori' or 'fpgrowth' for rules")

        start_time = time.time()

        df_encoded = self._prepare_data(data)
        n_transactions = len(df_encoded)

        empty_stats = {
            'num_rules': 0,
            'num_transactions': n_transactions,
            'execution_time': 0.0,
            'algorithm': f'MLxtend_{self.algorithm}',
            'mode': 'rules'
        }
        if n_transactions == 0 or df_encoded.shape[1] == 0:
            return [], empty_stats

        frequent_itemsets_df = self._frequent_itemsets(df_encoded)
        if len(frequent_itemsets_df) == 0 or frequent_itemsets_df['itemsets'].apply(len).max() < 2:
            empty_stats['execution_time'] = time.time() - start_time
            return [], empty_stats

        rules_df = association_rules(
            frequent_itemsets_df,
            num_itemsets=n_transactions,
            metric='confidence',
            min_threshold=self.min_confidence
        )

        parsed = []
        for _, row in rules_df.iterrows():
            support = float(row['support'])
            parsed.append(AssociationRule(
                antecedent=make_itemset(_parse_item(label) for label in row['antecedents']),
                consequent=make_itemset(_parse_item(label) for label in row['consequents']),
                support=support,
                confidence=float(row['confidence']),
                lift=float(row['lift']),
                count=int(round(support * n_transactions))
            ))

        rules = [rule.to_dict() for rule in rank_rules(parsed, self.metric)]

        stats = {
            'num_rules': len(rules),
            'num_transactions': n_transactions,
            'execution_time': time.time() - start_time,
            'average_support': sum(r['support'] for r in rules) / len(rules) if rules else 0.0,
            'average_confidence': sum(r['confidence'] for r in rules) / len(rules) if rules else 0.0,
            'average_lift': sum(r['lift'] for r in rules) / len(rules) if rules else 0.0,
            'ranked_by': self.metric,
            'algorithm': f'MLxtend_{self.algorithm}',
            'mode': 'rules'
        }

        return rules, stats

    def __repr__(self):
        return (f"MLxtendMiner(algorithm='{self.algorithm}', min_support={self.min_support}, "
                f"min_confidence={self.min_confidence}, max_len={self.max_len})")
