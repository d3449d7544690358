"""
Association rule generation from frequent itemsets.
"""
import logging
from itertools import combinations
from typing import Dict, List, Sequence

from incident_rules.rule_mining.base import MiningError, check_fraction
from incident_rules.rule_mining.models import AssociationRule, FrequentItemset, Itemset

logger = logging.getLogger(__name__)


def split_itemset(itemset: Itemset):
    """Yield every (antecedent, consequent) split with both sides non-empty."""
    for size in range(1, len(itemset)):
        for antecedent in combinations(itemset, size):
            consequent = tuple(item for item in itemset if item not in antecedent)
            yield antecedent, consequent


def generate_rules(
    frequent_itemsets: Sequence[FrequentItemset],
    n_transactions: int,
    min_confidence: float
) -> List[AssociationRule]:
    """
    Generate every rule with confidence >= min_confidence.

    Both directions of a split are considered: {A} -> {B} and {B} -> {A}
    are distinct rules. Support lookups for antecedent and consequent come
    from frequent_itemsets itself, which downward closure guarantees to
    contain every subset of a frequent itemset.

    Args:
        frequent_itemsets: Output of generate_frequent_itemsets
        n_transactions: Number of transactions the itemsets were mined from
        min_confidence: Inclusive confidence threshold in [0, 1]

    Returns:
        Rules in generation order (use rank_rules for a stable ranking)

    Raises:
        ConfigurationError: on invalid min_confidence
        MiningError: if a subset of a frequent itemset has no support count
    """
    check_fraction('min_confidence', min_confidence)

    if n_transactions <= 0 or not frequent_itemsets:
        return []

    counts: Dict[Itemset, int] = {f.items: f.count for f in frequent_itemsets}
    rules = []
    skipped = 0

    for frequent in frequent_itemsets:
        if len(frequent.items) < 2:
            continue

        for antecedent, consequent in split_itemset(frequent.items):
            if antecedent not in counts or consequent not in counts:
                raise MiningError(
                    f"Subset of frequent itemset {frequent.items} has no support count; "
                    f"itemsets are not downward closed"
                )

            ant_count = counts[antecedent]
            cons_count = counts[consequent]
            if ant_count == 0 or cons_count == 0:
                skipped += 1
                continue

            confidence = frequent.count / ant_count
            if confidence < min_confidence:
                continue

            lift = (frequent.count * n_transactions) / (ant_count * cons_count)
            rules.append(AssociationRule(
                antecedent=antecedent,
                consequent=consequent,
                support=frequent.support,
                confidence=confidence,
                lift=lift,
                count=frequent.count
            ))

    if skipped:
        logger.debug("Skipped %d rules with a zero-support side", skipped)
    return rules
