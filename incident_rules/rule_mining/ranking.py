"""
Rule ranking by interestingness.
"""
from typing import List, Sequence

from incident_rules.rule_mining.base import check_metric
from incident_rules.rule_mining.models import AssociationRule


def rank_rules(rules: Sequence[AssociationRule], metric: str) -> List[AssociationRule]:
    """
    Sort rules by metric, descending.

    Ties are broken by confidence (descending), then by the lexical order
    of antecedent and consequent, so equal inputs always rank identically.

    Args:
        rules: Rules to rank
        metric: 'lift', 'confidence' or 'support'

    Returns:
        New list of ranked rules
    """
    check_metric(metric)
    return sorted(
        rules,
        key=lambda rule: (-getattr(rule, metric), -rule.confidence, rule.sort_key())
    )


def top_rules(rules: Sequence[AssociationRule], metric: str, n: int = 10) -> List[AssociationRule]:
    return rank_rules(rules, metric)[:n]
