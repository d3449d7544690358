from typing import Any, Dict, List, Tuple


def filter_rules(rules, criterion: str, threshold: float):
    """
    Filters rules based on a criterion >= threshold.

    Args:
        rules: List of rule dictionaries
        criterion: The rule metric to filter on (e.g., 'support', 'confidence', 'lift', 'count')
        threshold: Minimum value for the criterion (inclusive)

    Returns:
        List of rules meeting the criterion, in their original order
    """
    return [rule for rule in rules if rule.get(criterion, float("-inf")) >= threshold]


def itemset_labels(val) -> set:
    """
    Normalize an itemset to a set of lower-case 'feature=value' strings.

    Accepts the record format (list of {'feature', 'value'} dicts), a
    {feature: value} mapping, a single dict, an Item-like object, a
    frozenset or list of strings, or a plain string.
    """
    if val is None:
        return set()
    if isinstance(val, str):
        return {val.lower()}
    if isinstance(val, dict):
        if 'feature' in val and 'value' in val:
            return {f"{val['feature']}={val['value']}".lower()}
        return {f"{k}={v}".lower() for k, v in val.items()}
    if isinstance(val, (list, tuple, set, frozenset)):
        result = set()
        for item in val:
            result.update(itemset_labels(item))
        return result
    return {str(val).lower()}


def _label_matches(pattern: str, label: str) -> bool:
    """
    'feature=value' matches that exact label, 'feature=' matches any value of
    the feature, and a bare token matches a label's feature or value.
    """
    pattern = pattern.strip().lower()
    if pattern.endswith('='):
        return label.startswith(pattern)
    if '=' in pattern:
        return label == pattern
    feature, _, value = label.partition('=')
    return pattern in (feature, value)


def _matches(labels: set, patterns, match_any: bool) -> bool:
    if not patterns:
        return True
    hits = [any(_label_matches(p, label) for label in labels) for p in patterns]
    return any(hits) if match_any else all(hits)


def _excludes(labels: set, patterns) -> bool:
    if not patterns:
        return True
    return not any(_label_matches(p, label) for p in patterns for label in labels)


def filter_rules_by_pattern(
    rules,
    antecedent_contains: list = None,
    consequent_contains: list = None,
    antecedent_excludes: list = None,
    consequent_excludes: list = None,
    match_any: bool = False
):
    """
    Filter rules by antecedent/consequent patterns.

    Patterns are case-insensitive. 'PRECINCT=10' matches precinct 10 only
    (not 105), 'PRECINCT=' matches any precinct and a bare 'Night' matches
    any item whose feature or value is Night.

    Args:
        rules: List of rule dictionaries
        antecedent_contains: List of patterns that must appear in antecedent
        consequent_contains: List of patterns that must appear in consequent
        antecedent_excludes: List of patterns that must NOT appear in antecedent
        consequent_excludes: List of patterns that must NOT appear in consequent
        match_any: If True, match if ANY pattern matches. If False, ALL must match.

    Returns:
        List of filtered rules
    """
    filtered = []
    for rule in rules:
        ant = itemset_labels(rule.get('antecedent'))
        cons = itemset_labels(rule.get('consequent'))

        if (_matches(ant, antecedent_contains, match_any)
                and _matches(cons, consequent_contains, match_any)
                and _excludes(ant, antecedent_excludes)
                and _excludes(cons, consequent_excludes)):
            filtered.append(rule)

    return filtered


def filter_rules_by_consequent(rules, targets: list, match_any: bool = True):
    """Keep rules whose consequent matches the target patterns (e.g. ['TIME_SLOT=Night'])."""
    return filter_rules_by_pattern(rules, consequent_contains=targets, match_any=match_any)


def filter_rules_by_antecedent(rules, patterns: list, match_any: bool = True):
    """Keep rules whose antecedent matches the patterns."""
    return filter_rules_by_pattern(rules, antecedent_contains=patterns, match_any=match_any)


def filter_itemsets(
    itemsets,
    criterion: str = 'support',
    threshold: float = 0.0
) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
    """
    Filters frequent itemsets based on a criterion >= threshold.

    Args:
        itemsets: List of itemset dictionaries (each with 'items', 'support' and 'count' keys)
        criterion: The metric to filter on (default: 'support')
        threshold: Minimum value for the criterion (inclusive)

    Returns:
        Tuple of (filtered_itemsets, stats) where:
            filtered_itemsets: List of itemsets meeting the criterion
            stats: Dictionary with count and average support of the filtered itemsets
    """
    filtered_itemset_list = [itemset for itemset in itemsets if itemset.get(criterion, float("-inf")) >= threshold]

    count = len(filtered_itemset_list)
    if count == 0:
        return filtered_itemset_list, {"num_itemsets": 0, "average_support": 0.0}

    avg_support = sum(item.get("support", 0) for item in filtered_itemset_list) / count

    stats = {
        "num_itemsets": count,
        "average_support": round(avg_support, 3),
    }

    return filtered_itemset_list, stats


def summarize_rules(rules) -> Dict[str, Any]:
    """Count and average metrics of a rule list."""
    if not rules:
        return {'num_rules': 0, 'average_support': 0.0, 'average_confidence': 0.0, 'average_lift': 0.0}
    n = len(rules)
    return {
        'num_rules': n,
        'average_support': sum(r.get('support', 0) for r in rules) / n,
        'average_confidence': sum(r.get('confidence', 0) for r in rules) / n,
        'average_lift': sum(r.get('lift', 0) for r in rules) / n,
    }
