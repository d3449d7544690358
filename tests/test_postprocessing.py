"""Rule and itemset filter tests."""

from __future__ import annotations

import pytest

from incident_rules.postprocessing import (
    filter_rules, filter_rules_by_pattern, filter_rules_by_consequent,
    filter_rules_by_antecedent, filter_itemsets, summarize_rules
)


def _item(feature, value):
    return {"feature": feature, "value": value}


rules = [
    {
        "antecedent": [_item("PRECINCT", "75")],
        "consequent": [_item("TIME_SLOT", "Night")],
        "support": 0.30, "confidence": 0.75, "lift": 1.50, "count": 6,
    },
    {
        "antecedent": [_item("TIME_SLOT", "Morning")],
        "consequent": [_item("PRECINCT", "14")],
        "support": 0.20, "confidence": 1.00, "lift": 2.50, "count": 4,
    },
    {
        "antecedent": [_item("PRECINCT", "40")],
        "consequent": [_item("TIME_SLOT", "Night")],
        "support": 0.15, "confidence": 0.75, "lift": 1.50, "count": 3,
    },
]

itemsets = [
    {"items": [_item("TIME_SLOT", "Night")], "support": 0.5, "count": 10},
    {"items": [_item("PRECINCT", "75")], "support": 0.4, "count": 8},
    {"items": [_item("PRECINCT", "40")], "support": 0.2, "count": 4},
]


def test_filter_rules_is_inclusive() -> None:
    assert filter_rules(rules, "support", 0.20) == rules[:2]
    assert filter_rules(rules, "lift", 2.5) == [rules[1]]


def test_filter_rules_unknown_metric_drops_everything() -> None:
    assert filter_rules(rules, "conviction", 0.0) == []


def test_filter_by_consequent() -> None:
    night = filter_rules_by_consequent(rules, ["TIME_SLOT=Night"])
    assert night == [rules[0], rules[2]]


def test_filter_patterns_are_case_insensitive() -> None:
    assert filter_rules_by_antecedent(rules, ["precinct=75"]) == [rules[0]]


def test_filter_by_pattern_prefix_matches_any_value() -> None:
    assert filter_rules_by_antecedent(rules, ["PRECINCT="]) == [rules[0], rules[2]]
    assert filter_rules_by_antecedent(rules, ["time_slot="]) == [rules[1]]


@pytest.mark.parametrize(
    "pattern, expected",
    [("PRECINCT=10", ["10"]), ("PRECINCT=105", ["105"]), ("PRECINCT=1", []), ("PRECINCT=", ["10", "105"])],
)
def test_filter_by_pattern_matches_whole_values(pattern, expected) -> None:
    precinct_rules = [
        {"antecedent": [_item("PRECINCT", code)], "consequent": [_item("TIME_SLOT", "Night")],
         "support": 0.1, "confidence": 0.5, "lift": 1.0, "count": 1}
        for code in ("10", "105")
    ]
    result = filter_rules_by_pattern(precinct_rules, antecedent_contains=[pattern])
    assert [r["antecedent"][0]["value"] for r in result] == expected


def test_filter_by_pattern_excludes() -> None:
    result = filter_rules_by_pattern(rules, consequent_excludes=["Night"])
    assert result == [rules[1]]


def test_filter_by_pattern_all_vs_any() -> None:
    both = ["PRECINCT=75", "PRECINCT=40"]
    assert filter_rules_by_pattern(rules, antecedent_contains=both) == []
    assert filter_rules_by_pattern(rules, antecedent_contains=both, match_any=True) == [rules[0], rules[2]]


def test_filter_itemsets_returns_stats() -> None:
    kept, stats = filter_itemsets(itemsets, "support", 0.4)
    assert kept == itemsets[:2]
    assert stats == {"num_itemsets": 2, "average_support": 0.45}


def test_filter_itemsets_empty() -> None:
    kept, stats = filter_itemsets(itemsets, "support", 0.9)
    assert kept == []
    assert stats["num_itemsets"] == 0


def test_summarize_rules() -> None:
    summary = summarize_rules(rules)
    assert summary["num_rules"] == 3
    assert summary["average_lift"] == pytest.approx(5.5 / 3)
    assert summarize_rules([])["num_rules"] == 0
