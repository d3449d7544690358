"""End-to-end miner tests, including the mlxtend cross-check."""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from incident_rules.rule_mining import AprioriMiner, ConfigurationError, mine_association_rules
from incident_rules.rule_mining.mlxtend_miner import MLxtendMiner
from incident_rules.rule_mining.schema import AttributeSchema, SchemaError, TIME_SLOT, PRECINCT


def _rule_key(rule):
    return (
        tuple((i["feature"], i["value"]) for i in rule["antecedent"]),
        tuple((i["feature"], i["value"]) for i in rule["consequent"]),
    )


# ---------------------------------------------------------------------------
# mine_association_rules
# ---------------------------------------------------------------------------


def test_night_heavy_example_end_to_end() -> None:
    rows = [{TIME_SLOT: "Night", PRECINCT: 10}] * 8 + [{TIME_SLOT: "Morning", PRECINCT: 10}] * 2
    rules = mine_association_rules(rows, 0.5, 0.5, 2, "lift", schema=AttributeSchema.incident_default())

    assert [str(r) for r in rules] == [
        "TIME_SLOT=Night -> PRECINCT=10",
        "PRECINCT=10 -> TIME_SLOT=Night",
    ]
    assert rules[1].confidence == pytest.approx(0.8)
    assert rules[1].lift == pytest.approx(1.0)


def test_rule_set_and_order_are_deterministic(incident_frame) -> None:
    first = mine_association_rules(incident_frame, 0.05, 0.1, 2, "lift")
    shuffled = incident_frame.sample(frac=1.0, random_state=7)
    second = mine_association_rules(shuffled, 0.05, 0.1, 2, "lift")
    assert first == second


def test_empty_input_returns_no_rules() -> None:
    assert mine_association_rules([], 0.1, 0.1, 2, "lift") == []
    empty = pd.DataFrame(columns=[TIME_SLOT, PRECINCT])
    assert mine_association_rules(empty, 0.1, 0.1, 2, "lift", schema=AttributeSchema.incident_default()) == []


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(min_support=1.2, min_confidence=0.5, max_len=2, metric="lift"),
        dict(min_support=0.1, min_confidence=-0.1, max_len=2, metric="lift"),
        dict(min_support=0.1, min_confidence=0.5, max_len=0, metric="lift"),
        dict(min_support=0.1, min_confidence=0.5, max_len=2, metric="conviction"),
    ],
)
def test_invalid_configuration_rejected_before_mining(kwargs) -> None:
    # the data would fail schema validation; configuration must be checked first
    bad_rows = [{TIME_SLOT: "Dusk", PRECINCT: 1}]
    with pytest.raises(ConfigurationError):
        mine_association_rules(bad_rows, schema=AttributeSchema.incident_default(), **kwargs)
    with pytest.raises(ConfigurationError):
        AprioriMiner(**kwargs)


@pytest.mark.parametrize(
    "min_support, min_confidence, max_len",
    [
        (np.float64(0.125), 0.5, 2),
        (0.125, np.float32(0.5), 2),
        (0.125, 0.5, np.int64(2)),
        (np.float32(0.125), np.float64(0.5), np.int32(2)),
    ],
)
def test_numpy_scalar_parameters_accepted(incident_frame, min_support, min_confidence, max_len) -> None:
    expected = AprioriMiner(0.125, 0.5, 2, "lift").find_rules(incident_frame)
    assert AprioriMiner(min_support, min_confidence, max_len, "lift").find_rules(incident_frame) == expected


@pytest.mark.parametrize("max_len", [np.float64(2.0), True, np.int64(0)])
def test_invalid_max_len_rejected(max_len) -> None:
    with pytest.raises(ConfigurationError):
        AprioriMiner(0.1, 0.5, max_len, "lift")


def test_schema_violation_raises() -> None:
    with pytest.raises(SchemaError):
        mine_association_rules(
            [{TIME_SLOT: "Dusk", PRECINCT: 1}], 0.1, 0.1, 2, "lift",
            schema=AttributeSchema.incident_default()
        )


# ---------------------------------------------------------------------------
# AprioriMiner
# ---------------------------------------------------------------------------


def test_miner_rules_and_stats(incident_frame) -> None:
    miner = AprioriMiner(min_support=0.05, min_confidence=0.5, max_len=2, metric="lift")
    rules, stats = miner.mine_rules(incident_frame)

    assert stats["num_rules"] == len(rules) > 0
    assert stats["num_transactions"] == len(incident_frame)
    assert stats["algorithm"] == "Apriori"
    assert stats["ranked_by"] == "lift"

    lifts = [r["lift"] for r in rules]
    assert lifts == sorted(lifts, reverse=True)
    assert all(r["confidence"] >= 0.5 for r in rules)
    assert all(r["support"] >= 0.05 for r in rules)


def test_miner_precinct_75_points_to_night(incident_frame) -> None:
    miner = AprioriMiner(min_support=0.05, min_confidence=0.5, max_len=2, metric="confidence",
                         schema=AttributeSchema.incident_default())
    rules = {str(r): r for r in miner.find_rules(incident_frame)}
    rule = rules["PRECINCT=75 -> TIME_SLOT=Night"]
    # 6 of 8 incidents in precinct 75 happen at night; 10 of 20 overall
    assert rule.confidence == pytest.approx(6 / 8)
    assert rule.lift == pytest.approx((6 / 8) / (10 / 20))
    assert rule.count == 6


def test_miner_itemsets(incident_frame) -> None:
    miner = AprioriMiner(min_support=0.1, min_confidence=0.5, max_len=2, metric="lift")
    itemsets, stats = miner.mine_itemsets(incident_frame)

    assert stats["num_itemsets"] == len(itemsets)
    assert stats["max_itemset_size"] == 2
    by_items = {tuple((i["feature"], i["value"]) for i in s["items"]): s for s in itemsets}
    assert by_items[((TIME_SLOT, "Night"),)]["count"] == 10
    assert by_items[((PRECINCT, "75"), (TIME_SLOT, "Night"))]["support"] == pytest.approx(0.3)


def test_miner_parallel_matches_serial(incident_frame) -> None:
    serial = AprioriMiner(0.05, 0.1, 2, "lift").find_rules(incident_frame)
    parallel = AprioriMiner(0.05, 0.1, 2, "lift", n_jobs=2).find_rules(incident_frame)
    assert serial == parallel


def test_miner_repr() -> None:
    assert "min_support=0.1" in repr(AprioriMiner(0.1, 0.5, 2, "lift"))


# ---------------------------------------------------------------------------
# mlxtend cross-check
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("algorithm", ["apriori", "fpgrowth"])
def test_mlxtend_agrees_with_apriori(incident_frame, algorithm) -> None:
    ours, _ = AprioriMiner(0.05, 0.2, 2, "lift").mine_rules(incident_frame)
    theirs, stats = MLxtendMiner(algorithm, 0.05, 0.2, 2, "lift").mine_rules(incident_frame)

    assert stats["algorithm"] == f"MLxtend_{algorithm}"
    # lifts equal in exact arithmetic may differ in the last bit, so compare by rule, not by rank
    ours = {_rule_key(r): r for r in ours}
    theirs = {_rule_key(r): r for r in theirs}
    assert set(ours) == set(theirs)
    for key, a in ours.items():
        b = theirs[key]
        assert a["support"] == pytest.approx(b["support"])
        assert a["confidence"] == pytest.approx(b["confidence"])
        assert a["lift"] == pytest.approx(b["lift"])
        assert a["count"] == b["count"]


def test_mlxtend_itemsets_agree_with_apriori(incident_frame) -> None:
    ours, _ = AprioriMiner(0.1, 0.2, 2, "lift").mine_itemsets(incident_frame)
    theirs, _ = MLxtendMiner("fpgrowth", 0.1, 0.2, 2, "lift").mine_itemsets(incident_frame)

    def as_map(itemsets):
        return {tuple((i["feature"], i["value"]) for i in s["items"]): s["count"] for s in itemsets}

    assert as_map(ours) == as_map(theirs)


def test_mlxtend_empty_input() -> None:
    rules, stats = MLxtendMiner("fpgrowth", 0.1, 0.1, 2, "lift").mine_rules([])
    assert rules == []
    assert stats["num_rules"] == 0


def test_mlxtend_fpmax_has_no_rules(incident_frame) -> None:
    with pytest.raises(ValueError):
        MLxtendMiner("fpmax", 0.1, 0.1, 2, "lift").mine_rules(incident_frame)


def test_mlxtend_unknown_algorithm() -> None:
    with pytest.raises(ValueError):
        MLxtendMiner("eclat", 0.1, 0.1, 2, "lift")


def test_zero_support_reports_every_domain_value() -> None:
    schema = AttributeSchema({TIME_SLOT: ["Morning", "Afternoon", "Evening", "Night"], PRECINCT: [10]})
    itemsets, stats = AprioriMiner(0.0, 0.0, 1, "lift", schema=schema).mine_itemsets(
        [{TIME_SLOT: "Night", PRECINCT: 10}]
    )
    counts = {s["items"][0]["value"]: s["count"] for s in itemsets}
    assert counts == {"Afternoon": 0, "Evening": 0, "Morning": 0, "Night": 1, "10": 1}
    assert stats["num_itemsets"] == 5


def test_zero_support_rules_skip_unseen_sides() -> None:
    schema = AttributeSchema.incident_default(precincts=[10, 20])
    rules = mine_association_rules([{TIME_SLOT: "Night", PRECINCT: 10}], 0.0, 0.0, 2, "lift", schema=schema)
    assert [str(r) for r in rules] == ["PRECINCT=10 -> TIME_SLOT=Night", "TIME_SLOT=Night -> PRECINCT=10"]
