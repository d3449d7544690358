"""Attribute schema and transaction encoding tests."""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from incident_rules.rule_mining.encoding import TransactionEncoder, encode_transactions
from incident_rules.rule_mining.models import Item
from incident_rules.rule_mining.schema import (
    AttributeSchema, SchemaError, normalize_value, TIME_SLOT, PRECINCT, TIME_SLOT_DOMAIN
)

# ---------------------------------------------------------------------------
# normalize_value
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "raw, expected",
    [
        (10, "10"),
        (10.0, "10"),
        (np.int64(75), "75"),
        (np.float64(75.0), "75"),
        (10.5, "10.5"),
        ("  Night ", "Night"),
        ("10.0", "10"),
        (" 75. ", "75"),
        ("007", "007"),
        ("10.5", "10.5"),
        (True, "True"),
        (np.bool_(False), "False"),
        (None, None),
        (np.nan, None),
        (pd.NA, None),
        ("", None),
        ("   ", None),
    ],
)
def test_normalize_value(raw, expected) -> None:
    assert normalize_value(raw) == expected


# ---------------------------------------------------------------------------
# AttributeSchema
# ---------------------------------------------------------------------------


def test_incident_default_schema() -> None:
    schema = AttributeSchema.incident_default()
    assert schema.attributes == [TIME_SLOT, PRECINCT]
    assert schema.domain(TIME_SLOT) == frozenset(TIME_SLOT_DOMAIN)
    assert schema.domain(PRECINCT) is None


def test_validate_rejects_value_outside_domain() -> None:
    schema = AttributeSchema.incident_default(precincts=[10, 75])
    assert schema.validate(PRECINCT, 10.0) == "10"
    with pytest.raises(SchemaError):
        schema.validate(PRECINCT, 11)
    with pytest.raises(SchemaError):
        schema.validate(TIME_SLOT, "Dawn")


def test_validate_unknown_attribute() -> None:
    with pytest.raises(SchemaError):
        AttributeSchema.incident_default().validate("BORO", "BRONX")


def test_validate_missing_value_is_none() -> None:
    assert AttributeSchema.incident_default().validate(TIME_SLOT, None) is None


def test_from_frame_collects_observed_values(incident_frame) -> None:
    schema = AttributeSchema.from_frame(incident_frame)
    assert schema.domain(PRECINCT) == frozenset({"14", "40", "75"})
    assert schema.domain(TIME_SLOT) == frozenset(TIME_SLOT_DOMAIN)


def test_from_frame_unknown_column(incident_frame) -> None:
    with pytest.raises(SchemaError):
        AttributeSchema.from_frame(incident_frame, ["BORO"])


def test_empty_schema_and_domain_rejected() -> None:
    with pytest.raises(SchemaError):
        AttributeSchema({})
    with pytest.raises(SchemaError):
        AttributeSchema({PRECINCT: []})


def test_schema_equality_and_contains() -> None:
    assert AttributeSchema({PRECINCT: [10, "10"]}) == AttributeSchema({PRECINCT: ["10"]})
    assert PRECINCT in AttributeSchema.incident_default()
    assert "BORO" not in AttributeSchema.incident_default()


# ---------------------------------------------------------------------------
# TransactionEncoder
# ---------------------------------------------------------------------------


def test_encode_frame(incident_frame) -> None:
    transactions = TransactionEncoder(AttributeSchema.incident_default()).encode(incident_frame)
    assert len(transactions) == len(incident_frame)
    assert transactions[0] == frozenset({Item(TIME_SLOT, "Night"), Item(PRECINCT, "75")})
    assert all(isinstance(t, frozenset) for t in transactions)


def test_encode_ignores_extra_columns(incident_frame) -> None:
    frame = incident_frame.assign(BORO="BRONX")
    transactions = encode_transactions(frame, AttributeSchema.incident_default())
    assert all(item.attribute != "BORO" for t in transactions for item in t)


def test_encode_without_schema_uses_every_column() -> None:
    rows = [{"A": "x", "B": 1}, {"A": "y", "C": 2.0}]
    transactions = encode_transactions(rows)
    assert transactions[0] == frozenset({Item("A", "x"), Item("B", "1")})
    assert transactions[1] == frozenset({Item("A", "y"), Item("C", "2")})


def test_missing_value_omits_item() -> None:
    frame = pd.DataFrame({TIME_SLOT: [None, "Night"], PRECINCT: [10, np.nan]})
    transactions = encode_transactions(frame, AttributeSchema.incident_default())
    assert transactions == [
        frozenset({Item(PRECINCT, "10")}),
        frozenset({Item(TIME_SLOT, "Night")}),
    ]


def test_encode_rejects_value_outside_domain() -> None:
    frame = pd.DataFrame({TIME_SLOT: ["Night", "Dusk"], PRECINCT: [10, 10]})
    with pytest.raises(SchemaError):
        encode_transactions(frame, AttributeSchema.incident_default())


def test_encode_rejects_frame_without_schema_attribute() -> None:
    frame = pd.DataFrame({TIME_SLOT: ["Night"]})
    with pytest.raises(SchemaError):
        encode_transactions(frame, AttributeSchema.incident_default())


def test_encode_empty_input() -> None:
    assert encode_transactions([]) == []
    assert encode_transactions(pd.DataFrame(columns=[TIME_SLOT, PRECINCT])) == []


def test_text_and_numeric_precinct_encode_alike() -> None:
    transactions = TransactionEncoder().encode([{PRECINCT: "10.0"}, {PRECINCT: 10}, {PRECINCT: 10.0}])
    assert transactions[0] == transactions[1] == transactions[2] == frozenset({Item(PRECINCT, "10")})
