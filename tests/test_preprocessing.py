"""Cleaning, type coercion, time slot and pipeline tests."""

from __future__ import annotations

import json
from datetime import datetime, time

import numpy as np
import pandas as pd
import pytest

from incident_rules.preprocessing import (
    PreprocessingPipeline, run_preprocessing,
    prune_columns, clean_strings, coerce_types,
    hour_to_time_slot, assign_time_slots, extract_hour, add_time_slots, combine_date_time
)
from incident_rules.rule_mining.schema import TIME_SLOT, TIME_SLOT_DOMAIN

# ---------------------------------------------------------------------------
# Column pruning
# ---------------------------------------------------------------------------


def test_prune_keep(raw_incidents) -> None:
    result = prune_columns(raw_incidents, keep=["OCCUR_TIME", "PRECINCT"])
    assert result.columns.tolist() == ["OCCUR_TIME", "PRECINCT"]


def test_prune_drop(raw_incidents) -> None:
    result = prune_columns(raw_incidents, drop=["INCIDENT_KEY"])
    assert "INCIDENT_KEY" not in result.columns
    assert len(result.columns) == len(raw_incidents.columns) - 1


def test_prune_unknown_column(raw_incidents) -> None:
    with pytest.raises(ValueError, match="Unknown columns"):
        prune_columns(raw_incidents, keep=["NOPE"])


def test_prune_needs_exactly_one_list() -> None:
    with pytest.raises(ValueError):
        prune_columns(pd.DataFrame({"a": [1]}), keep=["a"], drop=["a"])
    with pytest.raises(ValueError):
        prune_columns(pd.DataFrame({"a": [1]}))


# ---------------------------------------------------------------------------
# String cleanup
# ---------------------------------------------------------------------------


def test_clean_strings_strips_and_masks_placeholders(raw_incidents) -> None:
    result = clean_strings(raw_incidents, columns=["BORO", "LOC_OF_OCCUR_DESC"])
    assert result["BORO"].tolist()[:3] == ["BRONX", "BROOKLYN", "QUEENS"]
    assert pd.isna(result.loc[3, "BORO"])
    assert pd.isna(result.loc[1, "LOC_OF_OCCUR_DESC"])
    assert pd.isna(result.loc[3, "LOC_OF_OCCUR_DESC"])


def test_clean_strings_collapses_whitespace_and_uppercases() -> None:
    df = pd.DataFrame({"desc": ["  multi   dwell  apt ", "street"]})
    result = clean_strings(df, upper=True)
    assert result["desc"].tolist() == ["MULTI DWELL APT", "STREET"]


def test_clean_strings_leaves_numeric_columns(raw_incidents) -> None:
    result = clean_strings(raw_incidents)
    assert pd.api.types.is_integer_dtype(result["PRECINCT"])


def test_clean_strings_does_not_modify_input(raw_incidents) -> None:
    before = raw_incidents.copy()
    clean_strings(raw_incidents)
    pd.testing.assert_frame_equal(raw_incidents, before)


# ---------------------------------------------------------------------------
# Type coercion
# ---------------------------------------------------------------------------


def test_coerce_date(raw_incidents) -> None:
    result = coerce_types(raw_incidents, {"OCCUR_DATE": "date"}, date_format="%m/%d/%Y")
    assert pd.api.types.is_datetime64_any_dtype(result["OCCUR_DATE"])
    assert result.loc[0, "OCCUR_DATE"] == pd.Timestamp("2022-01-05")
    assert pd.isna(result.loc[3, "OCCUR_DATE"])


def test_coerce_time(raw_incidents) -> None:
    result = coerce_types(raw_incidents, {"OCCUR_TIME": "time"})
    assert pd.api.types.is_timedelta64_dtype(result["OCCUR_TIME"])
    assert result.loc[0, "OCCUR_TIME"] == pd.Timedelta(hours=23, minutes=15)
    assert result.loc[3, "OCCUR_TIME"] == pd.Timedelta(hours=12, minutes=30)
    assert pd.isna(result.loc[5, "OCCUR_TIME"])


def test_coerce_boolean(raw_incidents) -> None:
    result = coerce_types(raw_incidents, {"STATISTICAL_MURDER_FLAG": "boolean"})
    values = result["STATISTICAL_MURDER_FLAG"].tolist()
    assert values[:5] == [False, True, False, True, False]
    assert pd.isna(values[5])


def test_coerce_numeric_and_category(raw_incidents) -> None:
    df = raw_incidents.assign(PRECINCT=raw_incidents["PRECINCT"].astype(str).replace("14", "n/a"))
    result = coerce_types(df, {"PRECINCT": "numeric", "BORO": "category"})
    assert result["PRECINCT"].tolist()[:5] == [40, 75, 105, 75, 40]
    assert pd.isna(result.loc[5, "PRECINCT"])
    assert isinstance(result["BORO"].dtype, pd.CategoricalDtype)


def test_coerce_unknown_type() -> None:
    with pytest.raises(ValueError):
        coerce_types(pd.DataFrame({"a": [1]}), {"a": "geo"})


# ---------------------------------------------------------------------------
# Time slots
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "hour, slot",
    [
        (0, "Night"), (4, "Night"), (5, "Morning"), (11, "Morning"),
        (12, "Afternoon"), (15, "Afternoon"), (16, "Evening"), (20, "Evening"),
        (21, "Night"), (23, "Night"), (7.0, "Morning"), (np.int64(13), "Afternoon"),
    ],
)
def test_hour_to_time_slot(hour, slot) -> None:
    assert hour_to_time_slot(hour) == slot


@pytest.mark.parametrize("hour", [-1, 24, 7.5, "7", None, True])
def test_hour_to_time_slot_rejects_invalid(hour) -> None:
    with pytest.raises(ValueError):
        hour_to_time_slot(hour)


def test_assign_time_slots_maps_invalid_to_missing() -> None:
    hours = pd.Series([0, 5, 12, 16, 21, 24, -3, None, 7.5])
    slots = assign_time_slots(hours)
    assert slots.tolist()[:5] == ["Night", "Morning", "Afternoon", "Evening", "Night"]
    assert slots.iloc[5:].isna().all()
    assert list(slots.cat.categories) == list(TIME_SLOT_DOMAIN)
    assert slots.name == TIME_SLOT


def test_assign_time_slots_agrees_with_scalar_version() -> None:
    slots = assign_time_slots(pd.Series(range(24)))
    assert slots.tolist() == [hour_to_time_slot(h) for h in range(24)]


def test_extract_hour_from_each_source_type() -> None:
    timedeltas = pd.to_timedelta(pd.Series(["04:59:59", "05:00:00", None]))
    assert extract_hour(timedeltas).tolist()[:2] == [4, 5]
    assert pd.isna(extract_hour(timedeltas).iloc[2])

    datetimes = pd.Series(pd.to_datetime(["2022-01-01 23:10", "2022-01-02 00:05"]))
    assert extract_hour(datetimes).tolist() == [23, 0]

    numbers = pd.Series(["7", "x", "7.5"])
    hours = extract_hour(numbers)
    assert hours.iloc[0] == 7
    assert pd.isna(hours.iloc[1])
    assert pd.isna(hours.iloc[2])


def test_extract_hour_from_time_objects() -> None:
    # pd.read_excel yields datetime.time objects for time-of-day cells
    times = pd.Series([time(23, 15), time(6, 0), None, datetime(2022, 1, 1, 13, 5)])
    hours = extract_hour(times)
    assert hours.iloc[[0, 1, 3]].tolist() == [23, 6, 13]
    assert pd.isna(hours.iloc[2])


def test_add_time_slots_on_time_objects() -> None:
    df = pd.DataFrame({"OCCUR_TIME": [time(23, 15), time(9, 30), time(17, 0)]})
    assert add_time_slots(df, "OCCUR_TIME")[TIME_SLOT].tolist() == ["Night", "Morning", "Evening"]


def test_add_time_slots(raw_incidents) -> None:
    typed = coerce_types(raw_incidents, {"OCCUR_TIME": "time"})
    result = add_time_slots(typed, "OCCUR_TIME")
    assert result[TIME_SLOT].tolist()[:5] == ["Night", "Night", "Morning", "Afternoon", "Evening"]
    assert pd.isna(result[TIME_SLOT].iloc[5])
    assert TIME_SLOT not in typed.columns


def test_add_time_slots_unknown_column(raw_incidents) -> None:
    with pytest.raises(ValueError):
        add_time_slots(raw_incidents, "HOUR")


def test_combine_date_time() -> None:
    stamps = combine_date_time(pd.Series(["2022-03-15"]), pd.Series(["05:30:00"]))
    assert stamps.iloc[0] == pd.Timestamp("2022-03-15 05:30:00")


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


def _incident_pipeline() -> PreprocessingPipeline:
    return (PreprocessingPipeline(name="test")
            .add_pruning(keep=["OCCUR_DATE", "OCCUR_TIME", "BORO", "PRECINCT", "Latitude", "Longitude"])
            .add_string_cleanup()
            .add_type_coercion({"OCCUR_DATE": "date", "OCCUR_TIME": "time", "BORO": "category"},
                               date_format="%m/%d/%Y")
            .add_time_slots(source_col="OCCUR_TIME", hour_col="HOUR"))


def test_pipeline_runs_steps_in_order(raw_incidents) -> None:
    result = _incident_pipeline().fit_transform(raw_incidents)

    assert result.columns.tolist() == [
        "OCCUR_DATE", "OCCUR_TIME", "BORO", "PRECINCT", "Latitude", "Longitude", "HOUR", TIME_SLOT
    ]
    assert result["HOUR"].tolist()[:5] == [23, 4, 5, 12, 16]
    assert result[TIME_SLOT].tolist()[:5] == ["Night", "Night", "Morning", "Afternoon", "Evening"]
    assert pd.isna(result.loc[3, "BORO"])


def test_pipeline_leaves_input_untouched(raw_incidents) -> None:
    before = raw_incidents.copy()
    _incident_pipeline().fit_transform(raw_incidents)
    pd.testing.assert_frame_equal(raw_incidents, before)


def test_pipeline_config_and_filename() -> None:
    pipeline = _incident_pipeline()
    config = pipeline.get_config()
    assert config["name"] == "test"
    assert config["steps"] == ["pruning", "string_cleanup", "type_coercion", "time_slots"]
    assert config["configs"]["time_slots"]["source_col"] == "OCCUR_TIME"
    assert pipeline.get_output_filename("nypd") == "nypd_keep6_clean_typed3_slots_OCCUR_TIME"


def test_run_preprocessing_writes_csv_and_config(raw_incidents, tmp_path) -> None:
    result = run_preprocessing(
        raw_incidents,
        output_dir=str(tmp_path),
        dataset_name="nypd",
        type_coercion={"types": {"OCCUR_TIME": "time"}},
        time_slots={"source_col": "OCCUR_TIME"}
    )
    assert TIME_SLOT in result.columns

    csv_path = tmp_path / "nypd_typed1_slots_OCCUR_TIME.csv"
    config_path = tmp_path / "nypd_typed1_slots_OCCUR_TIME_config.json"
    assert csv_path.exists()
    assert json.loads(config_path.read_text())["steps"] == ["type_coercion", "time_slots"]
