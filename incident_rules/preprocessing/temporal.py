# Time-of-day buckets for incidents: Morning, Afternoon, Evening, Night.

from datetime import datetime, time

import numpy as np
import pandas as pd
from typing import Dict, Any

from incident_rules.rule_mining.schema import TIME_SLOT, TIME_SLOT_DOMAIN

# [start, end) hour ranges; every other hour is Night
TIME_SLOT_BOUNDARIES = [
    (5, 12, 'Morning'),
    (12, 16, 'Afternoon'),
    (16, 21, 'Evening'),
]
NIGHT = 'Night'


def hour_to_time_slot(hour: int) -> str:
    """Bucket one hour of day (0-23)."""
    if isinstance(hour, bool) or not isinstance(hour, (int, float, np.integer, np.floating)) \
            or not float(hour).is_integer() or not 0 <= hour <= 23:
        raise ValueError(f"Hour must be an integer within [0, 23], got {hour!r}")
    for start, end, label in TIME_SLOT_BOUNDARIES:
        if start <= hour < end:
            return label
    return NIGHT


def extract_hour(series: pd.Series) -> pd.Series:
    """
    Hour of day from a datetime, timedelta (time since midnight) or numeric column.
    Object columns may also hold datetime.time or datetime values, as pd.read_excel
    returns for time cells.

    Returns a nullable integer series; unparseable entries are missing.
    """
    if pd.api.types.is_datetime64_any_dtype(series):
        hours = series.dt.hour
    elif pd.api.types.is_timedelta64_dtype(series):
        hours = series.dt.total_seconds() // 3600
    else:
        if series.dtype == object:
            series = series.map(lambda v: v.hour if isinstance(v, (time, datetime)) else v)
        hours = pd.to_numeric(series, errors='coerce')

    hours = hours.astype('float64')
    return hours.where(hours == np.floor(hours)).astype('Int64')


def assign_time_slots(hours: pd.Series) -> pd.Series:
    """
    Vectorised hour_to_time_slot.

    Missing, fractional or out-of-range hours map to a missing slot instead
    of raising, so one bad record does not abort the column.
    """
    values = pd.to_numeric(hours, errors='coerce').astype('float64')
    valid = values.between(0, 23) & (values == np.floor(values))

    conditions = [(values >= start) & (values < end) for start, end, _ in TIME_SLOT_BOUNDARIES]
    labels = [label for _, _, label in TIME_SLOT_BOUNDARIES]
    slots = np.select(conditions, labels, default=NIGHT).astype(object)
    slots[~valid.to_numpy()] = None

    return pd.Series(
        pd.Categorical(slots, categories=list(TIME_SLOT_DOMAIN)),
        index=hours.index,
        name=TIME_SLOT
    )


def combine_date_time(dates: pd.Series, times: pd.Series) -> pd.Series:
    """Incident timestamp from a date column and a time-since-midnight column."""
    return pd.to_datetime(dates, errors='coerce').dt.normalize() + pd.to_timedelta(times, errors='coerce')


class TimeSlotter:
    """
    Add a categorical time-slot column derived from an hour source column.

    The source may hold datetimes, times since midnight (timedelta) or
    integer hours. Optionally keeps the extracted hour as its own column.
    """

    def __init__(self, source_col: str, output_col: str = TIME_SLOT, hour_col: str = None):
        self.source_col = source_col
        self.output_col = output_col
        self.hour_col = hour_col

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        if self.source_col not in df.columns:
            raise ValueError(f"Unknown columns: ['{self.source_col}']")

        result = df.copy()
        hours = extract_hour(result[self.source_col])
        if self.hour_col:
            result[self.hour_col] = hours
        result[self.output_col] = assign_time_slots(hours).values
        return result

    def get_config(self) -> Dict[str, Any]:
        return {
            'source_col': self.source_col,
            'output_col': self.output_col,
            'hour_col': self.hour_col
        }


def add_time_slots(df: pd.DataFrame, source_col: str, output_col: str = TIME_SLOT) -> pd.DataFrame:
    return TimeSlotter(source_col, output_col).transform(df)
