"""pytest configuration and shared fixtures."""

from __future__ import annotations

import pandas as pd
import pytest

from incident_rules.rule_mining.models import Item
from incident_rules.rule_mining.schema import TIME_SLOT, PRECINCT

NIGHT_10 = frozenset({Item(TIME_SLOT, "Night"), Item(PRECINCT, "10")})
MORNING_10 = frozenset({Item(TIME_SLOT, "Morning"), Item(PRECINCT, "10")})


@pytest.fixture
def night_heavy_transactions():
    """Eight night incidents and two morning incidents, all in precinct 10."""
    return [NIGHT_10] * 8 + [MORNING_10] * 2


@pytest.fixture
def incident_frame():
    """Already-prepared incidents: one row per incident, TIME_SLOT and PRECINCT only."""
    rows = (
        [("Night", 75)] * 6
        + [("Evening", 75)] * 2
        + [("Morning", 14)] * 4
        + [("Afternoon", 14)] * 3
        + [("Night", 14)] * 1
        + [("Night", 40)] * 3
        + [("Evening", 40)] * 1
    )
    return pd.DataFrame(rows, columns=[TIME_SLOT, PRECINCT])


@pytest.fixture
def raw_incidents():
    """A handful of rows shaped like the NYPD shooting incident CSV."""
    return pd.DataFrame({
        "INCIDENT_KEY": [1, 2, 3, 4, 5, 6],
        "OCCUR_DATE": ["01/05/2022", "02/11/2022", "03/15/2022", "bad date", "07/04/2022", "12/31/2022"],
        "OCCUR_TIME": ["23:15:00", "04:59:59", "05:00:00", "12:30", "16:00:00", None],
        "BORO": ["BRONX", " BROOKLYN ", "QUEENS", "(null)", "BRONX", "MANHATTAN"],
        "PRECINCT": [40, 75, 105, 75, 40, 14],
        "STATISTICAL_MURDER_FLAG": ["false", "true", "N", "Y", "FALSE", "maybe"],
        "Latitude": [40.81, 40.66, 40.70, None, 40.82, 0.0],
        "Longitude": [-73.92, -73.88, -73.74, -73.90, -73.91, 0.0],
        "LOC_OF_OCCUR_DESC": ["OUTSIDE", "", "INSIDE", "UNKNOWN", "OUTSIDE", "OUTSIDE"],
    })
