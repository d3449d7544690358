import streamlit as st
import pandas as pd
import sys
import os

_current_dir = os.path.dirname(os.path.abspath(__file__))
_project_root = os.path.dirname(os.path.dirname(_current_dir))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from incident_rules.rule_mining.schema import TIME_SLOT, PRECINCT

# Column roles the report needs, with the NYPD column names as defaults
ROLE_DEFAULTS = {
    "time": ["OCCUR_TIME", "TIME", "HOUR"],
    "date": ["OCCUR_DATE", "DATE"],
    "precinct": [PRECINCT, "PCT"],
    "lat": ["Latitude", "LATITUDE", "lat"],
    "lon": ["Longitude", "LONGITUDE", "lon"],
}


def guess_column(df, role):
    """First column whose name matches a default for this role, else None."""
    lowered = {c.lower(): c for c in df.columns}
    for candidate in ROLE_DEFAULTS.get(role, []):
        if candidate.lower() in lowered:
            return lowered[candidate.lower()]
    return None


def column_index(options, value):
    """Index of value in options for st.selectbox, 0 if absent."""
    return options.index(value) if value in options else 0


def categorical_cols(df, max_unique=200):
    """Columns usable as rule attributes: text/categorical, or numeric with few distinct values."""
    cols = []
    for col in df.columns:
        series = df[col]
        if pd.api.types.is_datetime64_any_dtype(series) or pd.api.types.is_timedelta64_dtype(series):
            continue
        if pd.api.types.is_float_dtype(series) and series.nunique() > max_unique:
            continue
        if series.nunique() <= max_unique:
            cols.append(col)
    return cols


def default_attributes(df):
    return [c for c in [TIME_SLOT, PRECINCT] if c in df.columns]


def require_data(message="Please upload data first."):
    """Show a warning and a way back to upload when no data is loaded. Returns True if data exists."""
    if st.session_state.current_data is not None:
        return True
    st.warning(message)
    if st.button("Go to Upload"):
        st.session_state.current_page = "upload"
        st.rerun()
    return False


def show_error(action, error):
    import traceback
    st.error(f"Error {action}: {str(error)}")
    with st.expander("Error details"):
        st.code(traceback.format_exc())
