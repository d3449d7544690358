import streamlit as st
import pandas as pd
import csv
import sys
import os

_current_dir = os.path.dirname(os.path.abspath(__file__))
_project_root = os.path.dirname(os.path.dirname(_current_dir))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from views.utils import guess_column, column_index, show_error
from incident_rules.experiments.config import NYPD_SHOOTINGS_URL
from incident_rules.preprocessing.pipeline import PreprocessingPipeline
from incident_rules.rule_mining.schema import TIME_SLOT

NONE_OPTION = "(none)"


def detect_delimiter(file_content):
    """Auto-detect CSV delimiter using csv.Sniffer"""
    try:
        sample = file_content[:8192]
        dialect = csv.Sniffer().sniff(sample, delimiters=',;\t|')
        return dialect.delimiter
    except csv.Error:
        return ','


def _store_raw(df, name):
    st.session_state.data = df
    st.session_state.current_data = df.copy()
    st.session_state.filename = name
    st.session_state.processing_history = []
    st.session_state.mining_results = None


def render_source():
    source = st.radio("Data source", ["Upload a file", "Download from URL"], horizontal=True)

    if source == "Upload a file":
        uploaded_file = st.file_uploader(
            "Choose a file",
            type=["csv", "xlsx", "xls"],
            help="Upload a tabular dataset with column headers in the first row."
        )
        if uploaded_file is None:
            return

        is_csv = uploaded_file.name.lower().endswith(".csv")
        delimiter = ','
        if is_csv:
            file_content = uploaded_file.read().decode('utf-8', errors='replace')
            uploaded_file.seek(0)
            delimiter = detect_delimiter(file_content)
            delimiter_names = {',': 'Comma (,)', ';': 'Semicolon (;)', '\t': 'Tab', '|': 'Pipe (|)'}
            st.success(f"Detected delimiter: **{delimiter_names.get(delimiter, delimiter)}**")

        if st.button("📥 Load File", type="primary"):
            try:
                with st.spinner("Loading file..."):
                    uploaded_file.seek(0)
                    if is_csv:
                        df = pd.read_csv(uploaded_file, delimiter=delimiter, on_bad_lines="skip", engine="python")
                    else:
                        df = pd.read_excel(uploaded_file)
                _store_raw(df, uploaded_file.name)
                st.rerun()
            except Exception as e:
                show_error("loading file", e)
    else:
        url = st.text_input("CSV URL", value=NYPD_SHOOTINGS_URL)
        if st.button("📥 Download", type="primary"):
            try:
                with st.spinner("Downloading..."):
                    df = pd.read_csv(url)
                _store_raw(df, url.rsplit('/', 1)[-1].split('?')[0] or url)
                st.rerun()
            except Exception as e:
                show_error("downloading data", e)


def render_prepare(df):
    st.subheader("Prepare Incidents")
    st.caption("Clean text columns, type the time, location and coordinate columns, "
               f"and derive the {TIME_SLOT} column from the time of day.")

    options = [NONE_OPTION] + df.columns.tolist()
    c1, c2, c3 = st.columns(3)
    with c1:
        time_col = st.selectbox("Time of day column", df.columns.tolist(),
                                index=column_index(df.columns.tolist(), guess_column(df, "time")))
        date_col = st.selectbox("Date column", options, index=column_index(options, guess_column(df, "date")))
    with c2:
        precinct_col = st.selectbox("Location (precinct) column", options,
                                    index=column_index(options, guess_column(df, "precinct")))
        time_format = st.radio("Time column holds", ["Clock time (HH:MM[:SS])", "Hour (0-23)"])
    with c3:
        lat_col = st.selectbox("Latitude column", options, index=column_index(options, guess_column(df, "lat")))
        lon_col = st.selectbox("Longitude column", options, index=column_index(options, guess_column(df, "lon")))

    if st.button("⚙️ Prepare Data", type="primary"):
        try:
            types = {time_col: 'time' if time_format.startswith("Clock") else 'numeric'}
            if date_col != NONE_OPTION:
                types[date_col] = 'date'
            for col in (lat_col, lon_col):
                if col != NONE_OPTION:
                    types[col] = 'numeric'

            pipeline = (PreprocessingPipeline(name="web")
                        .add_string_cleanup()
                        .add_type_coercion(types)
                        .add_time_slots(source_col=time_col, hour_col="HOUR"))
            prepared = pipeline.fit_transform(st.session_state.data)

            st.session_state.current_data = prepared
            st.session_state.column_roles = {
                "time": time_col,
                "date": None if date_col == NONE_OPTION else date_col,
                "precinct": None if precinct_col == NONE_OPTION else precinct_col,
                "lat": None if lat_col == NONE_OPTION else lat_col,
                "lon": None if lon_col == NONE_OPTION else lon_col,
            }
            st.session_state.processing_history = pipeline.get_config()["steps"]
            st.session_state.mining_results = None

            missing = int(prepared[TIME_SLOT].isna().sum())
            st.success(f"✓ Prepared {len(prepared)} incidents. {missing} without a usable time.")
        except Exception as e:
            show_error("preparing data", e)


def render():
    st.header("📁 Load Data")

    st.markdown("""
    Load incident records from a file or a URL. Supported formats: **CSV**, **Excel** (.xlsx, .xls).
    The default URL is the NYPD Shooting Incident Data (Historic).
    """)

    render_source()

    if st.session_state.data is None:
        return

    df = st.session_state.data
    st.success(f"✓ Loaded **{st.session_state.filename}**: {len(df)} rows × {len(df.columns)} columns")

    st.markdown("---")
    st.subheader("Data Preview")
    n_rows = st.selectbox("Rows to display", [10, 25, 50, 100], index=1)
    st.dataframe(st.session_state.current_data.head(n_rows), width="stretch")

    col_info = [{
        "Column": col,
        "Type": str(df[col].dtype),
        "Missing": f"{df[col].isna().sum()} ({df[col].isna().mean() * 100:.1f}%)",
        "Unique Values": df[col].nunique(),
    } for col in df.columns]
    with st.expander("Column Information"):
        st.dataframe(pd.DataFrame(col_info), width="stretch", hide_index=True)

    st.markdown("---")
    render_prepare(df)

    if TIME_SLOT in st.session_state.current_data.columns:
        st.markdown("---")
        if st.button("➡️ Continue to Explore", type="primary", width="stretch"):
            st.session_state.current_page = "explore"
            st.rerun()
