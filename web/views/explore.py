import streamlit as st
import pandas as pd
import plotly.express as px
import sys
import os

_current_dir = os.path.dirname(os.path.abspath(__file__))
_project_root = os.path.dirname(os.path.dirname(_current_dir))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from views.utils import categorical_cols, column_index, require_data, show_error
from incident_rules.rule_mining.schema import TIME_SLOT, PRECINCT
from incident_rules.visualization.charts import (
    category_shares, proportion_chart, point_map, valid_coordinates, cramers_v
)


def render():
    st.header("📊 Explore Incidents")

    if not require_data():
        return

    df = st.session_state.current_data
    roles = st.session_state.get("column_roles", {})

    tab1, tab2, tab3 = st.tabs([
        "📊 Proportions",
        "🗺️ Map",
        "🔗 Association"
    ])

    with tab1:
        render_proportions(df)
    with tab2:
        render_map(df, roles)
    with tab3:
        render_association(df, roles)

    st.markdown("---")
    col1, col2 = st.columns(2)
    with col1:
        if st.button("⬅️ Back to Load"):
            st.session_state.current_page = "upload"
            st.rerun()
    with col2:
        if st.button("➡️ Continue to Analyze", type="primary"):
            st.session_state.current_page = "analyze"
            st.rerun()


def render_proportions(df):
    st.subheader("Share of Incidents")

    cols = categorical_cols(df)
    if not cols:
        st.warning("No categorical columns to chart.")
        return

    col = st.selectbox("Column", cols, index=column_index(cols, TIME_SLOT), key="prop_col")
    st.plotly_chart(proportion_chart(df, col), width="stretch")

    shares = category_shares(df, col)
    st.dataframe(shares.round({"percent": 2}), width="stretch", hide_index=True)
    st.caption(f"{int(df[col].isna().sum())} rows without a value are left out")


def render_map(df, roles):
    st.subheader("Incident Locations")

    lat_col, lon_col = roles.get("lat"), roles.get("lon")
    if not lat_col or not lon_col:
        st.info("Pick latitude and longitude columns on the Load page to see the map.")
        return

    usable = valid_coordinates(df, lat_col, lon_col)
    st.caption(f"{len(usable)} of {len(df)} incidents have usable coordinates")
    if usable.empty:
        st.warning("No incidents with coordinates.")
        return

    c1, c2 = st.columns(2)
    with c1:
        color_options = ["(none)"] + categorical_cols(df)
        color = st.selectbox("Colour by", color_options, index=column_index(color_options, TIME_SLOT))
    with c2:
        sample = None
        if len(usable) > 100:
            max_points = min(len(usable), 20000)
            sample = st.slider("Points to draw", 100, max_points, min(5000, max_points), 100,
                               help="A fixed-seed random sample keeps large maps responsive")

    try:
        fig = point_map(
            df, lat_col, lon_col,
            color=None if color == "(none)" else color,
            sample=sample
        )
        fig.update_layout(height=600)
        st.plotly_chart(fig, width="stretch")
    except Exception as e:
        show_error("drawing map", e)


def render_association(df, roles):
    st.subheader("Time Slot vs Location")

    with st.expander("ℹ️ What is Cramér's V?"):
        st.markdown("""
        **Cramér's V** measures the association between two categorical variables.

        - **0**: No association
        - **1**: Perfect association

        Values above **0.3** indicate moderate association, above **0.5** is strong.
        """)

    cols = categorical_cols(df)
    if len(cols) < 2:
        st.warning("Need at least 2 categorical columns for this analysis.")
        return

    c1, c2 = st.columns(2)
    with c1:
        x_col = st.selectbox("First column", cols, index=column_index(cols, TIME_SLOT), key="assoc_x")
    with c2:
        default_y = roles.get("precinct") or PRECINCT
        y_col = st.selectbox("Second column", cols, index=column_index(cols, default_y), key="assoc_y")

    if x_col == y_col:
        st.info("Select two different columns.")
        return

    pair = df[[x_col, y_col]].dropna().astype(str)
    value = cramers_v(pair[x_col], pair[y_col])
    st.metric("Cramér's V", f"{value:.3f}")

    ct = pd.crosstab(pair[y_col], pair[x_col], normalize='index') * 100
    fig = px.imshow(
        ct,
        text_auto=".1f",
        title=f"{y_col} vs {x_col} (row percentages)",
        labels=dict(color="% of row"),
        aspect="auto"
    )
    fig.update_layout(height=max(400, 18 * len(ct)))
    st.plotly_chart(fig, width="stretch")
    st.caption("Each row shows how that category's incidents split across the other column")
