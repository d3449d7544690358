import streamlit as st
import sys
import os

_current_dir = os.path.dirname(os.path.abspath(__file__))
_project_root = os.path.dirname(os.path.dirname(_current_dir))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from views.utils import categorical_cols, default_attributes, require_data, show_error
from incident_rules.experiments.base import build_schema
from incident_rules.rule_mining.apriori_miner import AprioriMiner
from incident_rules.rule_mining.base import RANKING_METRICS
from incident_rules.rule_mining.mlxtend_miner import MLxtendMiner

METHODS = {
    "Apriori": "Level-wise Apriori with exact support counts. Reference implementation of this tool.",
    "FP-Growth (mlxtend)": "mlxtend's FP-Growth. Produces the same rules; useful as a cross-check.",
}

PRESETS = {
    "strict": {
        "name": "Strict",
        "description": "Only common, reliable patterns. Few rules.",
        "params": {"min_support": 0.02, "min_confidence": 0.3, "max_len": 2, "metric": "lift"}
    },
    "balanced": {
        "name": "Balanced",
        "description": "Per-precinct patterns with a low support floor. Recommended starting point.",
        "params": {"min_support": 0.005, "min_confidence": 0.1, "max_len": 2, "metric": "lift"}
    },
    "exploratory": {
        "name": "Exploratory",
        "description": "Rare patterns included. Many rules, some from very few incidents.",
        "params": {"min_support": 0.001, "min_confidence": 0.05, "max_len": 3, "metric": "lift"}
    }
}


def _select_preset(key):
    preset = PRESETS[key]
    st.session_state.arm_preset = key
    st.session_state.arm_min_support = preset["params"]["min_support"]
    st.session_state.arm_min_confidence = preset["params"]["min_confidence"]
    st.session_state.arm_max_len = preset["params"]["max_len"]
    st.session_state.arm_metric = preset["params"]["metric"]


def render():
    st.header("🔍 Mine Association Rules")

    if not require_data():
        return

    df = st.session_state.current_data

    method = st.radio("Choose analysis method", list(METHODS), horizontal=True)
    st.caption(METHODS[method])

    st.markdown("---")

    if "arm_preset" not in st.session_state:
        _select_preset("balanced")

    st.markdown("**Select a preset:**")
    cols = st.columns(len(PRESETS))
    for i, (key, preset) in enumerate(PRESETS.items()):
        with cols[i]:
            st.button(
                preset["name"],
                key=f"arm_{key}",
                width="stretch",
                type="primary" if st.session_state.arm_preset == key else "secondary",
                on_click=_select_preset,
                args=(key,)
            )
    st.info(f"**{PRESETS[st.session_state.arm_preset]['name']}:** "
            f"{PRESETS[st.session_state.arm_preset]['description']}")

    st.markdown("### Attributes")
    attribute_options = categorical_cols(df)
    attributes = st.multiselect(
        "Columns to mine",
        attribute_options,
        default=[c for c in default_attributes(df) if c in attribute_options],
        help="Each selected column becomes one attribute; its values become items"
    )

    with st.expander("⚙️ Thresholds", expanded=True):
        c1, c2, c3, c4 = st.columns(4)
        with c1:
            min_support = st.number_input(
                "Minimum Support", 0.0, 1.0, step=0.001, format="%.3f", key="arm_min_support",
                help="Fraction of incidents an itemset must appear in (inclusive)"
            )
        with c2:
            min_confidence = st.number_input(
                "Minimum Confidence", 0.0, 1.0, step=0.05, format="%.2f", key="arm_min_confidence",
                help="How often the THEN part holds when the IF part does (inclusive)"
            )
        with c3:
            max_len = st.number_input("Max Items per Pattern", 1, 10, step=1, key="arm_max_len")
        with c4:
            metric = st.selectbox("Rank by", list(RANKING_METRICS), key="arm_metric")

    params = {
        "min_support": float(min_support),
        "min_confidence": float(min_confidence),
        "max_len": int(max_len),
        "metric": metric,
        "attributes": attributes
    }

    st.markdown("---")

    if st.button(f"🚀 Run {method}", type="primary", width="stretch"):
        if not attributes:
            st.error("Select at least one column to mine.")
        else:
            run_mining(df, method, params)

    if st.session_state.get("last_analysis_result", {}).get("success"):
        result = st.session_state.last_analysis_result
        st.success(f"✓ Analysis complete! Found **{result['num_rules']}** rules using {result['method']}.")
        if st.button("➡️ View Results", type="primary", width="stretch", key="view_results_btn"):
            st.session_state.last_analysis_result = None
            st.session_state.current_page = "results"
            st.rerun()

    st.markdown("---")
    if st.button("⬅️ Back to Explore"):
        st.session_state.last_analysis_result = None
        st.session_state.current_page = "explore"
        st.rerun()


def run_mining(df, method, params):
    progress = st.progress(0, "Initializing...")
    status_placeholder = st.empty()

    try:
        status_placeholder.info("⏳ Building attribute schema...")
        progress.progress(10, "Building attribute schema...")

        attributes = params["attributes"]
        schema = build_schema(df, attributes)

        if method == "Apriori":
            miner = AprioriMiner(
                min_support=params["min_support"],
                min_confidence=params["min_confidence"],
                max_len=params["max_len"],
                metric=params["metric"],
                schema=schema
            )
        else:
            miner = MLxtendMiner(
                algorithm="fpgrowth",
                min_support=params["min_support"],
                min_confidence=params["min_confidence"],
                max_len=params["max_len"],
                metric=params["metric"],
                schema=schema
            )

        status_placeholder.info("⏳ Mining frequent itemsets and rules...")
        progress.progress(30, "Mining frequent itemsets and rules...")

        rules, stats = miner.mine_rules(df[attributes])

        progress.progress(100, "Done!")
        status_placeholder.empty()

        if not rules:
            st.warning("No rules found. Try lowering the minimum support or confidence.")
            return

        st.session_state.mining_results = {
            "rules": rules,
            "stats": stats,
            "method": method,
            "params": params
        }
        st.session_state.last_analysis_result = {
            "success": True,
            "method": method,
            "num_rules": len(rules)
        }

    except Exception as e:
        status_placeholder.empty()
        show_error("running analysis", e)
