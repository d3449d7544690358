import streamlit as st
import pandas as pd
import numpy as np
import io
import sys
import os

_current_dir = os.path.dirname(os.path.abspath(__file__))
_project_root = os.path.dirname(os.path.dirname(_current_dir))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from incident_rules.postprocessing.rule import filter_rules, filter_rules_by_pattern
from incident_rules.rule_mining.ranking import rank_rules
from incident_rules.rule_mining.models import AssociationRule, Item
from incident_rules.utils.excel_io import format_rule_for_excel, save_rule_mining_results

METRIC_INFO = {
    "support": {
        "name": "Support",
        "description": "The fraction of incidents where the whole pattern (IF and THEN) appears.",
        "interpretation": "A support of 0.10 means the pattern appears in 10% of all incidents.",
        "good_value": "> 1% (0.01) is usually meaningful",
    },
    "confidence": {
        "name": "Confidence",
        "description": "When the IF conditions are true, how often is the THEN outcome also true?",
        "interpretation": "A confidence of 0.85 means the rule holds for 85% of incidents matching the IF part.",
        "good_value": "> 70% (0.70) is usually considered reliable",
    },
    "lift": {
        "name": "Lift",
        "description": "How much more likely is the outcome when conditions are met, compared to random chance?",
        "interpretation": "Lift of 2.0 means the outcome is twice as likely when the conditions are met. Lift of 1.0 means no effect.",
        "good_value": "> 1.5 indicates meaningful increase in likelihood",
    },
    "count": {
        "name": "Count",
        "description": "Number of incidents matching the whole pattern.",
        "interpretation": "Small counts make every other metric noisy.",
        "good_value": "Depends on dataset size",
    },
}


def render():
    st.header("📋 Analysis Results")

    if st.session_state.mining_results is None:
        st.warning("No results yet. Run an analysis first.")
        if st.button("Go to Analyze", type="primary"):
            st.session_state.current_page = "analyze"
            st.rerun()
        return

    results = st.session_state.mining_results
    rules = results.get("rules", [])
    method = results.get("method", "Unknown")

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Total Rules Found", len(rules))
    with col2:
        st.metric("Method Used", method)
    with col3:
        if rules:
            st.metric("Average Lift", f"{np.mean([r['lift'] for r in rules]):.2f}")

    st.markdown("---")

    tab1, tab2, tab3 = st.tabs(["📋 Rules Table", "📊 Summary Statistics", "💾 Export"])

    with tab1:
        render_rules_table(rules)
    with tab2:
        render_summary(rules, results.get("stats", {}))
    with tab3:
        render_export(rules, results)

    st.markdown("---")
    col1, col2 = st.columns(2)
    with col1:
        if st.button("⬅️ Back to Analyze"):
            st.session_state.current_page = "analyze"
            st.rerun()
    with col2:
        if st.button("🔄 Run New Analysis"):
            st.session_state.mining_results = None
            st.session_state.current_page = "analyze"
            st.rerun()


def _to_rule(record):
    """Rebuild an AssociationRule from its dictionary form so it can be re-ranked."""
    return AssociationRule(
        antecedent=tuple(Item(i['feature'], i['value']) for i in record['antecedent']),
        consequent=tuple(Item(i['feature'], i['value']) for i in record['consequent']),
        support=record['support'],
        confidence=record['confidence'],
        lift=record['lift'],
        count=record['count']
    )


def render_rules_table(rules):
    if not rules:
        st.info("No rules found with the current settings. Try adjusting the analysis parameters.")
        return

    with st.expander("ℹ️ Understanding the metrics"):
        for info in METRIC_INFO.values():
            st.markdown(f"**{info['name']}**")
            st.markdown(f"- {info['description']}")
            st.markdown(f"- *Interpretation:* {info['interpretation']}")
            st.markdown(f"- *Good value:* {info['good_value']}")
            st.markdown("")

    st.subheader("Filter Rules")

    col1, col2, col3 = st.columns(3)
    with col1:
        min_support = st.slider("Min Support", 0.0, 0.5, 0.0, 0.001, format="%.3f")
    with col2:
        min_confidence = st.slider("Min Confidence", 0.0, 1.0, 0.0, 0.05, format="%.2f")
    with col3:
        min_lift = st.slider("Min Lift", 0.0, 5.0, 0.0, 0.1, format="%.1f")

    col1, col2 = st.columns(2)
    with col1:
        if_contains = st.text_input("IF contains", help="e.g. PRECINCT=75")
    with col2:
        then_contains = st.text_input("THEN contains", help="e.g. TIME_SLOT=Night")

    sort_by = st.selectbox(
        "Rank by",
        ["lift", "confidence", "support"],
        format_func=lambda x: METRIC_INFO[x]["name"]
    )

    filtered = filter_rules(rules, "support", min_support)
    filtered = filter_rules(filtered, "confidence", min_confidence)
    filtered = filter_rules(filtered, "lift", min_lift)
    filtered = filter_rules_by_pattern(
        filtered,
        antecedent_contains=[if_contains] if if_contains else None,
        consequent_contains=[then_contains] if then_contains else None
    )
    filtered = [r.to_dict() for r in rank_rules([_to_rule(r) for r in filtered], sort_by)]

    st.caption(f"Showing **{len(filtered)}** of {len(rules)} rules")

    rows = []
    for rank, r in enumerate(filtered, 1):
        formatted = format_rule_for_excel(r)
        rows.append({
            "Rank": rank,
            "IF (conditions)": formatted["antecedent"],
            "THEN (outcome)": formatted["consequent"],
            "Support (%)": r["support"] * 100,
            "Confidence (%)": r["confidence"] * 100,
            "Lift": r["lift"],
            "Count": r["count"]
        })

    if rows:
        st.dataframe(
            pd.DataFrame(rows),
            width="stretch",
            hide_index=True,
            height=500,
            column_config={
                "IF (conditions)": st.column_config.TextColumn(width="large"),
                "THEN (outcome)": st.column_config.TextColumn(width="medium"),
                "Support (%)": st.column_config.NumberColumn(format="%.2f"),
                "Confidence (%)": st.column_config.NumberColumn(format="%.1f"),
                "Lift": st.column_config.NumberColumn(format="%.3f"),
            }
        )


def render_summary(rules, stats):
    if not rules:
        st.info("No rules to summarize.")
        return

    st.subheader("Results Overview")

    col1, col2, col3 = st.columns(3)
    for column, key in zip((col1, col2, col3), ("support", "confidence", "lift")):
        values = [r[key] for r in rules]
        with column:
            st.markdown(f"**{METRIC_INFO[key]['name']} Distribution**")
            st.caption(f"Min: {min(values):.3f}")
            st.caption(f"Max: {max(values):.3f}")
            st.caption(f"Average: {np.mean(values):.3f}")
            st.caption(f"Median: {np.median(values):.3f}")

    if stats:
        with st.expander("Mining statistics"):
            st.json(stats)

    st.markdown("---")
    st.subheader("Rules by Outcome")

    outcomes = pd.Series([format_rule_for_excel(r)["consequent"] for r in rules]).value_counts()
    st.dataframe(
        pd.DataFrame({"Outcome": outcomes.index, "Number of Rules": outcomes.values}),
        width="stretch", hide_index=True
    )


def render_export(rules, results):
    st.subheader("Export Results")

    if not rules:
        st.info("No rules to export.")
        return

    df = pd.DataFrame([format_rule_for_excel(r) for r in rules])

    col1, col2 = st.columns(2)

    with col1:
        st.download_button(
            "📥 Download as CSV",
            df.to_csv(index=False),
            "association_rules.csv",
            "text/csv",
            width="stretch"
        )

    with col2:
        buffer = io.BytesIO()
        save_rule_mining_results(
            rules,
            results.get("stats", {}),
            buffer,
            parameters=results.get("params")
        )
        st.download_button(
            "📥 Download as Excel",
            buffer.getvalue(),
            "association_rules.xlsx",
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            width="stretch"
        )

    st.markdown("---")
    st.subheader("Preview (first 20 rules)")
    st.dataframe(df.head(20), width="stretch", hide_index=True)
