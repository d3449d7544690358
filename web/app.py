import streamlit as st

st.set_page_config(
    page_title="Incident Rule Explorer",
    page_icon="🚨",
    layout="wide",
    initial_sidebar_state="expanded"
)

if "data" not in st.session_state:
    st.session_state.data = None
if "current_data" not in st.session_state:
    st.session_state.current_data = None
if "processing_history" not in st.session_state:
    st.session_state.processing_history = []
if "mining_results" not in st.session_state:
    st.session_state.mining_results = None
if "current_page" not in st.session_state:
    st.session_state.current_page = "upload"
if "column_roles" not in st.session_state:
    st.session_state.column_roles = {}
if "tour_done" not in st.session_state:
    st.session_state.tour_done = False
if "tour_step" not in st.session_state:
    st.session_state.tour_step = 0


_TOUR_STEPS = [
    {
        "title": "Welcome to the Incident Rule Explorer",
        "content": """
This tool looks for **association rules** between *when* and *where* incidents happen,
patterns of the form:

> *IF* PRECINCT = 75 *THEN* TIME_SLOT = Night

Rules are found with the **Apriori** algorithm and ranked by lift, confidence or support.

Use the sidebar at any time to jump between pages.
""",
    },
    {
        "title": "Step 1: Load & Prepare",
        "content": """
**📁 Load Data**

- Upload a CSV or Excel file, or download the NYPD Shooting Incident Data directly.
- Pick the time, precinct and coordinate columns.
- **Prepare** cleans text, types the columns and buckets each incident into
  *Morning* (5-12), *Afternoon* (12-16), *Evening* (16-21) or *Night*.
""",
    },
    {
        "title": "Step 2: Explore",
        "content": """
**📊 Explore**

- **Proportions**: share of incidents per time slot (or any other column).
- **Map**: incident locations, coloured by time slot.
- **Association**: Cramér's V and a row-percentage heatmap of time slot vs precinct.
""",
    },
    {
        "title": "Step 3: Analyze & Results",
        "content": """
**🔍 Analyze** runs Apriori (or mlxtend's FP-Growth as a cross-check) over the chosen columns.

**📋 Results** lets you filter, re-rank and export the rules.

| Metric | Meaning |
|--------|---------|
| Support | How often the pattern appears in the data |
| Confidence | How often THEN holds when IF holds |
| Lift | Confidence relative to how common THEN is (1 = no effect) |
""",
    },
]


@st.dialog("Getting Started", width="large")
def _show_tour():
    step = st.session_state.tour_step
    total = len(_TOUR_STEPS)

    st.progress((step + 1) / total, text=f"Step {step + 1} of {total}")
    st.markdown(f"### {_TOUR_STEPS[step]['title']}")
    st.markdown(_TOUR_STEPS[step]["content"])

    st.markdown("---")
    col_back, col_space, col_skip, col_next = st.columns([1, 2, 1, 1])

    with col_back:
        if step > 0:
            if st.button("← Back", width="stretch"):
                st.session_state.tour_step -= 1
                st.rerun()

    with col_skip:
        if st.button("Skip", width="stretch"):
            st.session_state.tour_done = True
            st.session_state.tour_step = 0
            st.rerun()

    with col_next:
        if step < total - 1:
            if st.button("Next →", type="primary", width="stretch"):
                st.session_state.tour_step += 1
                st.rerun()
        else:
            if st.button("Get started", type="primary", width="stretch"):
                st.session_state.tour_done = True
                st.session_state.tour_step = 0
                st.rerun()


if not st.session_state.tour_done:
    _show_tour()


def navigate_to(page):
    st.session_state.current_page = page
    st.rerun()


with st.sidebar:
    st.markdown("## 🚨 Incident Rules")

    pages = [
        ("upload", "Load Data", "📁"),
        ("explore", "Explore", "📊"),
        ("analyze", "Analyze", "🔍"),
        ("results", "Results", "📋"),
    ]

    data_loaded = st.session_state.data is not None

    for page_id, label, icon in pages:
        is_current = st.session_state.current_page == page_id
        is_disabled = not data_loaded and page_id != "upload"

        if st.button(
                f"{icon} {label}",
                key=f"nav_{page_id}",
                width="stretch",
                type="primary" if is_current else "secondary",
                disabled=is_disabled
        ):
            navigate_to(page_id)

    st.markdown("---")
    if st.button("? Tour / Help", width="stretch", type="secondary"):
        st.session_state.tour_done = False
        st.session_state.tour_step = 0
        st.rerun()

    if st.session_state.data is not None:
        st.markdown("---")
        full_filename = st.session_state.get('filename', 'Unknown')
        display_filename = full_filename[:27] + "..." if len(full_filename) > 30 else full_filename
        st.caption(f"📄 **{display_filename}**")
        df = st.session_state.current_data
        st.caption(f"{len(df)} rows × {len(df.columns)} cols")

        status_parts = []
        steps = len(st.session_state.processing_history)
        if steps > 0:
            status_parts.append(f"{steps} steps")
        if st.session_state.mining_results:
            status_parts.append(f"{len(st.session_state.mining_results.get('rules', []))} rules")
        if status_parts:
            st.caption(" | ".join(status_parts))
    else:
        st.markdown("---")
        st.info("Load data to begin")

# Lazy import views for faster startup
page = st.session_state.current_page
if page == "upload":
    from views import upload
    upload.render()
elif page == "explore":
    from views import explore
    explore.render()
elif page == "analyze":
    from views import analyze
    analyze.render()
elif page == "results":
    from views import results
    results.render()
