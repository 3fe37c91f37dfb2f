"""Streamlit frontend for the AML Case Review dashboard."""

from __future__ import annotations

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from api_client import (
    APIError,
    get_case,
    get_offense_history,
    get_stats,
    get_user_info,
    list_cases,
    refresh_cases,
    send_resolution,
)
from case_views import (
    SORT_FIELDS,
    alerts_by_date,
    counts_by,
    filter_cases,
    unique_analysts,
    user_from_email,
)

st.set_page_config(page_title="AML Case Review", layout="wide")

CONCLUSIONS = ["normal", "suspicious"]
PRIORITIES = ["low", "mid", "high"]


# ── Login ─────────────────────────────────────────────────────────────────────

def _login_form() -> None:
    st.title("AML Case Review")
    with st.form("login"):
        email = st.text_input("Work email", placeholder="first.last@company.com")
        if st.form_submit_button("Sign in", type="primary"):
            if "@" not in email:
                st.error("Enter a valid email address.")
            else:
                st.session_state["user"] = user_from_email(email.strip())
                st.rerun()


if "user" not in st.session_state:
    _login_form()
    st.stop()

user = st.session_state["user"]
with st.sidebar:
    st.markdown(f"**{user['initials']}** · {user['name']}")
    st.caption(user["role"])
    if st.button("Sign out"):
        st.session_state.clear()
        st.rerun()


# ── Data loading ──────────────────────────────────────────────────────────────

def _load_cases(force: bool = False) -> None:
    try:
        result = refresh_cases() if force else list_cases()
    except (APIError, OSError) as e:
        st.session_state["cases_error"] = str(e)
        return
    st.session_state.pop("cases_error", None)
    st.session_state["cases"] = result["data"]
    st.session_state["cached"] = result.get("cached", False)
    st.session_state["cache_age"] = result.get("cacheAge", 0)


def _open_case(user_id: int) -> None:
    st.session_state["detail_user_id"] = user_id


if "cases" not in st.session_state:
    with st.spinner("Loading cases..."):
        _load_cases()

with st.sidebar:
    if st.button("Refresh cases"):
        with st.spinner("Refreshing from warehouse..."):
            _load_cases(force=True)
    if st.session_state.get("cached"):
        st.caption(f"Served from cache ({st.session_state.get('cache_age', 0) // 60} min old)")

if "cases_error" in st.session_state:
    st.error(f"Failed to load cases: {st.session_state['cases_error']}")

cases: list[dict] = st.session_state.get("cases", [])

tab_dashboard, tab_cases, tab_detail = st.tabs(["Dashboard", "Cases", "Case Detail"])

# ── Tab 1: Dashboard ──────────────────────────────────────────────────────────

with tab_dashboard:
    st.header("Dashboard")
    try:
        stats = get_stats()["data"]
    except (APIError, OSError) as e:
        st.warning(f"Stats unavailable: {e}")
        stats = None

    if stats:
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Pending cases", stats["pending"])
        c2.metric("High value", stats["high_value_count"])
        c3.metric("Avg days pending", stats["avg_days_pending"])
        c4.metric("Resolved", stats["resolved"])

    if cases:
        col_left, col_right = st.columns(2)
        with col_left:
            by_analyst = counts_by(cases, "analyst")
            fig = px.bar(
                x=list(by_analyst.values()),
                y=list(by_analyst.keys()),
                orientation="h",
                labels={"x": "Cases", "y": "Analyst"},
                title="Cases by analyst",
            )
            st.plotly_chart(fig, use_container_width=True)

            by_status = counts_by(cases, "status")
            fig = px.bar(
                x=list(by_status.keys()),
                y=list(by_status.values()),
                labels={"x": "Account status", "y": "Cases"},
                title="Account status",
            )
            st.plotly_chart(fig, use_container_width=True)
        with col_right:
            high_value = counts_by(cases, "high_value")
            fig = go.Figure(
                go.Pie(
                    labels=["High value", "Normal"],
                    values=[high_value.get("yes", 0), high_value.get("no", 0)],
                    hole=0.5,
                    marker=dict(colors=["#ff4466", "#00d4ff"]),
                )
            )
            fig.update_layout(title="High-value split", height=400)
            st.plotly_chart(fig, use_container_width=True)

            by_date = alerts_by_date(cases)
            fig = px.line(
                x=list(by_date.keys()),
                y=list(by_date.values()),
                markers=True,
                labels={"x": "Date", "y": "Alerts"},
                title="Alerts by date",
            )
            st.plotly_chart(fig, use_container_width=True)

        st.subheader("Oldest pending")
        oldest = filter_cases(cases, sort_by="days_since_creation", descending=True)[:5]
        for item in oldest:
            cols = st.columns([1, 2, 1, 1, 1])
            cols[0].write(f"**{item['user_id']}**")
            cols[1].write(item["analyst"] or "—")
            cols[2].write(f"{item['days_since_creation']} days")
            cols[3].write("High value" if item["high_value"] == "yes" else "")
            if cols[4].button("Open", key=f"dash_open_{item['user_id']}"):
                _open_case(item["user_id"])
                st.rerun()

# ── Tab 2: Cases ──────────────────────────────────────────────────────────────

with tab_cases:
    st.header("Pending Cases")

    col_search, col_status, col_hv, col_analyst = st.columns([2, 1, 1, 1])
    with col_search:
        search_text = st.text_input("Search by user ID or analyst", key="case_search")
    with col_status:
        statuses = ["all"] + sorted({c["status"] for c in cases if c.get("status")})
        status_filter = st.selectbox("Status", statuses, key="case_status")
    with col_hv:
        hv_filter = st.selectbox("High value", ["all", "yes", "no"], key="case_hv")
    with col_analyst:
        analyst_filter = st.selectbox("Analyst", ["all"] + unique_analysts(cases), key="case_analyst")

    col_sort, col_order = st.columns([2, 1])
    with col_sort:
        sort_label = st.selectbox("Sort by", list(SORT_FIELDS), key="case_sort")
    with col_order:
        descending = st.toggle("Descending", value=True, key="case_desc")

    filtered = filter_cases(
        cases,
        search=search_text,
        status=status_filter,
        high_value=hv_filter,
        analyst=analyst_filter,
        sort_by=SORT_FIELDS[sort_label],
        descending=descending,
    )
    st.caption(f"{len(filtered)} case{'s' if len(filtered) != 1 else ''} found")

    for item in filtered:
        with st.container():
            cols = st.columns([1, 2, 1, 1, 1, 1])
            cols[0].write(f"**{item['user_id']}**")
            cols[1].write(item["analyst"] or "—")
            cols[2].write(item["status"])
            cols[3].write(f"{item['days_since_creation']} days")
            cols[4].write(":red[High value]" if item["high_value"] == "yes" else "—")
            if cols[5].button("View", key=f"view_{item['user_id']}"):
                _open_case(item["user_id"])
                st.rerun()

    if filtered:
        st.download_button(
            "Export CSV",
            data=pd.DataFrame(filtered).to_csv(index=False),
            file_name="pending_cases.csv",
            mime="text/csv",
        )

# ── Tab 3: Case Detail ────────────────────────────────────────────────────────

with tab_detail:
    st.header("Case Detail")

    manual_id = st.number_input("User ID", min_value=0, value=0, step=1, key="manual_user_id")
    if manual_id and st.button("Load case"):
        _open_case(int(manual_id))
        st.rerun()

    user_id = st.session_state.get("detail_user_id")
    if not user_id:
        st.info("Select a case from the Dashboard or Cases tab, or enter a user ID above.")
    else:
        try:
            case = get_case(user_id)
        except (APIError, OSError) as e:
            st.error(f"Failed to load case {user_id}: {e}")
            case = None

        if case:
            st.subheader(f"User {case['user_id']}")
            st.caption(
                f"Flagged {case['created_at'][:10]} by {case['analyst']} | "
                f"{case['days_since_creation']} days pending | "
                f"Status: {case['status']} | "
                f"High value: {case['high_value']}"
            )

            with st.expander("User information", expanded=True):
                try:
                    info = get_user_info(user_id)
                    for label, value in info.items():
                        if value is not None and value != "":
                            st.markdown(f"**{label.replace('_', ' ').title()}:** {value}")
                except (APIError, OSError) as e:
                    st.warning(f"User information unavailable: {e}")

            with st.expander("Offense history", expanded=True):
                try:
                    history = get_offense_history(user_id)
                    if history:
                        st.dataframe(pd.DataFrame(history), use_container_width=True, hide_index=True)
                    else:
                        st.caption("No previous analyses.")
                except (APIError, OSError) as e:
                    st.warning(f"Offense history unavailable: {e}")

            st.divider()
            st.subheader("Resolution")
            with st.form(f"resolution_{user_id}"):
                conclusion = st.radio("Conclusion", CONCLUSIONS, horizontal=True)
                priority = st.radio("Priority", PRIORITIES, horizontal=True)
                description = st.text_area("Description", height=120)
                submitted = st.form_submit_button("Send resolution", type="primary")

            if submitted:
                if conclusion == "suspicious" and priority == "low":
                    st.error("A suspicious conclusion cannot have low priority.")
                else:
                    try:
                        send_resolution(user_id, conclusion, priority, description)
                        st.success(f"Resolution for user {user_id} sent.")
                        st.session_state["cases"] = [c for c in cases if c["user_id"] != user_id]
                        del st.session_state["detail_user_id"]
                    except (APIError, OSError) as e:
                        st.error(f"Failed to send resolution: {e}")
