import logging
from contextlib import contextmanager
from typing import Optional

import pandas as pd
import streamlit as st

from core.aggregations import DEFAULT_TOP_N
from core.data import format_currency, format_percent, load_dashboard_data, prepare_context
from core.filters import normalize_filters
from core.metrics_costs import compute_cost_efficiency, compute_cost_structure
from core.metrics_overview import compute_overview
from core.metrics_savings import (
    compute_savings_distribution,
    compute_savings_to_cost,
    compute_savings_utilization,
)

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .card {border: 1px solid #e5e7eb;border-radius: 8px;padding: 16px;background: #ffffff;margin-bottom: 12px;}
        .card-title {font-weight: 600;font-size: 1.05rem;color: #111827;}
        .card-subtitle {font-size: 0.85rem;color: #6b7280;margin-top: 2px;}
        .brand {font-size: 1.25rem;font-weight: 600;color: #111827;}
        .brand-sub {font-size: 0.85rem;color: #6b7280;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str, subtitle: Optional[str] = None, help_text: Optional[str] = None):
    container = st.container()
    container.markdown(
        f"""
        <div class="card">
          <div class="card-title">{title}</div>
          <div class="card-subtitle">{subtitle or ""}</div>
        """,
        unsafe_allow_html=True,
    )
    if help_text:
        container.caption(help_text)
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


# ---------- UI setup ----------
st.set_page_config(page_title="ClaimCare · Medical Insurance Analytics", layout="wide")
inject_base_styles()

with st.sidebar:
    st.markdown("<div class='brand'>ClaimCare</div><div class='brand-sub'>by Team DataHolics</div>", unsafe_allow_html=True)
    st.markdown("---")
    st.markdown("**Dashboard Overview**")
    with st.expander("Advanced settings", expanded=False):
        top_n = st.slider("Schemes in cost breakdown", min_value=1, max_value=50, value=DEFAULT_TOP_N)
        tree_n = st.slider("Schemes in savings utilization", min_value=1, max_value=50, value=DEFAULT_TOP_N)

st.title("Medical Insurance Analytics")
st.caption("Comprehensive analysis of South African Medical Schemes")

data_ctx = load_dashboard_data()
filters = normalize_filters({"top_n": top_n, "tree_n": tree_n})
ctx = prepare_context(filters, data_ctx)
schemes = ctx["schemes"]
if not schemes:
    st.warning("No scheme data loaded. Place finance.json next to app.py.")

# ----- KPI cards -----
overview = compute_overview(filters, ctx)
cols = st.columns(3)
for col, kpi in zip(cols, overview["cards"]):
    col.metric(
        kpi["title"],
        kpi["display"],
        delta=f"{kpi['trend']}%",
        help=kpi["description"],
    )
    col.caption(kpi["subtitle"])

# ----- First row -----
left, right = st.columns(2)
with left:
    cost = compute_cost_structure(filters, ctx)
    with card(
        "Cost Structure Analysis",
        f"Monthly cost breakdown by member type for top {filters.top_n} schemes",
        f"The average total cost across schemes is {cost['average_total_display']}.",
    ):
        if cost["chart"] is None:
            st.info(cost["message"])
        else:
            st.vega_lite_chart(cost["chart"], use_container_width=True)

with right:
    dist = compute_savings_distribution(filters, ctx)
    with card(
        "Medical Savings Distribution",
        "Average savings allocation across member types",
        f"Total average savings: {dist['total_display']}",
    ):
        if dist["chart"] is None:
            st.info(dist["message"])
        else:
            st.vega_lite_chart(dist["chart"], use_container_width=True)
            table = pd.DataFrame(
                {
                    "Member Type": [c["category"] for c in dist["categories"]],
                    "Average": [format_currency(c["avg"]) for c in dist["categories"]],
                    "Range": [f"{format_currency(c['min'], 0)} - {format_currency(c['max'], 0)}" for c in dist["categories"]],
                    "% of total": [format_percent(c["share_pct"]) for c in dist["categories"]],
                }
            )
            st.dataframe(table, use_container_width=True, hide_index=True)

# ----- Second row -----
util = compute_savings_utilization(filters, ctx)
with card("Savings Account Utilization", "Cost distribution and savings percentage by scheme and member type"):
    if util["chart"] is None:
        st.info(util["message"])
    else:
        st.vega_lite_chart(util["chart"], use_container_width=True)

# ----- Third row -----
left, right = st.columns(2)
with left:
    ratio = compute_savings_to_cost(filters, ctx)
    with card("Savings-to-Cost Analysis", "Relationship between monthly costs and savings accounts"):
        if ratio["chart"] is None:
            st.info(ratio["message"])
        else:
            st.vega_lite_chart(ratio["chart"], use_container_width=True)

with right:
    eff = compute_cost_efficiency(filters, ctx)
    with card("Cost Efficiency Matrix", "Analyzing cost ratios and savings efficiency"):
        if eff["chart"] is None:
            st.info(eff["message"])
        else:
            st.vega_lite_chart(eff["chart"], use_container_width=True)
