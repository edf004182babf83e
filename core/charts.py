from __future__ import annotations

import math
from typing import Any, Dict, List

import altair as alt
import pandas as pd

from core.schemes import CATEGORIES

alt.data_transformers.disable_max_rows()

CATEGORY_LABELS = [label for _, label, _, _ in CATEGORIES]
CATEGORY_COLORS = ["#2563EB", "#059669", "#D97706"]
HIGH_SAVINGS_COLOR = "#059669"
LOW_SAVINGS_COLOR = "#D97706"
GRID_COLOR = "#E5E7EB"
AXIS_LABEL_COLOR = "#6B7280"
CHART_HEIGHT = 400

CURRENCY_AXIS = alt.Axis(labelExpr="'R ' + format(datum.value, ',.0f')", labelColor=AXIS_LABEL_COLOR, gridColor=GRID_COLOR)
CURRENCY_K_AXIS = alt.Axis(labelExpr="'R ' + format(datum.value / 1000, ',.0f') + 'k'", labelColor=AXIS_LABEL_COLOR, gridColor=GRID_COLOR)


def category_color(title: str = "Member Type") -> alt.Color:
    return alt.Color(
        "category:N",
        title=title,
        scale=alt.Scale(domain=CATEGORY_LABELS, range=CATEGORY_COLORS),
        sort=CATEGORY_LABELS,
    )


def chart_records(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Copy of ``rows`` with non-finite floats replaced by None, which Vega-Lite skips."""
    return [
        {k: (v if not isinstance(v, float) or math.isfinite(v) else None) for k, v in row.items()}
        for row in rows
    ]


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


# ---------------- Chart builders ----------------
def cost_structure_chart(rows: List[Dict[str, Any]], average_total: float) -> alt.LayerChart:
    """Grouped bars per scheme and member type with the average total as a reference rule."""
    wide = pd.DataFrame(rows)
    long = wide.melt(
        id_vars=["id", "total"],
        value_vars=["main", "adult", "child"],
        var_name="category",
        value_name="cost",
    )
    long["category"] = long["category"].map({key: label for key, label, _, _ in CATEGORIES})
    bars = (
        alt.Chart(long)
        .mark_bar(cornerRadiusTopLeft=4, cornerRadiusTopRight=4)
        .encode(
            x=alt.X("id:N", title="Scheme ID", sort=None, axis=alt.Axis(labelAngle=0)),
            xOffset=alt.XOffset("category:N", sort=CATEGORY_LABELS),
            y=alt.Y("cost:Q", title="Monthly Cost (R)", axis=CURRENCY_AXIS),
            color=category_color(),
            tooltip=[
                alt.Tooltip("id:N", title="Scheme ID"),
                "category:N",
                alt.Tooltip("cost:Q", format=",.2f", title="Cost (R)"),
                alt.Tooltip("total:Q", format=",.2f", title="Total (R)"),
            ],
        )
    )
    rule = (
        alt.Chart(pd.DataFrame({"average_total": [average_total]}))
        .mark_rule(color="#9CA3AF", strokeDash=[3, 3])
        .encode(y="average_total:Q", tooltip=[alt.Tooltip("average_total:Q", format=",.2f", title="Average Total Cost (R)")])
    )
    return alt.layer(bars, rule).properties(height=CHART_HEIGHT)


def savings_distribution_chart(categories: List[Dict[str, Any]]) -> alt.Chart:
    df = pd.DataFrame(categories)
    return (
        alt.Chart(df)
        .mark_arc(innerRadius=60, outerRadius=140)
        .encode(
            theta=alt.Theta("avg:Q", stack=True),
            color=category_color(),
            tooltip=[
                "category:N",
                alt.Tooltip("avg:Q", format=",.2f", title="Average (R)"),
                alt.Tooltip("min:Q", format=",.0f", title="Min (R)"),
                alt.Tooltip("max:Q", format=",.0f", title="Max (R)"),
                alt.Tooltip("share_pct:Q", format=".1f", title="% of total savings"),
            ],
        )
        .properties(height=CHART_HEIGHT)
    )


def savings_utilization_chart(cells: List[Dict[str, Any]]) -> alt.Chart:
    """Stacked bars standing in for a treemap: length is cost, opacity is savings %."""
    df = pd.DataFrame(cells)
    return (
        alt.Chart(df)
        .mark_bar(stroke="#ffffff")
        .encode(
            y=alt.Y("scheme:N", title=None, sort=None),
            x=alt.X("value:Q", title="Monthly Cost (R)", stack="zero", axis=CURRENCY_K_AXIS),
            color=category_color(),
            opacity=alt.Opacity("savings_percentage:Q", title="Savings %", scale=alt.Scale(domain=[0, 100], range=[0.3, 1.0])),
            order=alt.Order("category_order:Q"),
            tooltip=[
                "scheme:N",
                "category:N",
                alt.Tooltip("value:Q", format=",.2f", title="Total Cost (R)"),
                alt.Tooltip("savings_percentage:Q", format=".1f", title="Savings %"),
            ],
        )
        .properties(height=CHART_HEIGHT)
    )


def savings_to_cost_chart(rows: List[Dict[str, Any]]) -> alt.Chart:
    df = pd.DataFrame(rows)
    return (
        alt.Chart(df)
        .mark_circle(opacity=0.6)
        .encode(
            x=alt.X("total_cost:Q", title="Total Monthly Cost (R)", axis=CURRENCY_K_AXIS),
            color=alt.condition("datum.high_savings", alt.value(HIGH_SAVINGS_COLOR), alt.value(LOW_SAVINGS_COLOR)),
            y=alt.Y("total_savings:Q", title="Total Savings Account (R)", axis=CURRENCY_K_AXIS),
            size=alt.Size("dependent_count:Q", title="Dependents", scale=alt.Scale(domain=[0, 2], range=[30, 150])),
            tooltip=[
                alt.Tooltip("id:N", title="Scheme ID"),
                alt.Tooltip("total_cost:Q", format=",.2f", title="Total Cost (R)"),
                alt.Tooltip("total_savings:Q", format=",.2f", title="Total Savings (R)"),
                alt.Tooltip("dependent_count:Q", title="Dependents"),
                alt.Tooltip("savings_ratio:Q", format=".1%", title="Savings Ratio"),
            ],
        )
        .properties(height=CHART_HEIGHT)
    )


def cost_efficiency_chart(rows: List[Dict[str, Any]]) -> alt.Chart:
    df = pd.DataFrame(rows)
    return (
        alt.Chart(df)
        .mark_circle(opacity=0.6)
        .encode(
            x=alt.X("adult_main_ratio:Q", title="Adult/Main Member Cost Ratio"),
            y=alt.Y("child_main_ratio:Q", title="Child/Main Member Cost Ratio"),
            size=alt.Size("total_cost:Q", title="Total Cost", scale=alt.Scale(range=[50, 200])),
            color=alt.Color("savings_percentage:Q", title="Savings %", scale=alt.Scale(scheme="blues")),
            tooltip=[
                alt.Tooltip("id:N", title="Scheme ID"),
                alt.Tooltip("adult_main_ratio:Q", format=".2f", title="Adult/Main Cost Ratio"),
                alt.Tooltip("child_main_ratio:Q", format=".2f", title="Child/Main Cost Ratio"),
                alt.Tooltip("total_cost:Q", format=",.2f", title="Total Cost (R)"),
                alt.Tooltip("savings_percentage:Q", format=".1f", title="Savings %"),
            ],
        )
        .properties(height=CHART_HEIGHT)
    )
