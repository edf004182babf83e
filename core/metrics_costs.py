from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

from core.aggregations import cost_efficiency_matrix, top_n_cost_breakdown
from core.charts import chart_records, cost_efficiency_chart, cost_structure_chart, to_vega_spec
from core.data import format_currency
from core.filters import DashboardFilters

NO_DATA_MESSAGE = "No valid data available for visualization"


def compute_cost_structure(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    schemes = ctx.get("schemes", ())
    breakdown = top_n_cost_breakdown(schemes, filters.top_n)
    average_total = breakdown["average_total"]

    rows = []
    for row in breakdown["rows"]:
        total = row["total"]
        shares = {
            key: (row[key] / total * 100 if total else 0.0)
            for key in ("main", "adult", "child")
        }
        rows.append({**row, "share_pct": shares})

    chart = None
    if breakdown["rows"]:
        chart = to_vega_spec(cost_structure_chart(breakdown["rows"], average_total))

    return {
        "filters": asdict(filters),
        "rows": rows,
        "average_total": average_total,
        "average_total_display": format_currency(average_total),
        "chart": chart,
        "message": None if chart else NO_DATA_MESSAGE,
    }


def compute_cost_efficiency(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    schemes = ctx.get("schemes", ())
    rows = cost_efficiency_matrix(schemes)

    chart = None
    if rows:
        chart = to_vega_spec(cost_efficiency_chart(chart_records(rows)))

    return {
        "filters": asdict(filters),
        "rows": rows,
        "chart": chart,
        "message": None if chart else NO_DATA_MESSAGE,
    }
