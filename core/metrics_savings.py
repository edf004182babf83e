from __future__ import annotations

import math
from dataclasses import asdict
from typing import Any, Dict, List

from core.aggregations import savings_distribution, savings_to_cost_ratio, savings_utilization_tree
from core.charts import (
    CATEGORY_LABELS,
    chart_records,
    savings_distribution_chart,
    savings_to_cost_chart,
    savings_utilization_chart,
    to_vega_spec,
)
from core.data import format_currency
from core.filters import DashboardFilters
from core.metrics_costs import NO_DATA_MESSAGE

# Savings ratio above which a scheme is plotted as high-savings.
HIGH_SAVINGS_RATIO = 0.5


def compute_savings_distribution(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    schemes = ctx.get("schemes", ())
    dist = savings_distribution(schemes)
    total = dist["total"]

    categories = []
    for cat in dist["categories"]:
        share = cat["avg"] / total * 100 if total else math.nan
        categories.append({**cat, "share_pct": share})

    chart = None
    if schemes:
        chart = to_vega_spec(savings_distribution_chart(chart_records(categories)))

    return {
        "filters": asdict(filters),
        "categories": categories,
        "total": total,
        "total_display": format_currency(total),
        "chart": chart,
        "message": None if chart else NO_DATA_MESSAGE,
    }


def flatten_tree(tree: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """One row per scheme/category cell."""
    cells = []
    for node in tree:
        for child in node["children"]:
            cells.append(
                {
                    "scheme_id": node["id"],
                    "scheme": node["name"],
                    "category": child["name"],
                    "category_order": CATEGORY_LABELS.index(child["name"]),
                    "value": child["value"],
                    "savings_percentage": child["savings_percentage"],
                }
            )
    return cells


def compute_savings_utilization(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    schemes = ctx.get("schemes", ())
    tree = savings_utilization_tree(schemes, filters.tree_n)
    cells = flatten_tree(tree)

    chart = None
    if cells:
        chart = to_vega_spec(savings_utilization_chart(chart_records(cells)))

    return {
        "filters": asdict(filters),
        "tree": tree,
        "cells": cells,
        "chart": chart,
        "message": None if chart else NO_DATA_MESSAGE,
    }


def compute_savings_to_cost(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    schemes = ctx.get("schemes", ())
    rows = [
        {**row, "high_savings": bool(row["savings_ratio"] > HIGH_SAVINGS_RATIO)}
        for row in savings_to_cost_ratio(schemes)
    ]
    max_dependents = max((r["dependent_count"] for r in rows), default=None)

    chart = None
    if rows:
        chart = to_vega_spec(savings_to_cost_chart(chart_records(rows)))

    return {
        "filters": asdict(filters),
        "rows": rows,
        "max_dependent_count": max_dependents,
        "chart": chart,
        "message": None if chart else NO_DATA_MESSAGE,
    }
