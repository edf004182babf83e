from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

from core.aggregations import average_costs
from core.data import finite_or_none, format_currency
from core.filters import DashboardFilters

# (category key, title, trend badge %, description)
KPI_CARDS = [
    (
        "main",
        "Average Main Member Cost",
        2.5,
        "Average monthly cost for the primary insurance holder across all schemes",
    ),
    (
        "adult",
        "Average Adult Dependant Cost",
        -1.2,
        "Average monthly cost for adult dependants (spouse or adult family member)",
    ),
    (
        "child",
        "Average Child Dependant Cost",
        0.8,
        "Average monthly cost for child dependants (under 21 years)",
    ),
]


def compute_overview(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    schemes = ctx.get("schemes", ())
    averages = average_costs(schemes)

    cards = []
    for key, title, trend, description in KPI_CARDS:
        value = averages[key]
        cards.append(
            {
                "key": key,
                "title": title,
                "value": finite_or_none(value),
                "display": format_currency(value),
                "subtitle": "Per month",
                "trend": trend,
                "trend_direction": "up" if trend >= 0 else "down",
                "description": description,
            }
        )

    return {
        "filters": asdict(filters),
        "scheme_count": len(schemes),
        "average_costs": averages,
        "cards": cards,
    }
