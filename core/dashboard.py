from __future__ import annotations

from typing import Any, Callable, Dict

from core.filters import DashboardFilters
from core.metrics_costs import compute_cost_efficiency, compute_cost_structure
from core.metrics_overview import compute_overview
from core.metrics_savings import (
    compute_savings_distribution,
    compute_savings_to_cost,
    compute_savings_utilization,
)

PageFn = Callable[[DashboardFilters, Dict[str, Any]], Dict[str, Any]]

# Page key -> payload builder, in dashboard layout order.
PAGES: Dict[str, PageFn] = {
    "overview": compute_overview,
    "cost-structure": compute_cost_structure,
    "savings-distribution": compute_savings_distribution,
    "savings-utilization": compute_savings_utilization,
    "savings-to-cost": compute_savings_to_cost,
    "cost-efficiency": compute_cost_efficiency,
}


def compute_dashboard(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    return {key: fn(filters, ctx) for key, fn in PAGES.items()}
