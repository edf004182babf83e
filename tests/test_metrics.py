"""Tests for the per-chart page payloads."""

import json
import math

import pytest

from core.dashboard import PAGES, compute_dashboard
from core.filters import DashboardFilters
from core.metrics_costs import NO_DATA_MESSAGE, compute_cost_efficiency, compute_cost_structure
from core.metrics_overview import compute_overview
from core.metrics_savings import (
    compute_savings_distribution,
    compute_savings_to_cost,
    compute_savings_utilization,
    flatten_tree,
)
from core.schemes import SchemeRecord


@pytest.fixture
def ctx(sample_records):
    return {"filters": DashboardFilters(), "schemes": sample_records}


@pytest.fixture
def empty_ctx():
    return {"filters": DashboardFilters(), "schemes": ()}


class TestOverview:
    def test_cards_carry_average_costs(self, ctx):
        payload = compute_overview(DashboardFilters(), ctx)
        assert payload["scheme_count"] == 12
        assert [c["key"] for c in payload["cards"]] == ["main", "adult", "child"]
        main = payload["cards"][0]
        assert main["value"] == pytest.approx(payload["average_costs"]["main"])
        assert main["display"].startswith("R ")
        assert main["subtitle"] == "Per month"
        assert [c["trend_direction"] for c in payload["cards"]] == ["up", "down", "up"]

    def test_empty_data_has_no_values(self, empty_ctx):
        payload = compute_overview(DashboardFilters(), empty_ctx)
        assert payload["scheme_count"] == 0
        assert all(c["value"] is None for c in payload["cards"])
        assert all(c["display"] == "N/A" for c in payload["cards"])


class TestCostStructure:
    def test_rows_follow_top_n_filter(self, ctx):
        payload = compute_cost_structure(DashboardFilters(top_n=4), ctx)
        assert [r["id"] for r in payload["rows"]] == [7, 3, 12, 1]
        assert payload["filters"] == {"top_n": 4, "tree_n": 10}

    def test_category_shares(self):
        ctx = {"schemes": (SchemeRecord(id=1, main_cost=600, adult_cost=300, child_cost=100), SchemeRecord(id=2))}
        rows = compute_cost_structure(DashboardFilters(), ctx)["rows"]
        assert rows[0]["share_pct"] == pytest.approx({"main": 60.0, "adult": 30.0, "child": 10.0})
        assert rows[1]["share_pct"] == {"main": 0.0, "adult": 0.0, "child": 0.0}

    def test_chart_is_layered_with_reference_rule(self, ctx):
        payload = compute_cost_structure(DashboardFilters(), ctx)
        assert payload["message"] is None
        assert len(payload["chart"]["layer"]) == 2
        json.dumps(payload["chart"])

    def test_empty_data_has_no_chart(self, empty_ctx):
        payload = compute_cost_structure(DashboardFilters(), empty_ctx)
        assert payload["chart"] is None
        assert payload["message"] == NO_DATA_MESSAGE
        assert payload["average_total_display"] == "N/A"


class TestCostEfficiency:
    def test_rows_and_chart(self, ctx):
        payload = compute_cost_efficiency(DashboardFilters(), ctx)
        assert len(payload["rows"]) == 10
        assert isinstance(payload["chart"], dict)

    def test_no_costed_schemes(self):
        payload = compute_cost_efficiency(DashboardFilters(), {"schemes": (SchemeRecord(id=1, adult_cost=100),)})
        assert payload["rows"] == []
        assert payload["chart"] is None
        assert payload["message"] == NO_DATA_MESSAGE


class TestSavingsDistribution:
    def test_shares_sum_to_hundred(self, ctx):
        payload = compute_savings_distribution(DashboardFilters(), ctx)
        assert sum(c["share_pct"] for c in payload["categories"]) == pytest.approx(100.0)
        assert payload["chart"] is not None

    def test_zero_savings_share_is_nan(self):
        payload = compute_savings_distribution(DashboardFilters(), {"schemes": (SchemeRecord(id=1, main_cost=10),)})
        assert payload["total"] == 0.0
        assert all(math.isnan(c["share_pct"]) for c in payload["categories"])

    def test_empty_data(self, empty_ctx):
        payload = compute_savings_distribution(DashboardFilters(), empty_ctx)
        assert payload["chart"] is None
        assert payload["total_display"] == "N/A"


class TestSavingsUtilization:
    def test_cells_flatten_tree(self, ctx):
        payload = compute_savings_utilization(DashboardFilters(tree_n=2), ctx)
        assert [node["id"] for node in payload["tree"]] == [7, 3]
        assert len(payload["cells"]) == 6
        assert payload["cells"][0] == {
            "scheme_id": 7,
            "scheme": "Scheme 7",
            "category": "Main Member",
            "category_order": 0,
            "value": 3250.0,
            "savings_percentage": pytest.approx(487 / 3250 * 100),
        }
        assert payload["chart"] is not None

    def test_flatten_empty_tree(self):
        assert flatten_tree([]) == []


class TestSavingsToCost:
    def test_max_dependent_count(self, ctx):
        payload = compute_savings_to_cost(DashboardFilters(), ctx)
        assert payload["max_dependent_count"] == 2
        assert len(payload["rows"]) == 12

    def test_non_finite_ratios_keep_chart_serializable(self):
        payload = compute_savings_to_cost(DashboardFilters(), {"schemes": (SchemeRecord(id=1), SchemeRecord(id=2, main_savings=5))})
        assert math.isnan(payload["rows"][0]["savings_ratio"])
        json.dumps(payload["chart"], allow_nan=False)

    def test_high_savings_flag(self):
        schemes = (
            SchemeRecord(id=1, main_cost=100.0, main_savings=60.0),
            SchemeRecord(id=2, main_cost=100.0, main_savings=10.0),
            SchemeRecord(id=3, main_cost=100.0, main_savings=50.0),
            SchemeRecord(id=4),
            SchemeRecord(id=5, main_savings=5.0),
        )
        payload = compute_savings_to_cost(DashboardFilters(), {"schemes": schemes})
        assert [r["high_savings"] for r in payload["rows"]] == [True, False, False, False, True]

    def test_chart_colours_points_by_savings_flag(self, ctx):
        chart = compute_savings_to_cost(DashboardFilters(), ctx)["chart"]
        color = chart["encoding"]["color"]
        assert color["condition"] == {"test": "datum.high_savings", "value": "#059669"}
        assert color["value"] == "#D97706"
        values = [row for dataset in chart["datasets"].values() for row in dataset]
        assert all("high_savings" in row for row in values)

    def test_empty_data(self, empty_ctx):
        payload = compute_savings_to_cost(DashboardFilters(), empty_ctx)
        assert payload["max_dependent_count"] is None
        assert payload["chart"] is None


class TestDashboard:
    def test_all_pages_present(self, ctx):
        payload = compute_dashboard(DashboardFilters(), ctx)
        assert list(payload) == list(PAGES)

    def test_page_charts_are_complete_vega_lite_specs(self, ctx):
        """The UI hands these dicts straight to ``st.vega_lite_chart``."""
        payload = compute_dashboard(DashboardFilters(), ctx)
        for page in PAGES:
            chart = payload[page].get("chart")
            if chart is None:
                continue
            assert chart["$schema"].startswith("https://vega.github.io/schema/vega-lite/")
            json.dumps(chart, allow_nan=False)
