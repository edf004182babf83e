"""Shared pytest fixtures for dashboard tests."""

import json

import pytest

from core.data import _load_schemes_cached
from core.schemes import SchemeRecord


@pytest.fixture(autouse=True)
def clear_scheme_cache():
    """Each test sees a cold loader cache."""
    _load_schemes_cached.cache_clear()
    yield
    _load_schemes_cached.cache_clear()


@pytest.fixture
def example_records():
    """One costed scheme with an adult dependant and one all-zero scheme."""
    return (
        SchemeRecord(id=1, main_cost=1000, adult_cost=500, child_cost=0, main_savings=100, adult_savings=50, child_savings=0),
        SchemeRecord(id=2),
    )


@pytest.fixture
def sample_records():
    """Twelve schemes, deliberately not sorted by cost."""
    rows = [
        (7, 3250, 2890, 1020, 487, 433, 153),
        (3, 1890, 1600, 560, 0, 0, 0),
        (12, 0, 0, 0, 0, 0, 0),
        (1, 5420, 4980, 1510, 1084, 996, 302),
        (9, 2710, 2150, 0, 271, 215, 0),
        (4, 1245, 1245, 410, 0, 0, 0),
        (15, 7980, 7540, 2190, 1995, 1885, 547),
        (2, 4115, 3780, 1240, 617, 567, 186),
        (8, 2260, 0, 0, 226, 0, 0),
        (11, 3605, 3115, 980, 541, 467, 147),
        (5, 6340, 5890, 1750, 1268, 1178, 350),
        (6, 0, 900, 300, 0, 90, 30),
    ]
    return tuple(
        SchemeRecord(
            id=i,
            main_cost=float(mc),
            adult_cost=float(ac),
            child_cost=float(cc),
            main_savings=float(ms),
            adult_savings=float(as_),
            child_savings=float(cs),
        )
        for i, mc, ac, cc, ms, as_, cs in rows
    )


@pytest.fixture
def columnar_payload():
    """Columnar document with out-of-order row keys and a missing child savings cell."""
    return {
        "MedicalSchemeId": {"10": 30, "2": 20, "0": 10},
        "TotalMonthlyCostMainMember": {"0": 1000.0, "2": 2000.0, "10": 0.0},
        "MedicalSavingsAccountMainMember": {"0": 100.0, "2": 200.0, "10": 0.0},
        "TotalMonthlyCostAdultDependant": {"0": 800.0, "2": 0.0, "10": 0.0},
        "MedicalSavingsAccountAdultDependant": {"0": 80.0, "2": 0.0, "10": 0.0},
        "TotalMonthlyCostChildDependant": {"0": 300.0, "2": 400.0, "10": None},
        "MedicalSavingsAccountChildDependant": {"0": 30.0},
    }


@pytest.fixture
def finance_file(tmp_path, columnar_payload):
    """columnar_payload written to a finance.json on disk."""
    path = tmp_path / "finance.json"
    path.write_text(json.dumps(columnar_payload), encoding="utf-8")
    return path
