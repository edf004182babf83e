"""Derived metrics over a scheme record set.

Every function takes the full record sequence and returns plain
JSON-serializable values. Unguarded divisions follow float semantics
(``0/0 -> nan``, ``x/0 -> inf``) instead of raising.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Sequence

import pandas as pd

from core.schemes import CATEGORIES, COST_COLUMNS, SAVINGS_COLUMNS, SchemeRecord, schemes_frame

DEFAULT_TOP_N = 10


def _mean(series: pd.Series) -> float:
    return float(series.mean()) if len(series) else math.nan


def _with_totals(df: pd.DataFrame) -> pd.DataFrame:
    return df.assign(
        total_cost=df[COST_COLUMNS].sum(axis=1),
        total_savings=df[SAVINGS_COLUMNS].sum(axis=1),
    )


def average_costs(records: Sequence[SchemeRecord]) -> Dict[str, float]:
    """Mean monthly cost per member category over all records, zero-main ones included."""
    df = schemes_frame(records)
    return {key: _mean(df[cost]) for key, _, cost, _ in CATEGORIES}


def top_n_cost_breakdown(records: Sequence[SchemeRecord], n: int = DEFAULT_TOP_N) -> Dict[str, Any]:
    """Cost breakdown of the first ``n`` records in input order.

    "Top" is positional; rows are not ranked by cost.
    """
    df = schemes_frame(records).head(max(n, 0))
    rows = pd.DataFrame(
        {
            "id": df["id"],
            "main": df["main_cost"],
            "adult": df["adult_cost"],
            "child": df["child_cost"],
        }
    )
    rows["total"] = rows["main"] + rows["adult"] + rows["child"]
    return {
        "rows": rows.to_dict(orient="records"),
        "average_total": _mean(rows["total"]),
    }


def savings_distribution(records: Sequence[SchemeRecord]) -> Dict[str, Any]:
    df = schemes_frame(records)
    categories = []
    for _, label, _, savings in CATEGORIES:
        col = df[savings]
        categories.append(
            {
                "category": label,
                "avg": _mean(col),
                "min": float(col.min()) if len(col) else math.inf,
                "max": float(col.max()) if len(col) else -math.inf,
            }
        )
    return {"categories": categories, "total": sum(c["avg"] for c in categories)}


def savings_utilization_tree(records: Sequence[SchemeRecord], n: int = DEFAULT_TOP_N) -> List[Dict[str, Any]]:
    """Scheme -> member category tree for the first ``n`` schemes with a main member cost.

    Only categories with a positive cost become children; a scheme left
    without children is dropped.
    """
    valid = [r for r in records if r.valid_for_cost_analysis][: max(n, 0)]
    tree: List[Dict[str, Any]] = []
    for record in valid:
        children = []
        for key, label, cost_attr, savings_attr in CATEGORIES:
            cost = getattr(record, cost_attr)
            if cost <= 0:
                continue
            children.append(
                {
                    "name": label,
                    "category": key,
                    "value": cost,
                    "savings_percentage": getattr(record, savings_attr) / cost * 100,
                }
            )
        if children:
            tree.append({"id": record.id, "name": f"Scheme {record.id}", "children": children})
    return tree


def savings_to_cost_ratio(records: Sequence[SchemeRecord]) -> List[Dict[str, Any]]:
    df = _with_totals(schemes_frame(records))
    out = pd.DataFrame(
        {
            "id": df["id"],
            "total_cost": df["total_cost"],
            "total_savings": df["total_savings"],
            "dependent_count": (df["adult_cost"] > 0).astype(int) + (df["child_cost"] > 0).astype(int),
            # Unguarded: 0/0 -> nan, x/0 -> inf.
            "savings_ratio": df["total_savings"] / df["total_cost"],
        }
    )
    return out.to_dict(orient="records")


def cost_efficiency_matrix(records: Sequence[SchemeRecord]) -> List[Dict[str, Any]]:
    """Per-scheme cost ratios against the main member, for schemes with a main member cost."""
    df = schemes_frame(records)
    df = _with_totals(df[df["main_cost"] > 0])
    main = df["main_cost"]
    out = pd.DataFrame(
        {
            "id": df["id"],
            "adult_main_ratio": (df["adult_cost"] / main).where(main != 0, 0.0),
            "child_main_ratio": (df["child_cost"] / main).where(main != 0, 0.0),
            "total_cost": df["total_cost"],
            "savings_percentage": (df["total_savings"] / df["total_cost"] * 100).where(df["total_cost"] > 0, 0.0),
        }
    )
    out = out[out["total_cost"] > 0]
    return out.to_dict(orient="records")
