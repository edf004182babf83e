from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from core.aggregations import DEFAULT_TOP_N

MAX_TOP_N = 200


@dataclass(frozen=True)
class DashboardFilters:
    top_n: int = DEFAULT_TOP_N
    tree_n: int = DEFAULT_TOP_N


def _as_count(value: object, default: int) -> int:
    if value is None:
        return default
    try:
        count = int(value)
    except (TypeError, ValueError):
        return default
    return max(1, min(MAX_TOP_N, count))


def normalize_filters(raw: Optional[Mapping[str, Any]]) -> DashboardFilters:
    raw = raw or {}
    return DashboardFilters(
        top_n=_as_count(raw.get("top_n"), DEFAULT_TOP_N),
        tree_n=_as_count(raw.get("tree_n"), DEFAULT_TOP_N),
    )
