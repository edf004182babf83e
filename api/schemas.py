from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from core.aggregations import DEFAULT_TOP_N
from core.filters import MAX_TOP_N


class DashboardFiltersModel(BaseModel):
    top_n: int = Field(default=DEFAULT_TOP_N, ge=1, le=MAX_TOP_N)
    tree_n: int = Field(default=DEFAULT_TOP_N, ge=1, le=MAX_TOP_N)


class MetaSchemesResponse(BaseModel):
    files: List[str]
    scheme_count: int
    scheme_ids: List[int]
