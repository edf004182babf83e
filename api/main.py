from __future__ import annotations

import logging
import math

import numpy as np
import pandas as pd
from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import DashboardFiltersModel, MetaSchemesResponse
from core.dashboard import PAGES, compute_dashboard
from core.data import load_dashboard_data, prepare_context
from core.filters import DashboardFilters, normalize_filters


app = FastAPI(title="ClaimCare Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Page key -> payload field exported as CSV rows.
EXPORT_ROWS = {
    "overview": "cards",
    "cost-structure": "rows",
    "savings-distribution": "categories",
    "savings-utilization": "cells",
    "savings-to-cost": "rows",
    "cost-efficiency": "rows",
}


def _filters_from_model(model: DashboardFiltersModel) -> DashboardFilters:
    return normalize_filters(model.model_dump())


def _json(data: object) -> JSONResponse:
    """Return JSON with NaN/inf mapped to null and numpy/pandas scalars unwrapped."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
            },
        )
    )


def _error(name: str, exc: Exception) -> JSONResponse:
    logger.exception("%s failed", name)
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


def _page(name: str, filters: DashboardFiltersModel) -> JSONResponse:
    try:
        data_ctx = load_dashboard_data()
        f = _filters_from_model(filters)
        ctx = prepare_context(f, data_ctx)
        return _json(PAGES[name](f, ctx))
    except Exception as exc:
        return _error(name, exc)


@app.get("/meta/schemes", response_model=MetaSchemesResponse)
def meta_schemes():
    try:
        data_ctx = load_dashboard_data()
        schemes = data_ctx.get("schemes", ()) or ()
        return _json(
            {
                "files": data_ctx.get("files", []),
                "scheme_count": len(schemes),
                "scheme_ids": [s.id for s in schemes],
            }
        )
    except Exception as exc:
        return _error("meta_schemes", exc)


@app.post("/overview")
def overview(filters: DashboardFiltersModel):
    return _page("overview", filters)


@app.post("/cost-structure")
def cost_structure(filters: DashboardFiltersModel):
    return _page("cost-structure", filters)


@app.post("/cost-efficiency")
def cost_efficiency(filters: DashboardFiltersModel):
    return _page("cost-efficiency", filters)


@app.post("/savings-distribution")
def savings_distribution(filters: DashboardFiltersModel):
    return _page("savings-distribution", filters)


@app.post("/savings-utilization")
def savings_utilization(filters: DashboardFiltersModel):
    return _page("savings-utilization", filters)


@app.post("/savings-to-cost")
def savings_to_cost(filters: DashboardFiltersModel):
    return _page("savings-to-cost", filters)


@app.post("/dashboard")
def dashboard(filters: DashboardFiltersModel):
    try:
        data_ctx = load_dashboard_data()
        f = _filters_from_model(filters)
        ctx = prepare_context(f, data_ctx)
        return _json(compute_dashboard(f, ctx))
    except Exception as exc:
        return _error("dashboard", exc)


@app.post("/export/{page}")
def export_page(page: str, filters: DashboardFiltersModel):
    data_ctx = load_dashboard_data()
    f = _filters_from_model(filters)
    ctx = prepare_context(f, data_ctx)

    export_df = pd.DataFrame()
    if page in PAGES:
        payload = PAGES[page](f, ctx)
        rows = payload.get(EXPORT_ROWS[page], [])
        if page == "cost-structure":
            # Nested share dict does not fit a flat CSV.
            rows = [{k: v for k, v in r.items() if k != "share_pct"} for r in rows]
        export_df = pd.DataFrame(rows)

    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(
        content=csv_bytes,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={page}.csv"},
    )
