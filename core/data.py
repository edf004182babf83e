from __future__ import annotations

import json
import logging
import math
from decimal import ROUND_HALF_UP, Decimal
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pandas as pd

from core.filters import DashboardFilters, normalize_filters
from core.schemes import SchemeRecord, transpose_columnar

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parents[1]
DATA_FILE = "finance.json"

CURRENCY_SYMBOL = "R"

Snapshot = Tuple[SchemeRecord, ...]


def get_source_file(path: Optional[Path | str] = None) -> Path:
    return Path(path) if path is not None else DATA_DIR / DATA_FILE


def file_signature(path: Path) -> Tuple[str, float]:
    return str(path), path.stat().st_mtime


# ---------------- Formatting ----------------
def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    if value is None or pd.isna(value) or math.isinf(float(value)):
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def format_currency(value: object, decimals: int = 2) -> str:
    if value is None or pd.isna(value) or math.isinf(float(value)):
        return "N/A"
    return f"{CURRENCY_SYMBOL} {float(value):,.{decimals}f}"


def format_percent(value: object, decimals: int = 1) -> str:
    """Format a 0-100 percentage."""
    if value is None or pd.isna(value) or math.isinf(float(value)):
        return "N/A"
    return f"{float(value):.{decimals}f}%"


def finite_or_none(value: object) -> Optional[float]:
    if value is None or pd.isna(value) or math.isinf(float(value)):
        return None
    return float(value)


# ---------------- Loaders ----------------
def read_columnar(path: Path) -> List[SchemeRecord]:
    with path.open("r", encoding="utf-8") as fh:
        payload = json.load(fh)
    if not isinstance(payload, dict):
        raise ValueError(f"expected a JSON object in {path.name}, got {type(payload).__name__}")
    return transpose_columnar(payload)


@lru_cache(maxsize=4)
def _load_schemes_cached(file_sig: Tuple[str, float]) -> Snapshot:
    path = Path(file_sig[0])
    records = tuple(read_columnar(path))
    logger.info("Loaded %d schemes from %s", len(records), path.name)
    return records


def load_schemes(path: Optional[Path | str] = None) -> Snapshot:
    """Load the scheme snapshot; any read or parse failure yields an empty snapshot."""
    source = get_source_file(path)
    try:
        return _load_schemes_cached(file_signature(source))
    except (OSError, ValueError, TypeError) as exc:
        # json.JSONDecodeError is a ValueError.
        logger.exception("Error loading scheme data from %s: %s", source, exc)
        return ()


# ---------------- Public API (Streamlit + FastAPI use) ----------------
def load_dashboard_data(path: Optional[Path | str] = None) -> Dict[str, object]:
    source = get_source_file(path)
    schemes = load_schemes(source)
    return {"files": [source.name] if schemes else [], "schemes": schemes}


def prepare_context(filters: dict | DashboardFilters | None, data_ctx: Dict[str, object]) -> Dict[str, object]:
    filt = filters if isinstance(filters, DashboardFilters) else normalize_filters(filters)
    schemes: Snapshot = tuple(data_ctx.get("schemes", ()) or ())
    return {"filters": filt, "schemes": schemes}
