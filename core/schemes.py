from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Iterable, List, Mapping, Sequence

import pandas as pd


# Source document key -> record field.
SOURCE_COLUMNS = {
    "MedicalSchemeId": "id",
    "TotalMonthlyCostMainMember": "main_cost",
    "TotalMonthlyCostAdultDependant": "adult_cost",
    "TotalMonthlyCostChildDependant": "child_cost",
    "MedicalSavingsAccountMainMember": "main_savings",
    "MedicalSavingsAccountAdultDependant": "adult_savings",
    "MedicalSavingsAccountChildDependant": "child_savings",
}

ID_KEY = "MedicalSchemeId"

# (category key, label, cost column, savings column)
CATEGORIES = [
    ("main", "Main Member", "main_cost", "main_savings"),
    ("adult", "Adult Dependant", "adult_cost", "adult_savings"),
    ("child", "Child Dependant", "child_cost", "child_savings"),
]

COST_COLUMNS = [cost for _, _, cost, _ in CATEGORIES]
SAVINGS_COLUMNS = [savings for _, _, _, savings in CATEGORIES]


def _as_number(value: object) -> float:
    """Resolve an absent / null / non-numeric value to 0.0."""
    if value is None or not pd.api.types.is_scalar(value):
        return 0.0
    num = pd.to_numeric(value, errors="coerce")
    if pd.isna(num):
        return 0.0
    return float(num)


@dataclass(frozen=True)
class SchemeRecord:
    id: int = 0
    main_cost: float = 0.0
    adult_cost: float = 0.0
    child_cost: float = 0.0
    main_savings: float = 0.0
    adult_savings: float = 0.0
    child_savings: float = 0.0

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "SchemeRecord":
        """Build a record from either source keys or field names; gaps become 0."""
        values: Dict[str, Any] = {}
        for source_key, name in SOURCE_COLUMNS.items():
            if name in raw:
                values[name] = raw[name]
            else:
                values[name] = raw.get(source_key)
        return cls(
            id=int(_as_number(values["id"])),
            **{name: _as_number(values[name]) for name in COST_COLUMNS + SAVINGS_COLUMNS},
        )

    @property
    def total_cost(self) -> float:
        return self.main_cost + self.adult_cost + self.child_cost

    @property
    def total_savings(self) -> float:
        return self.main_savings + self.adult_savings + self.child_savings

    @property
    def valid_for_cost_analysis(self) -> bool:
        return self.main_cost > 0


RECORD_COLUMNS = [f.name for f in fields(SchemeRecord)]


def _is_index_key(key: str) -> bool:
    # Canonical non-negative integers only: "01" and "\u00b2" are plain keys.
    return key.isascii() and key.isdigit() and str(int(key)) == key


def _row_order(keys: Iterable[str]) -> List[str]:
    # Index keys first in numeric order, then the rest as given.
    keys = [str(k) for k in keys]
    numeric = sorted((k for k in keys if _is_index_key(k)), key=int)
    other = [k for k in keys if not _is_index_key(k)]
    return numeric + other


def transpose_columnar(payload: Mapping[str, Any]) -> List[SchemeRecord]:
    """Turn ``{field: {row_index: value}}`` into one SchemeRecord per row.

    Rows are enumerated from the ``MedicalSchemeId`` mapping. A field mapping
    lacking a row key contributes an absent value for that row.
    """
    ids = payload.get(ID_KEY) or {}
    if not isinstance(ids, Mapping):
        raise ValueError(f"{ID_KEY} must map row index to value, got {type(ids).__name__}")

    columns: Dict[str, Mapping[str, Any]] = {}
    for source_key in SOURCE_COLUMNS:
        col = payload.get(source_key) or {}
        if not isinstance(col, Mapping):
            raise ValueError(f"{source_key} must map row index to value, got {type(col).__name__}")
        columns[source_key] = {str(k): v for k, v in col.items()}

    records: List[SchemeRecord] = []
    for row in _row_order(ids.keys()):
        raw = {source_key: col.get(row) for source_key, col in columns.items()}
        records.append(SchemeRecord.from_mapping(raw))
    return records


def schemes_frame(records: Sequence[SchemeRecord]) -> pd.DataFrame:
    """Tabular view of the records, one row each, input order kept."""
    if not records:
        df = pd.DataFrame({c: pd.Series(dtype=float) for c in RECORD_COLUMNS})
        df["id"] = df["id"].astype("int64")
        return df
    df = pd.DataFrame([asdict(r) for r in records], columns=RECORD_COLUMNS)
    df["id"] = df["id"].astype("int64")
    for col in COST_COLUMNS + SAVINGS_COLUMNS:
        df[col] = df[col].astype(float)
    return df.reset_index(drop=True)
