"""Core (UI-agnostic) dashboard logic.

This package contains:
- the scheme record model and columnar JSON transpose
- data loading (finance.json -> immutable record snapshot)
- aggregations (pure derived metrics per chart)
- page compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
