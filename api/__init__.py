"""HTTP API serving the dashboard payloads."""
