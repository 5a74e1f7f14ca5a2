"""DuckDB persistence: oracle records, notification log, bond ledger."""
