"""
Analytics module.

Summaries, listings and CSV export computed on demand from the ledger.
"""
from .aggregator import (
    CSV_COLUMNS,
    AnalyticsSummary,
    export_csv,
    list_transactions,
    parse_csv,
    records_to_csv,
    summarize,
)

__all__ = [
    "CSV_COLUMNS",
    "AnalyticsSummary",
    "export_csv",
    "list_transactions",
    "parse_csv",
    "records_to_csv",
    "summarize",
]
