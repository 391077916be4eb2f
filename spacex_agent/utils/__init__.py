"""
Utility functions module.

Time Semantics:
- All timestamps are timezone-aware UTC datetimes
- Ledger windows are trailing intervals measured in milliseconds
- Timestamps leave the agent as ISO 8601 strings with a trailing "Z"
"""
