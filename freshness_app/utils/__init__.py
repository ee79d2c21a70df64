"""
Utility functions module.

Time handling shared across the policy, interval selection and planning.

Time Semantics:
- All instants handled by the library are timezone-aware
- Naive datetimes supplied by callers are interpreted as UTC
- Exchange-local wall time is derived only when a calendar needs it
- "now" is captured once per decision and passed down explicitly
"""
