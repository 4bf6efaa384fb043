"""
Processing module for derived outputs of normalized SOE rows.

This module handles:
- Schedule date calculation from an anchor instant
- Visit aggregation (milestones with marked cells)
- CSV rendering (full and display)
"""

from .schedule import (
    ScheduleDates,
    compute_schedule_dates,
)

from .visits import (
    Visit,
    build_visits,
)

from .csv_export import (
    DISPLAY_KEYS,
    rows_to_csv,
    rows_to_display_csv,
)

__all__ = [
    # Schedule
    "ScheduleDates",
    "compute_schedule_dates",
    # Visits
    "Visit",
    "build_visits",
    # CSV
    "DISPLAY_KEYS",
    "rows_to_csv",
    "rows_to_display_csv",
]
