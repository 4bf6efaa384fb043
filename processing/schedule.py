"""
Schedule date calculation.

Derives the calendar date of every visit milestone from a single anchor
instant using fixed offsets, each relative to an earlier milestone:

    screening = T + 1d
    C1D1  = screening + 7d
    C1D8  = C1D1 + 7d
    C1D15 = C1D1 + 14d
    C2D1  = C1D15 + 30d
    C2D8  = C2D1 + 7d
    C2D15 = C2D1 + 14d
    C3+   = C2D15 + 30d
    EOT   = C3+ + 30d
"""

from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Optional, Union


@dataclass(frozen=True)
class ScheduleDates:
    """ISO dates per milestone column, keyed like SoeRow."""
    screening: str
    treatment_period_cycle_1_day_1: str
    treatment_period_cycle_1_day_8: str
    treatment_period_cycle_1_day_15: str
    treatment_period_cycle_2_day_1: str
    treatment_period_cycle_2_day_8: str
    treatment_period_cycle_2_day_15: str
    c3_and_beyond: str
    eot: str
    protocol_section: str = ""  # column alignment with SoeRow

    def get(self, key: str) -> str:
        return getattr(self, key, "")

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def _anchor_date(anchor: Optional[Union[date, datetime]]) -> date:
    if anchor is None:
        anchor = datetime.now(timezone.utc)
    if isinstance(anchor, datetime):
        if anchor.tzinfo is not None:
            anchor = anchor.astimezone(timezone.utc)
        return anchor.date()
    if isinstance(anchor, date):
        return anchor
    raise TypeError(f"anchor must be a date or datetime, got {type(anchor).__name__}")


def compute_schedule_dates(anchor: Optional[Union[date, datetime]] = None) -> ScheduleDates:
    """
    Compute every milestone date from the anchor.

    Args:
        anchor: Reference instant; defaults to the current UTC time. Aware
            datetimes are converted to UTC before truncating to a date.

    Example:
        >>> compute_schedule_dates(date(2025, 1, 1)).treatment_period_cycle_2_day_1
        '2025-02-22'
    """
    t = _anchor_date(anchor)

    screening = t + timedelta(days=1)
    c1d1 = screening + timedelta(days=7)
    c1d8 = c1d1 + timedelta(days=7)
    c1d15 = c1d1 + timedelta(days=14)
    c2d1 = c1d15 + timedelta(days=30)
    c2d8 = c2d1 + timedelta(days=7)
    c2d15 = c2d1 + timedelta(days=14)
    c3 = c2d15 + timedelta(days=30)
    eot = c3 + timedelta(days=30)

    return ScheduleDates(
        screening=screening.isoformat(),
        treatment_period_cycle_1_day_1=c1d1.isoformat(),
        treatment_period_cycle_1_day_8=c1d8.isoformat(),
        treatment_period_cycle_1_day_15=c1d15.isoformat(),
        treatment_period_cycle_2_day_1=c2d1.isoformat(),
        treatment_period_cycle_2_day_8=c2d8.isoformat(),
        treatment_period_cycle_2_day_15=c2d15.isoformat(),
        c3_and_beyond=c3.isoformat(),
        eot=eot.isoformat(),
    )
