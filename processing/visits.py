"""
Visit aggregation.

A visit exists for a milestone only when at least one table cell is marked
for that time point; the schedule alone does not create visits.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from core.soe_types import MILESTONE_KEYS, MILESTONE_LABELS, SoeRow
from .schedule import ScheduleDates


@dataclass
class Visit:
    """One dated visit and the procedures performed at it."""
    date: str
    label: str
    events: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date, "label": self.label, "events": list(self.events)}


def build_visits(rows: Sequence[SoeRow], schedule: ScheduleDates) -> List[Visit]:
    """
    Cross-reference table rows against the schedule.

    Args:
        rows: Normalized SOE rows
        schedule: Milestone dates for this request

    Returns:
        One Visit per milestone column with any non-blank cell, sorted by date
    """
    visits = []
    for key in MILESTONE_KEYS:
        events = [row.row_label for row in rows if row.get(key).strip()]
        if events:
            visits.append(Visit(date=schedule.get(key), label=MILESTONE_LABELS[key], events=events))

    # ISO dates sort lexically; sort is stable for equal dates
    visits.sort(key=lambda v: v.date)
    return visits
