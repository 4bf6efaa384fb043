"""
CSV renderings of normalized SOE rows.

The header line is left unquoted; every data field is wrapped in double
quotes with embedded quotes doubled. Lines are joined with "\\n" and
there is no trailing newline.
- rows_to_csv: all 12 keys, canonical order
- rows_to_display_csv: cycle-grouped columns without the follow-up field,
  led by a synthetic "dates" row from the schedule
"""

import csv
import io
from typing import Iterable, List, Sequence

from core.constants import DATES_ROW_LABEL, DISPLAY_FIRST_HEADER
from core.soe_types import SOE_HEADERS, SoeRow
from .schedule import ScheduleDates

# Columns after the row label, cycle 1 milestones grouped before cycle 2
DISPLAY_KEYS: List[str] = [
    "protocol_section",
    "screening",
    "treatment_period_cycle_1_day_1",
    "treatment_period_cycle_1_day_8",
    "treatment_period_cycle_1_day_15",
    "treatment_period_cycle_2_day_1",
    "treatment_period_cycle_2_day_8",
    "treatment_period_cycle_2_day_15",
    "c3_and_beyond",
    "eot",
]


def _render(header: Sequence[str], lines: Iterable[Sequence[str]]) -> str:
    buf = io.StringIO()
    csv.writer(buf, lineterminator="\n").writerow(header)
    csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n").writerows(lines)
    return buf.getvalue()[:-1]


def rows_to_csv(rows: Sequence[SoeRow]) -> str:
    """Render every row across all 12 keys."""
    return _render(SOE_HEADERS, ([row.get(key) for key in SOE_HEADERS] for row in rows))


def rows_to_display_csv(rows: Sequence[SoeRow], schedule: ScheduleDates) -> str:
    """Render the display table with the schedule dates as its first row."""
    lines = [[DATES_ROW_LABEL] + [schedule.get(key) for key in DISPLAY_KEYS]]
    lines.extend([row.row_label] + [row.get(key) for key in DISPLAY_KEYS] for row in rows)
    return _render([DISPLAY_FIRST_HEADER] + DISPLAY_KEYS, lines)
