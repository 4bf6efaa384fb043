"""
Column mapping for SOE table normalization.

TSV columns map to fixed row keys by POSITION, never by header text.
Columns 3-5 fan out: the source table does not distinguish cycles at
these day columns, so each value is shared verbatim by the cycle 1 and
cycle 2 keys of that day.
"""

import re
from typing import Tuple


# position -> destination keys
COLUMN_MAPPING: Tuple[Tuple[str, ...], ...] = (
    ("row_label",),
    ("protocol_section",),
    ("screening",),
    ("treatment_period_cycle_1_day_1", "treatment_period_cycle_2_day_1"),
    ("treatment_period_cycle_1_day_8", "treatment_period_cycle_2_day_8"),
    ("treatment_period_cycle_1_day_15", "treatment_period_cycle_2_day_15"),
    ("c3_and_beyond",),
    ("eot",),
    ("follow_up_every_12_weeks_up_to_3_years_from_eot",),
)

# Column holding the protocol section number
PROTOCOL_SECTION_COLUMN: int = 1

# Cell starts with a section number: "5", "11.3", "8.3.1/8.3.2", "5.1, 10.1", "Section 8.1"
PROTOCOL_SECTION_PATTERN = re.compile(r'^\s*(?:section\s+)?\d+(?:\.\d+)*\b', re.IGNORECASE)
