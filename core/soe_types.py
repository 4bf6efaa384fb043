"""
SOE Type Definitions - the fixed row schema of a Schedule of Events table.

The key set is closed: every row carries exactly these 12 fields, in this
order, and nothing else. Key names never come from the source table's own
header text.

Usage:
    from core.soe_types import SoeRow, SOE_HEADERS

    row = SoeRow.from_dict({"row_label": "Informed consent", "screening": "X"})
    print(row.to_dict())  # all 12 keys present
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, List, Tuple


@dataclass(frozen=True)
class SoeRow:
    """One procedure row of the Schedule of Events grid."""
    row_label: str = ""
    protocol_section: str = ""
    screening: str = ""
    treatment_period_cycle_1_day_1: str = ""
    treatment_period_cycle_2_day_1: str = ""
    treatment_period_cycle_1_day_8: str = ""
    treatment_period_cycle_2_day_8: str = ""
    treatment_period_cycle_1_day_15: str = ""
    treatment_period_cycle_2_day_15: str = ""
    c3_and_beyond: str = ""
    eot: str = ""
    follow_up_every_12_weeks_up_to_3_years_from_eot: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {key: getattr(self, key) for key in SOE_HEADERS}

    def get(self, key: str) -> str:
        return getattr(self, key, "")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SoeRow":
        """
        Conform an arbitrary mapping onto the fixed schema.

        Unknown keys are dropped, missing keys default to "", None becomes ""
        and other scalars are stringified.
        """
        values = {}
        for key in SOE_HEADERS:
            value = data.get(key, "")
            if value is None:
                value = ""
            elif not isinstance(value, str):
                value = str(value)
            values[key] = value
        return cls(**values)

    @classmethod
    def from_cells(cls, cells: List[str], mapping: Tuple[Tuple[str, ...], ...]) -> "SoeRow":
        """Build a row from positional cells using a position -> keys table."""
        values = {}
        for position, keys in enumerate(mapping):
            value = cells[position] if position < len(cells) else ""
            for key in keys:
                values[key] = value
        return cls.from_dict(values)


SOE_HEADERS: List[str] = [f.name for f in fields(SoeRow)]

# Milestone columns that correspond to a dated visit, in declared order
MILESTONE_KEYS: List[str] = [
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

MILESTONE_LABELS: Dict[str, str] = {
    "screening": "Screening",
    "treatment_period_cycle_1_day_1": "Cycle 1 Day 1",
    "treatment_period_cycle_1_day_8": "Cycle 1 Day 8",
    "treatment_period_cycle_1_day_15": "Cycle 1 Day 15",
    "treatment_period_cycle_2_day_1": "Cycle 2 Day 1",
    "treatment_period_cycle_2_day_8": "Cycle 2 Day 8",
    "treatment_period_cycle_2_day_15": "Cycle 2 Day 15",
    "c3_and_beyond": "Cycle 3 and Beyond",
    "eot": "End of Treatment",
}
