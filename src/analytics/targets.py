from __future__ import annotations

import json
from typing import Optional, Union

from src.models.analytics import EmployeeRecord, PeriodTarget


def parse_target(
    employee: EmployeeRecord, year: Union[int, str], quarter: Optional[str]
) -> Optional[PeriodTarget]:
    """Return the employee's first target matching ``year``/``quarter``.

    Targets are stored as JSON strings. Years are stored as strings, so the
    requested year is stringified before comparison. Malformed entries raise.
    """
    wanted_year = str(year)
    for raw_target in employee.targets:
        decoded = json.loads(raw_target)
        if decoded.get("year") == wanted_year and decoded.get("quarter") == quarter:
            return PeriodTarget.model_validate(decoded)
    return None
