from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Union

from src.models.analytics import BookingRecord, PeriodTarget
from src.schemas.analytics import ConsultantMetric

_LEADING_INT = re.compile(r"^\s*([+-]?[0-9]+)")


@dataclass
class ConsultantTotals:
    name: str
    revenue: int = 0
    booking_achieved: int = 0
    margin_achieved: int = 0

    def add(self, booking: BookingRecord) -> None:
        self.revenue += parse_int(booking.booking_value)
        self.booking_achieved += 1
        self.margin_achieved += parse_int(booking.final_margin)


def parse_int(value: Any) -> int:
    """Parse the leading integer of a stored numeric value; anything else is 0.

    ``"1200.75"`` gives 1200, ``"450abc"`` gives 450, ``""``/``None``/``"n/a"`` give 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else 0


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def percentage(achieved: int, target: Optional[Union[int, float]]) -> int:
    # A missing or zero target counts as 1.
    return round_half_up(achieved / (target or 1) * 100)


def aggregate_bookings(bookings: Iterable[BookingRecord]) -> Dict[str, ConsultantTotals]:
    totals: Dict[str, ConsultantTotals] = {}
    for booking in bookings:
        name = booking.sales_handle_name or ""
        if name not in totals:
            totals[name] = ConsultantTotals(name=name)
        totals[name].add(booking)
    return totals


def build_consultant_metric(
    totals: ConsultantTotals, target: Optional[PeriodTarget]
) -> ConsultantMetric:
    booking_target = target.total_bookings if target else None
    margin_target = target.margin if target else None
    booking_percentage = percentage(totals.booking_achieved, booking_target)
    margin_percentage = percentage(totals.margin_achieved, margin_target)
    return ConsultantMetric(
        name=totals.name,
        revenue=totals.revenue,
        booking_achieved=totals.booking_achieved,
        margin_achieved=totals.margin_achieved,
        booking_target=booking_target,
        margin_target=margin_target,
        booking_percentage=booking_percentage,
        margin_percentage=margin_percentage,
        is_booking_exceeded=booking_percentage > 100,
        is_margin_exceeded=margin_percentage > 100,
    )
