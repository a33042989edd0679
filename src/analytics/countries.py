from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from src.analytics.bookings import parse_int
from src.models.analytics import BookingRecord
from src.schemas.analytics import CountrySummary

TOP_COUNTRY_COUNT = 10
OTHERS_LABEL = "Others"

COUNTRY_ALIASES: Dict[str, str] = {
    "DUBAI": "Dubai",
    "UAE": "Dubai",
    "U.A.E": "Dubai",
    "U.A.E.": "Dubai",
    "United Arab Emirates": "Dubai",
    "UNITED ARAB EMIRATES": "Dubai",
}


@dataclass
class CountryTotals:
    name: str
    count: int = 0
    traveler_count: int = 0
    assignees: Dict[str, int] = field(default_factory=lambda: defaultdict(int))
    assignee_travellers: Dict[str, int] = field(default_factory=lambda: defaultdict(int))

    def merge(self, other: "CountryTotals") -> None:
        self.count += other.count
        self.traveler_count += other.traveler_count
        for assignee, count in other.assignees.items():
            self.assignees[assignee] += count
        for assignee, travellers in other.assignee_travellers.items():
            self.assignee_travellers[assignee] += travellers

    def to_summary(self) -> CountrySummary:
        return CountrySummary(
            name=self.name,
            count=self.count,
            assignees=dict(self.assignees),
            traveler_count=self.traveler_count,
            assignee_travellers=dict(self.assignee_travellers),
        )


def normalize_country(raw_name: str) -> str:
    name = raw_name.strip()
    return COUNTRY_ALIASES.get(name, name)


def traveller_count(booking: BookingRecord) -> int:
    return parse_int(booking.adults) + parse_int(booking.children)


def aggregate_countries(bookings: Iterable[BookingRecord]) -> Dict[str, CountryTotals]:
    """Count bookings and travellers per country and per assignee within it.

    A booking listing several countries counts once toward each of them.
    """
    totals: Dict[str, CountryTotals] = {}
    for booking in bookings:
        assignee = booking.sales_handle_name or ""
        travellers = traveller_count(booking)
        for raw_country in booking.countries:
            if not raw_country or not raw_country.strip():
                continue
            country = normalize_country(raw_country)
            if country not in totals:
                totals[country] = CountryTotals(name=country)
            entry = totals[country]
            entry.count += 1
            entry.assignees[assignee] += 1
            entry.traveler_count += travellers
            entry.assignee_travellers[assignee] += travellers
    return totals


def fold_top_countries(
    totals: Dict[str, CountryTotals], limit: int = TOP_COUNTRY_COUNT
) -> List[CountrySummary]:
    ranked = sorted(totals.values(), key=lambda entry: entry.count, reverse=True)
    summaries = [entry.to_summary() for entry in ranked[:limit]]

    others = CountryTotals(name=OTHERS_LABEL)
    for entry in ranked[limit:]:
        others.merge(entry)
    if others.count > 0:
        summaries.append(others.to_summary())
    return summaries
