from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Optional, Set

from src.analytics.bookings import (
    ConsultantTotals,
    aggregate_bookings,
    build_consultant_metric,
    parse_int,
)
from src.analytics.countries import aggregate_countries, fold_top_countries, traveller_count
from src.analytics.targets import parse_target
from src.core.errors import NotFoundError
from src.models.analytics import BookingRecord, PeriodTarget
from src.repositories.analytics_repository import BOOKING_DETAIL_FIELDS, AnalyticsRepository
from src.schemas.analytics import (
    BranchSummary,
    BranchSummaryRequest,
    BranchSummaryResponse,
    BranchSummaryTotals,
    ConsultantDetailRequest,
    ConsultantDetailResponse,
    ConsultantMonthBreakdown,
    ConsultantProfile,
    CountryWiseRequest,
    CountryWiseResponse,
    LeaderboardRequest,
    LeaderboardResponse,
    RecentBooking,
)

logger = logging.getLogger(__name__)

DESIGNATIONS = [
    "Senior Travel Consultant",
    "Travel Consultant",
    "Junior Travel Consultant",
    "Branch Head",
    "Branch Director",
    "CEO",
]
TOP_DESIGNATION = DESIGNATIONS[-1]
UNASSIGNED_BRANCH = "Unassigned"
RECENT_BOOKINGS_LIMIT = 10


@dataclass
class BranchTotals:
    branch: str
    total_revenue: int = 0
    total_margin: int = 0
    total_bookings: int = 0
    consultants: Set[str] = field(default_factory=set)


@dataclass
class MonthTotals:
    revenue: int = 0
    bookings: int = 0
    margin: int = 0


def empty_leaderboard_response() -> LeaderboardResponse:
    return LeaderboardResponse(by_bookings=[], by_margin=[], error=True)


def empty_country_wise_response() -> CountryWiseResponse:
    return CountryWiseResponse(countries=[], error=True)


class AnalyticsService:
    def __init__(self, repository: AnalyticsRepository) -> None:
        self.repository = repository

    def get_leaderboard(self, request: LeaderboardRequest) -> LeaderboardResponse:
        try:
            designations = [
                designation
                for designation in DESIGNATIONS
                if not (request.exclude_top_designation and designation == TOP_DESIGNATION)
            ]
            employees = self.repository.list_eligible_employees(designations, request.branch)
            target_year = request.target_year or request.year

            targets: Dict[str, PeriodTarget] = {}
            for employee in employees:
                target = parse_target(employee, target_year, request.quarter)
                if target:
                    targets[employee.name] = target

            bookings = self.repository.list_consultant_bookings(
                names=[employee.name for employee in employees],
                year=request.year,
                month_from=request.month_from,
                month_to=request.month_to,
                date_basis=request.date_basis,
            )
            totals = aggregate_bookings(bookings)
            metrics = [
                build_consultant_metric(entry, targets.get(name)) for name, entry in totals.items()
            ]
            return LeaderboardResponse(
                by_bookings=sorted(metrics, key=lambda metric: metric.booking_achieved, reverse=True),
                by_margin=sorted(metrics, key=lambda metric: metric.margin_achieved, reverse=True),
            )
        except Exception:
            logger.exception("Leaderboard failed for %s", request.model_dump(by_alias=True))
            return empty_leaderboard_response()

    def get_branch_summary(self, request: BranchSummaryRequest) -> BranchSummaryResponse:
        bookings = self.repository.list_bookings_for_months(
            request.year, request.month_from, request.month_to
        )
        branches: Dict[str, BranchTotals] = {}
        for booking in bookings:
            branch = booking.branch or UNASSIGNED_BRANCH
            if branch not in branches:
                branches[branch] = BranchTotals(branch=branch)
            entry = branches[branch]
            entry.total_revenue += parse_int(booking.booking_value)
            entry.total_margin += parse_int(booking.final_margin)
            entry.total_bookings += 1
            if booking.sales_handle_name:
                entry.consultants.add(booking.sales_handle_name)

        summaries = [
            BranchSummary(
                branch=entry.branch,
                total_revenue=entry.total_revenue,
                total_margin=entry.total_margin,
                total_bookings=entry.total_bookings,
                consultant_count=len(entry.consultants),
            )
            for entry in sorted(branches.values(), key=lambda item: item.total_revenue, reverse=True)
        ]
        return BranchSummaryResponse(
            branches=summaries,
            totals=BranchSummaryTotals(
                total_revenue=sum(summary.total_revenue for summary in summaries),
                total_margin=sum(summary.total_margin for summary in summaries),
                total_bookings=sum(summary.total_bookings for summary in summaries),
            ),
        )

    def get_consultant_detail(self, request: ConsultantDetailRequest) -> ConsultantDetailResponse:
        employee = self.repository.get_employee_by_name(request.name)
        if not employee:
            raise NotFoundError(f"Consultant {request.name} not found")
        target = parse_target(employee, request.target_year or request.year, request.quarter)

        bookings = self.repository.list_consultant_bookings(
            names=[employee.name],
            year=request.year,
            month_from=request.month_from,
            month_to=request.month_to,
            date_basis=request.date_basis,
            fields=BOOKING_DETAIL_FIELDS,
        )

        totals = ConsultantTotals(name=employee.name)
        months: Dict[int, MonthTotals] = defaultdict(MonthTotals)
        for booking in bookings:
            totals.add(booking)
            month = self._booking_month(booking, request.date_basis)
            if month is None:
                continue
            months[month].revenue += parse_int(booking.booking_value)
            months[month].bookings += 1
            months[month].margin += parse_int(booking.final_margin)

        # Positional: the last fetched bookings, newest fetch first.
        recent = [self._to_recent_booking(booking) for booking in bookings[-RECENT_BOOKINGS_LIMIT:]]
        recent.reverse()

        return ConsultantDetailResponse(
            profile=ConsultantProfile(
                id=employee.id,
                name=employee.name,
                branch=employee.branch,
                designation=employee.designation,
            ),
            summary=build_consultant_metric(totals, target),
            monthly=[
                ConsultantMonthBreakdown(
                    month=month,
                    revenue=months[month].revenue,
                    bookings=months[month].bookings,
                    margin=months[month].margin,
                )
                for month in sorted(months)
            ],
            recent=recent,
        )

    def get_country_wise(self, request: CountryWiseRequest) -> CountryWiseResponse:
        try:
            employees = self.repository.list_eligible_employees(DESIGNATIONS, request.branch)
            bookings = self.repository.list_bookings_booked_between(
                names=[employee.name for employee in employees],
                start_date=request.date_from,
                end_date=request.date_to,
            )
            countries = fold_top_countries(aggregate_countries(bookings))
            return CountryWiseResponse(
                countries=countries,
                total_bookings=len(bookings),
                total_travellers=sum(traveller_count(booking) for booking in bookings),
            )
        except Exception:
            logger.exception("Country-wise report failed for %s", request.model_dump(by_alias=True))
            return empty_country_wise_response()

    @staticmethod
    def _booking_month(booking: BookingRecord, date_basis: str) -> Optional[int]:
        return booking.book_month if date_basis == "booked" else booking.travel_month

    @staticmethod
    def _to_recent_booking(booking: BookingRecord) -> RecentBooking:
        return RecentBooking(
            booking_id=booking.booking_id,
            destination=booking.destination,
            booking_value=parse_int(booking.booking_value),
            final_margin=parse_int(booking.final_margin),
            book_month=booking.book_month,
            book_year=booking.book_year,
            travel_month=booking.travel_month,
            travel_year=booking.travel_year,
            booked_date=booking.booked_date,
            status=booking.status,
        )
