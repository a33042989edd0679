from __future__ import annotations

from datetime import date
from typing import List, Optional, Sequence

from src.core.appwrite import Query
from src.core.config import Settings
from src.models.analytics import BookingRecord, EmployeeRecord
from src.repositories.document_fetcher import DocumentStore, fetch_all_documents

# Appwrite caps the number of values in a single equal() query.
MAX_QUERY_VALUES = 100

BOOKING_SUMMARY_FIELDS = [
    "$id",
    "bookingID",
    "salesHandleName",
    "bookingValue",
    "finalMargin",
    "bookMonth",
    "bookYear",
    "travelMonth",
    "travelYear",
    "bookingCancelled",
    "branch",
]
BOOKING_DETAIL_FIELDS = BOOKING_SUMMARY_FIELDS + ["bookedDate", "destination", "status"]
BOOKING_COUNTRY_FIELDS = [
    "$id",
    "bookingID",
    "salesHandleName",
    "bookedDate",
    "bookingCancelled",
    "countries",
    "adults",
    "children",
]


class AnalyticsRepository:
    def __init__(self, store: DocumentStore, settings: Settings) -> None:
        self.store = store
        self.employee_collection_id = settings.appwrite_employee_collection_id
        self.booking_collection_id = settings.appwrite_booking_collection_id
        self.page_limit = settings.appwrite_page_limit
        self.max_pages = settings.appwrite_max_pages

    def list_eligible_employees(
        self, designations: Sequence[str], branch: Optional[str] = None
    ) -> List[EmployeeRecord]:
        queries = [
            Query.select(["$id", "name", "branch", "designation", "targets"]),
            Query.equal("designation", list(designations)),
        ]
        if branch:
            queries.append(Query.equal("branch", branch))
        rows = self._fetch(self.employee_collection_id, queries)
        return [EmployeeRecord.model_validate(row) for row in rows]

    def get_employee_by_name(self, name: str) -> Optional[EmployeeRecord]:
        rows = self._fetch(
            self.employee_collection_id,
            [
                Query.select(["$id", "name", "branch", "designation", "targets"]),
                Query.equal("name", name),
            ],
        )
        return EmployeeRecord.model_validate(rows[0]) if rows else None

    def list_consultant_bookings(
        self,
        names: Sequence[str],
        year: int,
        month_from: int,
        month_to: int,
        date_basis: str = "travel",
        fields: Optional[List[str]] = None,
    ) -> List[BookingRecord]:
        month_field, year_field = self._period_fields(date_basis)
        base_queries = [
            Query.greater_than_equal(month_field, month_from),
            Query.less_than_equal(month_field, month_to),
            Query.equal(year_field, year),
            Query.equal("bookingCancelled", False),
            Query.select(fields or BOOKING_SUMMARY_FIELDS),
        ]
        return self._fetch_for_consultants(names, base_queries)

    def list_bookings_for_months(
        self, year: int, month_from: int, month_to: int
    ) -> List[BookingRecord]:
        rows = self._fetch(
            self.booking_collection_id,
            [
                Query.greater_than_equal("bookMonth", month_from),
                Query.less_than_equal("bookMonth", month_to),
                Query.equal("bookYear", year),
                Query.equal("bookingCancelled", False),
                Query.select(BOOKING_SUMMARY_FIELDS),
            ],
        )
        return [BookingRecord.model_validate(row) for row in rows]

    def list_bookings_booked_between(
        self, names: Sequence[str], start_date: date, end_date: date
    ) -> List[BookingRecord]:
        base_queries = [
            Query.greater_than_equal("bookedDate", f"{start_date.isoformat()}T00:00:00.000+00:00"),
            Query.less_than_equal("bookedDate", f"{end_date.isoformat()}T23:59:59.999+00:00"),
            Query.equal("bookingCancelled", False),
            Query.select(BOOKING_COUNTRY_FIELDS),
        ]
        return self._fetch_for_consultants(names, base_queries)

    def _fetch_for_consultants(
        self, names: Sequence[str], base_queries: List[str]
    ) -> List[BookingRecord]:
        unique_names = list(dict.fromkeys(name for name in names if name))
        if not unique_names:
            return []
        bookings: List[BookingRecord] = []
        for start in range(0, len(unique_names), MAX_QUERY_VALUES):
            chunk = unique_names[start : start + MAX_QUERY_VALUES]
            rows = self._fetch(
                self.booking_collection_id,
                [*base_queries, Query.equal("salesHandleName", chunk)],
            )
            bookings.extend(BookingRecord.model_validate(row) for row in rows)
        return bookings

    def _fetch(self, collection_id: str, queries: List[str]) -> List[dict]:
        return fetch_all_documents(
            self.store,
            collection_id,
            queries,
            page_limit=self.page_limit,
            max_pages=self.max_pages,
        )

    @staticmethod
    def _period_fields(date_basis: str) -> tuple[str, str]:
        if date_basis == "booked":
            return "bookMonth", "bookYear"
        return "travelMonth", "travelYear"
