from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import ConfigDict, Field, field_validator, model_validator

from src.shared.base import BaseSchema

DateBasis = Literal["booked", "travel"]


class AnalyticsRequest(BaseSchema):
    type: Optional[str] = None
    payload: Dict[str, Any] = Field(default_factory=dict)


class MonthWindowRequest(BaseSchema):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    year: int = Field(..., ge=2000, le=2100)
    month_from: int = Field(default=1, ge=1, le=12)
    month_to: int = Field(default=12, ge=1, le=12)


class DatedRequest(MonthWindowRequest):
    date_basis: DateBasis = Field(default="travel", alias="accesskey")

    @field_validator("date_basis", mode="before")
    @classmethod
    def normalize_date_basis(cls, value: object) -> str:
        # Only an explicit "booked" selects booking dates.
        return "booked" if value == "booked" else "travel"


class LeaderboardRequest(DatedRequest):
    branch: Optional[str] = None
    target_year: Optional[Union[int, str]] = None
    quarter: Optional[str] = None
    exclude_top_designation: bool = False


class BranchSummaryRequest(MonthWindowRequest):
    pass


class ConsultantDetailRequest(DatedRequest):
    name: str = Field(..., min_length=1)
    target_year: Optional[Union[int, str]] = None
    quarter: str


class CountryWiseRequest(BaseSchema):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    branch: Optional[str] = None
    date_from: date
    date_to: date

    @model_validator(mode="after")
    def check_date_range(self) -> "CountryWiseRequest":
        if self.date_from > self.date_to:
            raise ValueError("dateFrom must not be after dateTo")
        return self


class WelcomeMessageRequest(BaseSchema):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=5)


class ConsultantMetric(BaseSchema):
    name: str
    revenue: int
    booking_achieved: int
    margin_achieved: int
    booking_target: Optional[Union[int, float]] = None
    margin_target: Optional[Union[int, float]] = None
    booking_percentage: int
    margin_percentage: int
    is_booking_exceeded: bool
    is_margin_exceeded: bool


class LeaderboardResponse(BaseSchema):
    by_bookings: List[ConsultantMetric]
    by_margin: List[ConsultantMetric]
    error: bool = False


class BranchSummary(BaseSchema):
    branch: str
    total_revenue: int
    total_margin: int
    total_bookings: int
    consultant_count: int


class BranchSummaryTotals(BaseSchema):
    total_revenue: int
    total_margin: int
    total_bookings: int


class BranchSummaryResponse(BaseSchema):
    branches: List[BranchSummary]
    totals: BranchSummaryTotals


class ConsultantProfile(BaseSchema):
    id: Optional[str] = None
    name: str
    branch: Optional[str] = None
    designation: Optional[str] = None


class ConsultantMonthBreakdown(BaseSchema):
    month: int
    revenue: int
    bookings: int
    margin: int


class RecentBooking(BaseSchema):
    booking_id: Optional[Union[str, int]] = Field(default=None, alias="bookingID")
    destination: Optional[str] = None
    booking_value: int
    final_margin: int
    book_month: Optional[int] = None
    book_year: Optional[int] = None
    travel_month: Optional[int] = None
    travel_year: Optional[int] = None
    booked_date: Optional[str] = None
    status: Optional[str] = None


class ConsultantDetailResponse(BaseSchema):
    profile: ConsultantProfile
    summary: ConsultantMetric
    monthly: List[ConsultantMonthBreakdown]
    recent: List[RecentBooking]


class CountrySummary(BaseSchema):
    name: str
    count: int
    assignees: Dict[str, int]
    traveler_count: int
    assignee_travellers: Dict[str, int]


class CountryWiseResponse(BaseSchema):
    countries: List[CountrySummary]
    total_bookings: int = 0
    total_travellers: int = 0
    error: bool = False


class NotificationResult(BaseSchema):
    success: bool
    status_code: Optional[int] = None
    response: Optional[Any] = None
    error: Optional[str] = None


class DispatchStatus(str, Enum):
    OK = "ok"
    DEGRADED = "degraded"
    FAILED = "failed"


class DispatchResult(BaseSchema):
    success: bool
    status: DispatchStatus
    status_code: int = 200
    data: Optional[Any] = None
    error: Optional[str] = None
