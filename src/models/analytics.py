from __future__ import annotations

from typing import List, Optional, Union

from pydantic import Field, field_validator

from src.shared.base import StoreRecord

NumericValue = Union[int, float, str]


class PeriodTarget(StoreRecord):
    year: str
    quarter: str
    total_bookings: Optional[Union[int, float]] = None
    margin: Optional[Union[int, float]] = None


class EmployeeRecord(StoreRecord):
    id: Optional[str] = Field(default=None, alias="$id")
    name: str
    branch: Optional[str] = None
    designation: Optional[str] = None
    targets: List[str] = Field(default_factory=list)

    @field_validator("targets", mode="before")
    @classmethod
    def default_targets(cls, value: object) -> object:
        return [] if value is None else value


class BookingRecord(StoreRecord):
    id: Optional[str] = Field(default=None, alias="$id")
    booking_id: Optional[Union[str, int]] = Field(default=None, alias="bookingID")
    sales_handle_name: Optional[str] = None
    booking_value: Optional[NumericValue] = None
    final_margin: Optional[NumericValue] = None
    book_month: Optional[int] = None
    book_year: Optional[int] = None
    travel_month: Optional[int] = None
    travel_year: Optional[int] = None
    booked_date: Optional[str] = None
    booking_cancelled: Optional[bool] = None
    branch: Optional[str] = None
    destination: Optional[str] = None
    countries: List[str] = Field(default_factory=list)
    adults: Optional[NumericValue] = None
    children: Optional[NumericValue] = None
    status: Optional[str] = None

    @field_validator("countries", mode="before")
    @classmethod
    def default_countries(cls, value: object) -> object:
        return [] if value is None else value
