from __future__ import annotations

import json
from datetime import date

import httpx
import pytest

from src.core.errors import NotFoundError
from src.schemas.analytics import (
    BranchSummaryRequest,
    ConsultantDetailRequest,
    CountryWiseRequest,
    LeaderboardRequest,
)
from src.services.analytics_service import AnalyticsService
from tests.fakes import BOOKINGS, EMPLOYEES, FakeDocumentStore, make_booking, make_employee


def _leaderboard_request(**overrides: object) -> LeaderboardRequest:
    payload = {
        "year": 2026,
        "targetYear": "2025",
        "quarter": "Q4",
        "monthFrom": 1,
        "monthTo": 3,
        "accesskey": "booked",
    }
    payload.update(overrides)
    return LeaderboardRequest.model_validate(payload)


def _seed_leaderboard(store: FakeDocumentStore) -> None:
    store.collections[EMPLOYEES] = [
        make_employee(
            "emp-a",
            "Asha",
            targets=[{"year": "2025", "quarter": "Q4", "totalBookings": 10, "margin": 1000}],
        ),
        make_employee("emp-b", "Ravi", branch="Kollam"),
    ]
    store.collections[BOOKINGS] = [
        make_booking(f"a-{index}", "Asha", booking_value="5000", final_margin="100")
        for index in range(12)
    ] + [
        make_booking(f"b-{index}", "Ravi", booking_value="2000", final_margin="50", branch="Kollam")
        for index in range(3)
    ]


def test_leaderboard_ranks_consultants_against_targets(
    store: FakeDocumentStore, service: AnalyticsService
) -> None:
    _seed_leaderboard(store)

    result = service.get_leaderboard(_leaderboard_request())

    assert result.error is False
    assert [metric.name for metric in result.by_bookings] == ["Asha", "Ravi"]
    asha, ravi = result.by_bookings
    assert asha.booking_achieved == 12
    assert asha.revenue == 60000
    assert asha.margin_achieved == 1200
    assert asha.booking_percentage == 120
    assert asha.margin_percentage == 120
    assert asha.is_booking_exceeded is True
    assert ravi.booking_target is None
    assert ravi.booking_percentage == 300
    assert ravi.is_booking_exceeded is True
    assert [metric.name for metric in result.by_margin] == ["Asha", "Ravi"]


def test_leaderboard_filters_by_travel_period_and_branch(
    store: FakeDocumentStore, service: AnalyticsService
) -> None:
    _seed_leaderboard(store)
    store.collections[BOOKINGS].append(
        make_booking("a-late", "Asha", travel_month=9, final_margin="999")
    )

    result = service.get_leaderboard(
        _leaderboard_request(branch="Kochi", accesskey="travel", monthFrom=2, monthTo=2)
    )

    assert [metric.name for metric in result.by_bookings] == ["Asha"]
    assert result.by_bookings[0].booking_achieved == 12
    booking_queries = store.calls_for(BOOKINGS)[0]
    assert any('"attribute":"travelMonth"' in query for query in booking_queries)
    assert any('"attribute":"travelYear"' in query for query in booking_queries)


def test_leaderboard_without_date_flag_uses_travel_period(
    store: FakeDocumentStore, service: AnalyticsService
) -> None:
    store.collections[EMPLOYEES] = [make_employee("emp-a", "Asha")]
    store.collections[BOOKINGS] = [make_booking("1", "Asha", book_month=5, travel_month=2)]

    result = service.get_leaderboard(
        LeaderboardRequest.model_validate(
            {"year": 2026, "quarter": "Q1", "monthFrom": 2, "monthTo": 2}
        )
    )

    assert [metric.name for metric in result.by_bookings] == ["Asha"]
    booking_queries = store.calls_for(BOOKINGS)[0]
    assert any('"attribute":"travelMonth"' in query for query in booking_queries)
    assert not any('"attribute":"bookMonth"' in query for query in booking_queries)


@pytest.mark.parametrize(
    "flag, expected",
    [("booked", "booked"), ("travel", "travel"), ("Booked", "travel"), (None, "travel")],
)
def test_date_flag_selects_booking_dates_only_when_booked(flag: object, expected: str) -> None:
    request = LeaderboardRequest.model_validate({"year": 2026, "accesskey": flag})

    assert request.date_basis == expected


def test_leaderboard_skips_cancelled_bookings(
    store: FakeDocumentStore, service: AnalyticsService
) -> None:
    _seed_leaderboard(store)
    store.collections[BOOKINGS].append(make_booking("b-x", "Ravi", bookingCancelled=True))

    result = service.get_leaderboard(_leaderboard_request())

    ravi = next(metric for metric in result.by_bookings if metric.name == "Ravi")
    assert ravi.booking_achieved == 3


def test_leaderboard_can_exclude_top_designation(
    store: FakeDocumentStore, service: AnalyticsService
) -> None:
    _seed_leaderboard(store)
    store.collections[EMPLOYEES].append(make_employee("emp-ceo", "Meera", designation="CEO"))
    store.collections[BOOKINGS].append(make_booking("c-1", "Meera"))

    included = service.get_leaderboard(_leaderboard_request())
    excluded = service.get_leaderboard(_leaderboard_request(excludeTopDesignation=True))

    assert "Meera" in [metric.name for metric in included.by_bookings]
    assert "Meera" not in [metric.name for metric in excluded.by_bookings]


def test_leaderboard_returns_error_flag_on_failure(
    store: FakeDocumentStore, service: AnalyticsService
) -> None:
    _seed_leaderboard(store)
    store.error = httpx.ConnectError("store unavailable")

    result = service.get_leaderboard(_leaderboard_request())

    assert result.error is True
    assert result.by_bookings == []
    assert result.by_margin == []


def test_leaderboard_malformed_target_is_absorbed(
    store: FakeDocumentStore, service: AnalyticsService
) -> None:
    _seed_leaderboard(store)
    store.collections[EMPLOYEES][0]["targets"] = ["{broken"]

    result = service.get_leaderboard(_leaderboard_request())

    assert result.error is True


def test_branch_summary_groups_and_counts_distinct_consultants(
    store: FakeDocumentStore, service: AnalyticsService
) -> None:
    store.collections[BOOKINGS] = [
        make_booking("1", "Asha", booking_value="1000", final_margin="100", branch="Kochi"),
        make_booking("2", "Asha", booking_value="1500", final_margin="150", branch="Kochi"),
        make_booking("3", "Ravi", booking_value="500", final_margin="50", branch="Kochi"),
        make_booking("4", "Meera", booking_value="9000", final_margin="900", branch="Kollam"),
        make_booking("5", "Meera", booking_value="100", branch="Kollam", book_month=6),
        make_booking("6", "Meera", booking_value="100", branch="Kollam", bookingCancelled=True),
    ]

    result = service.get_branch_summary(
        BranchSummaryRequest.model_validate({"year": 2026, "monthFrom": 1, "monthTo": 3})
    )

    assert [branch.branch for branch in result.branches] == ["Kollam", "Kochi"]
    kollam, kochi = result.branches
    assert kollam.total_revenue == 9000
    assert kollam.total_bookings == 1
    assert kollam.consultant_count == 1
    assert kochi.total_revenue == 3000
    assert kochi.total_margin == 300
    assert kochi.total_bookings == 3
    assert kochi.consultant_count == 2
    assert result.totals.total_revenue == 12000
    assert result.totals.total_bookings == 4


def test_branch_summary_propagates_store_errors(
    store: FakeDocumentStore, service: AnalyticsService
) -> None:
    store.error = httpx.ConnectError("store unavailable")

    with pytest.raises(httpx.ConnectError):
        service.get_branch_summary(BranchSummaryRequest(year=2026, month_from=1, month_to=3))


def test_consultant_detail_builds_monthly_breakdown_and_recent(
    store: FakeDocumentStore, service: AnalyticsService
) -> None:
    store.collections[EMPLOYEES] = [
        make_employee(
            "emp-a",
            "Asha",
            designation="Senior Travel Consultant",
            targets=[{"year": "2026", "quarter": "Q1", "totalBookings": 4, "margin": 1000}],
        ),
        make_employee("emp-a2", "Asha", branch="Kollam"),
    ]
    store.collections[BOOKINGS] = [
        make_booking(
            f"{index:02d}",
            "Asha",
            booking_value="1000",
            final_margin="100",
            book_month=3 if index < 8 else 1,
        )
        for index in range(12)
    ] + [make_booking("other", "Ravi", booking_value="1000")]

    result = service.get_consultant_detail(
        ConsultantDetailRequest.model_validate(
            {
                "name": "Asha",
                "year": 2026,
                "quarter": "Q1",
                "monthFrom": 1,
                "monthTo": 3,
                "accesskey": "booked",
            }
        )
    )

    assert result.profile.id == "emp-a"
    assert result.profile.branch == "Kochi"
    assert [(month.month, month.bookings) for month in result.monthly] == [(1, 4), (3, 8)]
    assert result.monthly[1].revenue == 8000
    assert result.summary.booking_achieved == 12
    assert result.summary.booking_percentage == 300
    assert result.summary.margin_percentage == 120
    assert len(result.recent) == 10
    assert result.recent[0].booking_id == "BK-11"
    assert result.recent[-1].booking_id == "BK-02"


def test_consultant_detail_unknown_name_raises_not_found(service: AnalyticsService) -> None:
    with pytest.raises(NotFoundError):
        service.get_consultant_detail(
            ConsultantDetailRequest(name="Nobody", year=2026, quarter="Q1")
        )


def test_country_wise_aggregates_branch_bookings_in_date_range(
    store: FakeDocumentStore, service: AnalyticsService
) -> None:
    store.collections[EMPLOYEES] = [
        make_employee("emp-a", "Asha"),
        make_employee("emp-b", "Ravi", branch="Kollam"),
    ]
    store.collections[BOOKINGS] = [
        make_booking("1", "Asha", countries=["DUBAI", "Thailand"], adults=2, children=1),
        make_booking("2", "Asha", countries=["United Arab Emirates"], adults="2", children=""),
        make_booking("3", "Ravi", countries=["Dubai"], adults=4),
        make_booking("4", "Asha", countries=["Japan"], book_month=5),
    ]

    result = service.get_country_wise(
        CountryWiseRequest.model_validate(
            {"branch": "Kochi", "dateFrom": "2026-01-01", "dateTo": "2026-01-31"}
        )
    )

    assert result.error is False
    assert result.total_bookings == 2
    assert result.total_travellers == 5
    assert [country.name for country in result.countries] == ["Dubai", "Thailand"]
    dubai = result.countries[0]
    assert dubai.count == 2
    assert dubai.assignees == {"Asha": 2}
    assert dubai.traveler_count == 5
    date_queries = [json.loads(query) for query in store.calls_for(BOOKINGS)[0]]
    upper_bound = next(query for query in date_queries if query["method"] == "lessThanEqual")
    assert upper_bound["values"] == ["2026-01-31T23:59:59.999+00:00"]


def test_country_wise_returns_error_flag_on_failure(
    store: FakeDocumentStore, service: AnalyticsService
) -> None:
    store.error = httpx.ConnectError("store unavailable")

    result = service.get_country_wise(
        CountryWiseRequest(date_from=date(2026, 1, 1), date_to=date(2026, 1, 31))
    )

    assert result.error is True
    assert result.countries == []
