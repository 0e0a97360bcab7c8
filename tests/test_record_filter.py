from __future__ import annotations

import asyncio

import pytest

from attendance_reports.core.errors import UnresolvableScopeError, UpstreamFetchError
from attendance_reports.models.scope import AttendanceRecord, District, FilterCriteria, MonthRange
from attendance_reports.services.record_filter import filter_attendance_records, filter_records_for_scope

COUNTS = (1, 1, 1, 1, 1, 1)


def make_record(
    record_id: int,
    *,
    counts: tuple[int, int, int, int, int, int],
    month: str = "January",
    region_id: int = 5,
    district_id: int = 10,
    group_id: int = 100,
    year: int = 2025,
) -> AttendanceRecord:
    men, women, youth_boys, youth_girls, children_boys, children_girls = counts
    return AttendanceRecord(
        id=record_id,
        state_id=1,
        region_id=region_id,
        old_group_id=None,
        group_id=group_id,
        district_id=district_id,
        year=year,
        month=month,
        week=1,
        men=men,
        women=women,
        youth_boys=youth_boys,
        youth_girls=youth_girls,
        children_boys=children_boys,
        children_girls=children_girls,
    )


class StubDirectory:
    """Serves a fixed district list; optionally fails like a broken upstream."""

    def __init__(self, districts: list[District], *, fail: bool = False) -> None:
        self.districts = districts
        self.fail = fail
        self.calls: list[int] = []

    async def districts_by_group(self, group_id: int) -> list[District]:
        self.calls.append(group_id)
        if self.fail:
            raise UpstreamFetchError("Could not load districts; please retry.")
        return [district for district in self.districts if district.group_id == group_id]


def test_month_range_selects_by_calendar_index_regardless_of_order() -> None:
    records = [
        make_record(1, counts=COUNTS, month="March"),
        make_record(2, counts=COUNTS, month="January"),
        make_record(3, counts=COUNTS, month="February"),
        make_record(4, counts=COUNTS, month="January"),
    ]

    january = filter_attendance_records(records, FilterCriteria(month_range=MonthRange(1, 1)))
    whole_year = filter_attendance_records(records, FilterCriteria(month_range=MonthRange(12, 1)))

    assert [record.id for record in january] == [2, 4]
    assert [record.id for record in whole_year] == [1, 2, 3, 4]


def test_criteria_combine_with_and_semantics() -> None:
    records = [
        make_record(1, counts=COUNTS, region_id=5, district_id=10, year=2025),
        make_record(2, counts=COUNTS, region_id=5, district_id=11, year=2025),
        make_record(3, counts=COUNTS, region_id=6, district_id=10, year=2025),
        make_record(4, counts=COUNTS, region_id=5, district_id=10, year=2024),
    ]

    matched = filter_attendance_records(records, FilterCriteria(region_id=5, district_id=10, year=2025))

    assert [record.id for record in matched] == [1]
    assert filter_attendance_records(records, FilterCriteria()) == records


def test_unknown_month_names_are_excluded_by_a_range() -> None:
    records = [make_record(1, counts=COUNTS, month="Jan"), make_record(2, counts=COUNTS, month="January")]

    matched = filter_attendance_records(records, FilterCriteria(month_range=MonthRange(1, 12)))

    assert [record.id for record in matched] == [2]


def test_group_district_restriction_awaits_directory() -> None:
    directory = StubDirectory(
        [District(id=10, name="Alpha", group_id=100), District(id=12, name="Moved", group_id=200)]
    )
    records = [
        make_record(1, counts=COUNTS, group_id=100, district_id=10),
        make_record(2, counts=COUNTS, group_id=100, district_id=12),
        make_record(3, counts=COUNTS, group_id=101, district_id=10),
    ]

    matched = asyncio.run(
        filter_records_for_scope(
            records,
            FilterCriteria(group_id=100),
            directory,
            restrict_to_group_districts=True,
        )
    )

    assert directory.calls == [100]
    assert [record.id for record in matched] == [1]


def test_group_district_restriction_requires_group() -> None:
    with pytest.raises(UnresolvableScopeError):
        asyncio.run(
            filter_records_for_scope([], FilterCriteria(), StubDirectory([]), restrict_to_group_districts=True)
        )


def test_upstream_failure_propagates() -> None:
    with pytest.raises(UpstreamFetchError):
        asyncio.run(
            filter_records_for_scope(
                [make_record(1, counts=COUNTS)],
                FilterCriteria(group_id=100),
                StubDirectory([], fail=True),
                restrict_to_group_districts=True,
            )
        )
