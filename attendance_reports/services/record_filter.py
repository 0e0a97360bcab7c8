"""Narrow attendance records to a scope and a year/month window."""

from __future__ import annotations

from collections.abc import Iterable

from attendance_reports.core.errors import UnresolvableScopeError
from attendance_reports.models.scope import AttendanceRecord, FilterCriteria
from attendance_reports.repositories.directory import OrgDirectory
from attendance_reports.services.months import month_index, normalize_range

_KEY_FIELDS: tuple[str, ...] = ("state_id", "region_id", "district_id", "group_id", "old_group_id", "year")


def _matches(record: AttendanceRecord, criteria: FilterCriteria, bounds: tuple[int, int] | None) -> bool:
    for field in _KEY_FIELDS:
        wanted = getattr(criteria, field)
        if wanted is not None and getattr(record, field) != wanted:
            return False
    if bounds is not None:
        index = month_index(record.month)
        if not bounds[0] <= index <= bounds[1]:
            return False
    return True


def filter_attendance_records(
    records: Iterable[AttendanceRecord],
    criteria: FilterCriteria,
) -> list[AttendanceRecord]:
    """Records matching every provided criterion, input order preserved.

    The month range is inclusive, compared on calendar index, and accepts
    reversed bounds.
    """

    bounds = None
    if criteria.month_range is not None:
        bounds = normalize_range(criteria.month_range.from_month, criteria.month_range.to_month)
    return [record for record in records if _matches(record, criteria, bounds)]


async def filter_records_for_scope(
    records: Iterable[AttendanceRecord],
    criteria: FilterCriteria,
    directory: OrgDirectory,
    *,
    restrict_to_group_districts: bool = False,
) -> list[AttendanceRecord]:
    """``filter_attendance_records`` plus an optional "districts under the group" restriction.

    The district list is fetched from the directory before any record is
    examined; fetch failures propagate to the caller.
    """

    if not restrict_to_group_districts:
        return filter_attendance_records(records, criteria)

    if criteria.group_id is None:
        raise UnresolvableScopeError("Select a group before filtering by its districts.")
    districts = await directory.districts_by_group(criteria.group_id)
    district_ids = {district.id for district in districts}
    return [
        record for record in filter_attendance_records(records, criteria) if record.district_id in district_ids
    ]
