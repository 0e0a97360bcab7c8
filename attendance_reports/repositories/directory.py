"""Async data-access boundary consumed by the report core."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from attendance_reports.core.errors import UpstreamFetchError
from attendance_reports.models.scope import (
    AttendanceRecord,
    District,
    Group,
    OldGroup,
    Region,
    State,
    YouthWeeklyRecord,
)
from attendance_reports.repositories.org_repository import OrgRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OrgDirectory(Protocol):
    """Org-unit lists, by-parent lists and attendance snapshots."""

    async def list_states(self) -> list[State]: ...

    async def list_regions(self) -> list[Region]: ...

    async def list_old_groups(self) -> list[OldGroup]: ...

    async def list_groups(self) -> list[Group]: ...

    async def list_districts(self) -> list[District]: ...

    async def regions_by_state(self, state_id: int) -> list[Region]: ...

    async def old_groups_by_region(self, region_id: int) -> list[OldGroup]: ...

    async def groups_by_old_group(self, old_group_id: int) -> list[Group]: ...

    async def groups_by_region(self, region_id: int) -> list[Group]: ...

    async def districts_by_group(self, group_id: int) -> list[District]: ...

    async def attendance_records(self, *, year: int | None = None) -> list[AttendanceRecord]: ...

    async def youth_records(
        self, *, region_id: int, years: tuple[int, ...], months: tuple[str, ...]
    ) -> list[YouthWeeklyRecord]: ...


class SqlOrgDirectory:
    """``OrgDirectory`` backed by the SQL repository.

    Database failures surface as ``UpstreamFetchError`` so callers can report a
    single retryable message.
    """

    def __init__(self, db: Session) -> None:
        self.repository = OrgRepository(db)

    def _fetch(self, what: str, loader: Callable[[], T]) -> T:
        try:
            return loader()
        except SQLAlchemyError as exc:
            logger.error("Failed to load %s", what, exc_info=exc)
            raise UpstreamFetchError(f"Could not load {what}; please retry.") from exc

    async def list_states(self) -> list[State]:
        return self._fetch("states", self.repository.list_states)

    async def list_regions(self) -> list[Region]:
        return self._fetch("regions", self.repository.list_regions)

    async def list_old_groups(self) -> list[OldGroup]:
        return self._fetch("old groups", self.repository.list_old_groups)

    async def list_groups(self) -> list[Group]:
        return self._fetch("groups", self.repository.list_groups)

    async def list_districts(self) -> list[District]:
        return self._fetch("districts", self.repository.list_districts)

    async def regions_by_state(self, state_id: int) -> list[Region]:
        return self._fetch("regions", lambda: self.repository.list_regions(state_id=state_id))

    async def old_groups_by_region(self, region_id: int) -> list[OldGroup]:
        return self._fetch("old groups", lambda: self.repository.list_old_groups(region_id=region_id))

    async def groups_by_old_group(self, old_group_id: int) -> list[Group]:
        return self._fetch("groups", lambda: self.repository.list_groups(old_group_id=old_group_id))

    async def groups_by_region(self, region_id: int) -> list[Group]:
        return self._fetch("groups", lambda: self.repository.list_groups(region_id=region_id))

    async def districts_by_group(self, group_id: int) -> list[District]:
        return self._fetch("districts", lambda: self.repository.list_districts(group_id=group_id))

    async def attendance_records(self, *, year: int | None = None) -> list[AttendanceRecord]:
        return self._fetch("attendance records", lambda: self.repository.list_attendance(year=year))

    async def youth_records(
        self, *, region_id: int, years: tuple[int, ...], months: tuple[str, ...]
    ) -> list[YouthWeeklyRecord]:
        return self._fetch(
            "youth attendance records",
            lambda: self.repository.list_youth_attendance(region_id=region_id, years=years, months=months),
        )
