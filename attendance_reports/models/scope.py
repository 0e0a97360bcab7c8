"""Immutable snapshots of organizational units, attendance submissions and report scopes.

The org-unit snapshots carry both the numeric parent key and, where the feed
provides it, the denormalized parent name. Filtering prefers the numeric key and
falls back to the name (see ``services.scope_filters``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

MONTH_NAMES: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


@dataclass(frozen=True)
class State:
    id: int
    name: str


@dataclass(frozen=True)
class Region:
    id: int
    name: str
    state_id: int | None = None
    state: str | None = None


@dataclass(frozen=True)
class OldGroup:
    id: int
    name: str
    state_id: int | None = None
    region_id: int | None = None
    state: str | None = None
    region: str | None = None


@dataclass(frozen=True)
class Group:
    id: int
    name: str
    region_id: int | None = None
    old_group_id: int | None = None
    district_id: int | None = None
    region: str | None = None
    old_group: str | None = None


@dataclass(frozen=True)
class District:
    id: int
    name: str
    group_id: int | None = None
    group: str | None = None


OrgUnit = Union[State, Region, OldGroup, Group, District]


@dataclass(frozen=True)
class AttendanceRecord:
    """One district submission for one week of a month."""

    id: int
    state_id: int
    region_id: int
    old_group_id: int | None
    group_id: int
    district_id: int
    year: int
    month: str
    week: int
    men: int = 0
    women: int = 0
    youth_boys: int = 0
    youth_girls: int = 0
    children_boys: int = 0
    children_girls: int = 0
    service_type: str = ""
    new_comers: int = 0
    tithe_offering: int = 0


@dataclass(frozen=True)
class YouthWeeklyRecord:
    """Youth ministry submission; weekly rows split members from visitors."""

    id: int
    state_id: int
    region_id: int
    old_group_id: int | None
    group_id: int
    district_id: int
    year: int
    month: str
    week: int | None
    attendance_type: str = "weekly"
    male: int = 0
    female: int = 0
    member_boys: int = 0
    member_girls: int = 0
    visitor_boys: int = 0
    visitor_girls: int = 0


@dataclass(frozen=True)
class MonthRange:
    """Inclusive calendar-index range; bounds may arrive reversed or out of 1..12."""

    from_month: int
    to_month: int


@dataclass(frozen=True)
class MonthSpec:
    """Which calendar months a report covers.

    Exactly one of ``single``, ``range`` or ``months`` is set. A spec with none
    of them set means "every month present in the data".
    """

    single: str | None = None
    range: MonthRange | None = None
    months: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        populated = [value for value in (self.single, self.range, self.months) if value is not None]
        if len(populated) > 1:
            raise ValueError("MonthSpec accepts only one of single, range or months.")
        if self.single is not None and self.single not in MONTH_NAMES:
            raise ValueError(f"Unknown month name: {self.single!r}.")
        if self.months is not None:
            unknown = [name for name in self.months if name not in MONTH_NAMES]
            if unknown:
                raise ValueError(f"Unknown month names: {', '.join(map(repr, unknown))}.")

    @classmethod
    def of_single(cls, month: str) -> MonthSpec:
        return cls(single=month)

    @classmethod
    def of_range(cls, from_month: int, to_month: int) -> MonthSpec:
        return cls(range=MonthRange(from_month=from_month, to_month=to_month))

    @classmethod
    def of_months(cls, months: list[str] | tuple[str, ...]) -> MonthSpec:
        return cls(months=tuple(months))


@dataclass(frozen=True)
class ScopeSelection:
    """Resolved organizational scope and time window of one report request."""

    state_id: int | None = None
    region_id: int | None = None
    old_group_id: int | None = None
    group_id: int | None = None
    district_id: int | None = None
    year: int | None = None
    month_spec: MonthSpec = MonthSpec()


@dataclass(frozen=True)
class FilterCriteria:
    """Record filter; ``None`` fields impose no constraint."""

    state_id: int | None = None
    region_id: int | None = None
    district_id: int | None = None
    group_id: int | None = None
    old_group_id: int | None = None
    year: int | None = None
    month_range: MonthRange | None = None
