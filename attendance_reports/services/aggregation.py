"""Headcount roll-ups shared by every report level."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from attendance_reports.models.scope import AttendanceRecord

INDEXED_FIELDS: tuple[str, ...] = (
    "state_id",
    "region_id",
    "old_group_id",
    "group_id",
    "district_id",
    "year",
    "month",
    "week",
)


@dataclass(frozen=True)
class AggregateTotals:
    men: int = 0
    women: int = 0
    adults_total: int = 0
    youth_boys: int = 0
    youth_girls: int = 0
    youths_total: int = 0
    total_adults: int = 0
    children_boys: int = 0
    children_girls: int = 0
    children_total: int = 0
    grand_total: int = 0

    def as_row(self) -> list[int]:
        """Numeric cells in sheet column order (i) through (vii)&(x)."""

        return [
            self.men,
            self.women,
            self.adults_total,
            self.youth_boys,
            self.youth_girls,
            self.youths_total,
            self.total_adults,
            self.children_boys,
            self.children_girls,
            self.children_total,
            self.grand_total,
        ]


def sum_for(records: Iterable[AttendanceRecord]) -> AggregateTotals:
    """Sum headcounts and derive the sub-totals; empty input yields all zeros."""

    men = women = youth_boys = youth_girls = children_boys = children_girls = 0
    for record in records:
        men += record.men
        women += record.women
        youth_boys += record.youth_boys
        youth_girls += record.youth_girls
        children_boys += record.children_boys
        children_girls += record.children_girls

    adults_total = men + women
    youths_total = youth_boys + youth_girls
    # "Total Adults" includes youths.
    total_adults = adults_total + youths_total
    children_total = children_boys + children_girls
    return AggregateTotals(
        men=men,
        women=women,
        adults_total=adults_total,
        youth_boys=youth_boys,
        youth_girls=youth_girls,
        youths_total=youths_total,
        total_adults=total_adults,
        children_boys=children_boys,
        children_girls=children_girls,
        children_total=children_total,
        grand_total=total_adults + children_total,
    )


@dataclass(frozen=True)
class AttendanceStats:
    total_attendance: int
    total_men: int
    total_women: int
    total_youth_boys: int
    total_youth_girls: int
    total_children_boys: int
    total_children_girls: int
    average_attendance: int
    record_count: int


def calculate_attendance_stats(records: Sequence[AttendanceRecord]) -> AttendanceStats:
    totals = sum_for(records)
    count = len(records)
    return AttendanceStats(
        total_attendance=totals.grand_total,
        total_men=totals.men,
        total_women=totals.women,
        total_youth_boys=totals.youth_boys,
        total_youth_girls=totals.youth_girls,
        total_children_boys=totals.children_boys,
        total_children_girls=totals.children_girls,
        average_attendance=round(totals.grand_total / count) if count else 0,
        record_count=count,
    )


class AttendanceIndex:
    """Equality lookup of records by organizational key, year, month and week.

    Each indexed field maps a value to the records carrying it; ``select``
    starts from the smallest bucket among the requested keys and checks the
    remaining keys per record. Insertion order is preserved.
    """

    def __init__(self, records: Iterable[AttendanceRecord]) -> None:
        self._records: list[AttendanceRecord] = list(records)
        self._buckets: dict[str, dict[object, list[AttendanceRecord]]] = {
            field: defaultdict(list) for field in INDEXED_FIELDS
        }
        for record in self._records:
            for field in INDEXED_FIELDS:
                self._buckets[field][getattr(record, field)].append(record)

    def __len__(self) -> int:
        return len(self._records)

    def select(self, **criteria: object) -> list[AttendanceRecord]:
        wanted = {field: value for field, value in criteria.items() if value is not None}
        unknown = set(wanted) - set(INDEXED_FIELDS)
        if unknown:
            raise KeyError(f"Unsupported index fields: {', '.join(sorted(unknown))}")
        if not wanted:
            return list(self._records)

        candidates = min(
            (self._buckets[field].get(value, []) for field, value in wanted.items()),
            key=len,
        )
        return [
            record
            for record in candidates
            if all(getattr(record, field) == value for field, value in wanted.items())
        ]
