"""Report-sheet layouts: cell matrix plus widths, merges and style tags.

The five scope sheets (state, region, old group, group, district) share one
builder driven by ``ScopeSheetDescriptor``; their column and merge templates
are data. The youth monthly sheet has its own weeks-as-columns template.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum

from attendance_reports.models.scope import AttendanceRecord, Group, MonthSpec, OrgUnit, YouthWeeklyRecord
from attendance_reports.services.aggregation import AttendanceIndex, sum_for
from attendance_reports.services.months import build_subtitle, months_to_use, previous_month
from attendance_reports.services.scope_filters import (
    get_districts_by_group,
    get_groups_by_old_group,
    get_old_groups_by_region,
    get_regions_by_state,
)

Cell = str | int | float

COLUMN_COUNT = 13
HEADER_ROW_COUNT = 7
WEEK_NUMBERS: tuple[int, ...] = (1, 2, 3, 4, 5)
SUBTOTAL_LABEL = "SubTotal"


class StyleTag(str, Enum):
    TITLE = "title"
    HEADER = "header"
    SUBTOTAL_LABEL = "subtotal_label"
    SUBTOTAL = "subtotal"
    SUBTOTAL_NUMBER = "subtotal_number"
    WEEK_LABEL = "week_label"


class IterationUnit(str, Enum):
    CHILDREN = "children"
    WEEKS = "weeks"


@dataclass(frozen=True)
class MergeRange:
    start_row: int
    start_col: int
    end_row: int
    end_col: int

    @property
    def is_single_cell(self) -> bool:
        return self.start_row == self.end_row and self.start_col == self.end_col


@dataclass(frozen=True)
class SheetLayout:
    rows: tuple[tuple[Cell, ...], ...]
    column_widths: tuple[int, ...]
    merges: tuple[MergeRange, ...]
    styles: dict[tuple[int, int], StyleTag] = field(default_factory=dict)
    sheet_name: str = "Report"

    def style_at(self, row: int, col: int) -> StyleTag | None:
        return self.styles.get((row, col))

    def to_dict(self) -> dict[str, object]:
        return {
            "sheet_name": self.sheet_name,
            "rows": [list(row) for row in self.rows],
            "column_widths": list(self.column_widths),
            "merges": [
                {
                    "start_row": merge.start_row,
                    "start_col": merge.start_col,
                    "end_row": merge.end_row,
                    "end_col": merge.end_col,
                }
                for merge in self.merges
            ],
            "styles": [
                {"row": row, "col": col, "style": tag.value} for (row, col), tag in sorted(self.styles.items())
            ],
        }


ChildSelector = Callable[[OrgUnit, Sequence[OrgUnit]], list[OrgUnit]]


@dataclass(frozen=True)
class ScopeSheetDescriptor:
    """Per-level template of a scope sheet.

    ``scope_field`` ties records to the scope unit, ``child_field`` ties them to
    one row's child unit.
    """

    kind: str
    title_suffix: str
    first_column_label: str
    scope_field: str
    child_field: str
    child_selector: ChildSelector
    iteration_unit: IterationUnit
    column_widths: tuple[int, ...]
    merges: tuple[MergeRange, ...]

    @property
    def sheet_name(self) -> str:
        return f"{self.title_suffix} Report"


SCOPE_COLUMN_WIDTHS: tuple[int, ...] = (25, 12, 8, 10, 10, 8, 10, 10, 12, 10, 10, 10, 12)
DISTRICT_COLUMN_WIDTHS: tuple[int, ...] = (30,) + SCOPE_COLUMN_WIDTHS[1:]

_TITLE_MERGES: tuple[MergeRange, ...] = (
    MergeRange(0, 0, 0, COLUMN_COUNT - 1),
    MergeRange(1, 0, 1, COLUMN_COUNT - 1),
)
FULL_HEADER_MERGES: tuple[MergeRange, ...] = _TITLE_MERGES + (
    MergeRange(3, 2, 3, 4),
    MergeRange(3, 5, 3, 7),
    MergeRange(3, 8, 3, 8),
    MergeRange(3, 9, 3, 11),
    MergeRange(3, 12, 3, 12),
    MergeRange(4, 8, 4, 8),
    MergeRange(4, 12, 4, 12),
)
COMPACT_HEADER_MERGES: tuple[MergeRange, ...] = _TITLE_MERGES + (
    MergeRange(3, 2, 3, 4),
    MergeRange(3, 5, 3, 7),
    MergeRange(3, 9, 3, 11),
)

SCOPE_SHEETS: dict[str, ScopeSheetDescriptor] = {
    "state": ScopeSheetDescriptor(
        kind="state",
        title_suffix="State",
        first_column_label="Regions",
        scope_field="state_id",
        child_field="region_id",
        child_selector=get_regions_by_state,
        iteration_unit=IterationUnit.CHILDREN,
        column_widths=SCOPE_COLUMN_WIDTHS,
        merges=FULL_HEADER_MERGES,
    ),
    "region": ScopeSheetDescriptor(
        kind="region",
        title_suffix="Region",
        first_column_label="Old Groups",
        scope_field="region_id",
        child_field="old_group_id",
        child_selector=get_old_groups_by_region,
        iteration_unit=IterationUnit.CHILDREN,
        column_widths=SCOPE_COLUMN_WIDTHS,
        merges=FULL_HEADER_MERGES,
    ),
    "old_group": ScopeSheetDescriptor(
        kind="old_group",
        title_suffix="Old Group",
        first_column_label="Groups",
        scope_field="old_group_id",
        child_field="group_id",
        child_selector=get_groups_by_old_group,
        iteration_unit=IterationUnit.CHILDREN,
        column_widths=SCOPE_COLUMN_WIDTHS,
        merges=COMPACT_HEADER_MERGES,
    ),
    "group": ScopeSheetDescriptor(
        kind="group",
        title_suffix="Group",
        first_column_label="Districts",
        scope_field="group_id",
        child_field="district_id",
        child_selector=get_districts_by_group,
        iteration_unit=IterationUnit.CHILDREN,
        column_widths=SCOPE_COLUMN_WIDTHS,
        merges=COMPACT_HEADER_MERGES,
    ),
    # Scope unit is the group; each of its districts is broken into weekly rows.
    "district": ScopeSheetDescriptor(
        kind="district",
        title_suffix="District",
        first_column_label="Districts",
        scope_field="group_id",
        child_field="district_id",
        child_selector=get_districts_by_group,
        iteration_unit=IterationUnit.WEEKS,
        column_widths=DISTRICT_COLUMN_WIDTHS,
        merges=COMPACT_HEADER_MERGES,
    ),
}


def _blank_row(width: int = COLUMN_COUNT) -> list[Cell]:
    return [""] * width


def _padded(cells: list[Cell], width: int = COLUMN_COUNT) -> list[Cell]:
    return cells + [""] * (width - len(cells))


def scope_header_rows(title: str, subtitle: str, first_column_label: str) -> list[list[Cell]]:
    """Title, subtitle, spacer and the four-row compound column header."""

    return [
        _padded([title]),
        _padded([subtitle]),
        _blank_row(),
        ["", "", "Adults", "", "", "Youths", "", "", "Total", "Children", "", "", "Grand"],
        ["", "", "", "", "", "", "", "", "Adults", "", "", "", "Total"],
        [
            first_column_label,
            "Month",
            "(i)",
            "(ii)",
            "(iii)",
            "(iv)",
            "(v)",
            "(vi)",
            "(vii)",
            "(viii)",
            "(ix)",
            "(x)",
            "(vii)&(x)",
        ],
        ["", "", "Men", "Women", "Total", "Boys", "Girls", "Total", "(iii)&(vi)", "Boys", "Girls", "Total", ""],
    ]


def _tag_rows(styles: dict[tuple[int, int], StyleTag], rows: Iterable[int], width: int, tag: StyleTag) -> None:
    for row in rows:
        for col in range(width):
            styles[(row, col)] = tag


def _tag_subtotal_row(styles: dict[tuple[int, int], StyleTag], row: int) -> None:
    styles[(row, 0)] = StyleTag.SUBTOTAL_LABEL
    styles[(row, 1)] = StyleTag.SUBTOTAL
    for col in range(2, COLUMN_COUNT):
        styles[(row, col)] = StyleTag.SUBTOTAL_NUMBER


def build_scope_sheet(
    descriptor: ScopeSheetDescriptor,
    *,
    scope_unit: OrgUnit,
    candidates: Sequence[OrgUnit],
    records: Iterable[AttendanceRecord],
    month_spec: MonthSpec,
    year: int,
    organization_name: str,
    title_name: str | None = None,
) -> SheetLayout:
    """Lay out one scope sheet.

    For every month: one row per child (or per child and week), then a
    sub-total row computed over the whole scope for that month, then a blank
    separator row. An empty month spec uses the months present in the scope.
    """

    children = descriptor.child_selector(scope_unit, candidates)
    index = AttendanceIndex(
        record
        for record in records
        if record.year == year and getattr(record, descriptor.scope_field) == scope_unit.id
    )
    available = [record.month for record in index.select()]
    months = months_to_use(month_spec, available=available)

    title = f"{organization_name}, {title_name or scope_unit.name} ({descriptor.title_suffix})"
    subtitle = build_subtitle(month_spec, year, available=available)
    rows = scope_header_rows(title, subtitle, descriptor.first_column_label)

    styles: dict[tuple[int, int], StyleTag] = {}
    _tag_rows(styles, range(0, 2), COLUMN_COUNT, StyleTag.TITLE)
    _tag_rows(styles, range(3, HEADER_ROW_COUNT), COLUMN_COUNT, StyleTag.HEADER)

    for month in months:
        for child in children:
            child_filter = {descriptor.child_field: child.id}
            if descriptor.iteration_unit is IterationUnit.WEEKS:
                for week in WEEK_NUMBERS:
                    totals = sum_for(index.select(month=month, week=week, **child_filter))
                    rows.append([f"{child.name} (Week {week})", month, *totals.as_row()])
            else:
                totals = sum_for(index.select(month=month, **child_filter))
                rows.append([child.name, month, *totals.as_row()])

        _tag_subtotal_row(styles, len(rows))
        rows.append([SUBTOTAL_LABEL, "", *sum_for(index.select(month=month)).as_row()])
        rows.append(_blank_row())

    return SheetLayout(
        rows=tuple(tuple(row) for row in rows),
        column_widths=descriptor.column_widths,
        merges=descriptor.merges,
        styles=styles,
        sheet_name=descriptor.sheet_name,
    )


# ---------- Youth monthly template ----------
YOUTH_COLUMN_COUNT = 17
YOUTH_HEADER_ROW_COUNT = 4
YOUTH_WEEK_COLUMNS: dict[int, int] = {week: 5 + 2 * (week - 1) for week in WEEK_NUMBERS}
YOUTH_COLUMN_WIDTHS: tuple[int, ...] = (22,) + (10,) * 14 + (12, 12)
YOUTH_MERGES: tuple[MergeRange, ...] = (
    MergeRange(0, 0, 0, YOUTH_COLUMN_COUNT - 1),
    MergeRange(1, 0, 1, 1),
    MergeRange(2, 0, 3, 0),
    MergeRange(2, 1, 2, 2),
    MergeRange(2, 3, 2, 4),
    *(MergeRange(2, col, 2, col + 1) for col in YOUTH_WEEK_COLUMNS.values()),
    MergeRange(2, 15, 2, 16),
)
YOUTH_SHEET_NAME = "Youth Monthly Report"
WEEKLY_ATTENDANCE_TYPE = "weekly"


def _weekly_pair(records: Iterable[YouthWeeklyRecord]) -> tuple[int, int]:
    male = female = 0
    for record in records:
        male += record.member_boys + record.visitor_boys
        female += record.member_girls + record.visitor_girls
    return male, female


def _weekly_average(records: Sequence[YouthWeeklyRecord]) -> tuple[float, float]:
    """Mean of weeks 1..5; weeks without data count as zero."""

    male_total = female_total = 0
    for week in WEEK_NUMBERS:
        male, female = _weekly_pair(record for record in records if record.week == week)
        male_total += male
        female_total += female
    divisor = len(WEEK_NUMBERS)
    return round(male_total / divisor, 2), round(female_total / divisor, 2)


def _yhsf_strength(records: Iterable[YouthWeeklyRecord]) -> tuple[int, int]:
    """Sum over districts of each district's highest reported male/female count."""

    highest: dict[int, list[int]] = defaultdict(lambda: [0, 0])
    for record in records:
        pair = highest[record.district_id]
        pair[0] = max(pair[0], record.male)
        pair[1] = max(pair[1], record.female)
    return sum(pair[0] for pair in highest.values()), sum(pair[1] for pair in highest.values())


def build_youth_sheet(
    *,
    records: Sequence[YouthWeeklyRecord],
    region_name: str,
    month: str,
    year: int,
    groups: Sequence[Group],
    title: str,
) -> SheetLayout:
    """One row per group: YHSF strength, last month's average, weeks 1..5 and the average.

    "Last month" is the calendar month before ``month``, December of the prior
    year for January.
    """

    last_month, last_year = previous_month(month, year)

    header_top: list[Cell] = _padded(["GROUP", "NO OF YHSF", "", "STRENGTH OF LAST MONTH"], YOUTH_COLUMN_COUNT)
    for week, col in YOUTH_WEEK_COLUMNS.items():
        header_top[col] = f"WEEK {week}"
    header_top[15] = "AVERAGE"
    header_sub: list[Cell] = [""] + ["M", "F"] * 8

    banner: list[Cell] = _padded(
        [f"REGION: {region_name}", "", f"MONTH: {month}", f"YEAR: {year}"],
        YOUTH_COLUMN_COUNT,
    )
    rows: list[list[Cell]] = [_padded([title], YOUTH_COLUMN_COUNT), banner, header_top, header_sub]

    styles: dict[tuple[int, int], StyleTag] = {}
    _tag_rows(styles, range(0, 1), YOUTH_COLUMN_COUNT, StyleTag.TITLE)
    _tag_rows(styles, range(1, YOUTH_HEADER_ROW_COUNT), YOUTH_COLUMN_COUNT, StyleTag.HEADER)
    for col in YOUTH_WEEK_COLUMNS.values():
        styles[(2, col)] = StyleTag.WEEK_LABEL

    for group in groups:
        current = [
            record
            for record in records
            if record.group_id == group.id and record.year == year and record.month == month
        ]
        previous = [
            record
            for record in records
            if record.group_id == group.id and record.year == last_year and record.month == last_month
        ]

        weekly = [record for record in current if record.attendance_type == WEEKLY_ATTENDANCE_TYPE]
        previous_weekly = [record for record in previous if record.attendance_type == WEEKLY_ATTENDANCE_TYPE]

        row: list[Cell] = [group.name, *_yhsf_strength(current), *_weekly_average(previous_weekly)]
        for week in WEEK_NUMBERS:
            row.extend(_weekly_pair(record for record in weekly if record.week == week))
        row.extend(_weekly_average(weekly))
        rows.append(row)

    return SheetLayout(
        rows=tuple(tuple(row) for row in rows),
        column_widths=YOUTH_COLUMN_WIDTHS,
        merges=YOUTH_MERGES,
        styles=styles,
        sheet_name=YOUTH_SHEET_NAME,
    )
