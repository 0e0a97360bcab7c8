"""Month-window normalization and report subtitles."""

from __future__ import annotations

from collections.abc import Iterable

from attendance_reports.models.scope import MONTH_NAMES, MonthSpec

_MONTH_INDEX: dict[str, int] = {name: index for index, name in enumerate(MONTH_NAMES, start=1)}


def month_index(name: str) -> int:
    """1-based calendar index of a month name, 0 when the name is not a calendar month."""

    return _MONTH_INDEX.get(name, 0)


def month_name(index: int) -> str:
    return MONTH_NAMES[index - 1]


def normalize_range(from_month: int, to_month: int) -> tuple[int, int]:
    """Clamp both bounds into 1..12 and order them ascending."""

    low, high = sorted((from_month, to_month))
    return max(1, min(12, low)), max(1, min(12, high))


def calendar_sorted(months: Iterable[str]) -> list[str]:
    """De-duplicate calendar month names and return them in calendar order."""

    present = {name for name in months if name in _MONTH_INDEX}
    return [name for name in MONTH_NAMES if name in present]


def months_to_use(spec: MonthSpec, *, available: Iterable[str] = ()) -> list[str]:
    """Ordered month sequence for a report.

    An empty spec falls back to the months present in ``available``.
    """

    if spec.single is not None:
        return [spec.single]
    if spec.range is not None:
        low, high = normalize_range(spec.range.from_month, spec.range.to_month)
        return list(MONTH_NAMES[low - 1 : high])
    if spec.months:
        return calendar_sorted(spec.months)
    return calendar_sorted(available)


def build_subtitle(spec: MonthSpec, year: int, *, available: Iterable[str] = ()) -> str:
    if spec.single is not None:
        return f"{spec.single} {year}"
    if spec.range is not None:
        low, high = normalize_range(spec.range.from_month, spec.range.to_month)
        return f"{month_name(low)} - {month_name(high)} {year}"

    months = months_to_use(spec, available=available)
    if len(months) == 12:
        return f"January - December {year}"
    return f"Selected Months {year}"


def previous_month(month: str, year: int) -> tuple[str, int]:
    """Calendar month preceding ``month``; January rolls back to December of the prior year."""

    index = month_index(month)
    if index == 0:
        raise ValueError(f"Unknown month name: {month!r}.")
    if index == 1:
        return "December", year - 1
    return month_name(index - 1), year
