"""Query-parameter parsing shared by report and export endpoints."""

from __future__ import annotations

from fastapi import HTTPException, Query, status

from attendance_reports.models.scope import FilterCriteria, MonthRange, MonthSpec, ScopeSelection


def _month_spec(
    month: str | None,
    from_month: int | None,
    to_month: int | None,
    months: list[str] | None,
) -> MonthSpec:
    has_range = from_month is not None or to_month is not None
    if sum((month is not None, has_range, bool(months))) > 1:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Use only one of month, from_month/to_month or months.",
        )

    try:
        if month is not None:
            return MonthSpec.of_single(month)
        if has_range:
            if from_month is None or to_month is None:
                raise ValueError("Both from_month and to_month are required for a month range.")
            return MonthSpec.of_range(from_month, to_month)
        if months:
            return MonthSpec.of_months(months)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    return MonthSpec()


def scope_selection_params(
    state_id: int | None = Query(default=None),
    region_id: int | None = Query(default=None),
    old_group_id: int | None = Query(default=None),
    group_id: int | None = Query(default=None),
    district_id: int | None = Query(default=None),
    year: int | None = Query(default=None),
    month: str | None = Query(default=None),
    from_month: int | None = Query(default=None),
    to_month: int | None = Query(default=None),
    months: list[str] | None = Query(default=None),
) -> ScopeSelection:
    return ScopeSelection(
        state_id=state_id,
        region_id=region_id,
        old_group_id=old_group_id,
        group_id=group_id,
        district_id=district_id,
        year=year,
        month_spec=_month_spec(month, from_month, to_month, months),
    )


def filter_criteria_params(
    state_id: int | None = Query(default=None),
    region_id: int | None = Query(default=None),
    old_group_id: int | None = Query(default=None),
    group_id: int | None = Query(default=None),
    district_id: int | None = Query(default=None),
    year: int | None = Query(default=None),
    from_month: int | None = Query(default=None),
    to_month: int | None = Query(default=None),
) -> FilterCriteria:
    month_range = None
    if from_month is not None or to_month is not None:
        month_range = MonthRange(
            from_month=from_month if from_month is not None else 1,
            to_month=to_month if to_month is not None else 12,
        )
    return FilterCriteria(
        state_id=state_id,
        region_id=region_id,
        district_id=district_id,
        group_id=group_id,
        old_group_id=old_group_id,
        year=year,
        month_range=month_range,
    )
