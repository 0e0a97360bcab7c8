"""Report preview and attendance summary endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from attendance_reports.api.dependencies import filter_criteria_params, scope_selection_params
from attendance_reports.core.auth import RequestUserContext, get_current_user_context
from attendance_reports.db.dependencies import get_db_session
from attendance_reports.models.scope import FilterCriteria, ScopeSelection
from attendance_reports.services.report_service import AttendanceReportService

router = APIRouter(prefix="/reports", tags=["reports"])


def _service(db: Session) -> AttendanceReportService:
    return AttendanceReportService(db)


@router.get("/summary")
async def attendance_summary(
    criteria: FilterCriteria = Depends(filter_criteria_params),
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    summary = await _service(db).attendance_summary(context=context, criteria=criteria)
    return summary.to_dict()


@router.get("/{kind}")
async def preview_report(
    kind: str,
    selection: ScopeSelection = Depends(scope_selection_params),
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    """Return the sheet layout as JSON for on-screen preview."""

    layout = await _service(db).build_layout(context=context, kind=kind, selection=selection)
    return layout.to_dict()
