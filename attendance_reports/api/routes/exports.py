"""Spreadsheet download endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from attendance_reports.api.dependencies import scope_selection_params
from attendance_reports.core.auth import RequestUserContext, get_current_user_context
from attendance_reports.db.dependencies import get_db_session
from attendance_reports.models.scope import ScopeSelection
from attendance_reports.services.report_service import AttendanceReportService

router = APIRouter(prefix="/exports", tags=["exports"])


@router.get("/{kind}")
async def export_report(
    kind: str,
    selection: ScopeSelection = Depends(scope_selection_params),
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> Response:
    exported = await AttendanceReportService(db).export_report(context=context, kind=kind, selection=selection)
    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
    )
