"""Combobox option endpoints for each organizational level."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from attendance_reports.core.auth import RequestUserContext, get_current_user_context
from attendance_reports.db.dependencies import get_db_session
from attendance_reports.services.report_service import AttendanceReportService

router = APIRouter(prefix="/scopes", tags=["scopes"])


class ComboOption(BaseModel):
    label: str
    value: str


async def _options(
    level: str,
    parent: str | None,
    context: RequestUserContext,
    db: Session,
) -> list[ComboOption]:
    items = await AttendanceReportService(db).scope_options(context=context, level=level, parent=parent)
    return [ComboOption(label=item.label, value=item.value) for item in items]


@router.get("/states", response_model=list[ComboOption])
async def list_states(
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> list[ComboOption]:
    return await _options("state", None, context, db)


@router.get("/regions", response_model=list[ComboOption])
async def list_regions(
    state: str | None = Query(default=None, description="State id or exact state name."),
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> list[ComboOption]:
    return await _options("region", state, context, db)


@router.get("/old-groups", response_model=list[ComboOption])
async def list_old_groups(
    region: str | None = Query(default=None, description="Region id or exact region name."),
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> list[ComboOption]:
    return await _options("old_group", region, context, db)


@router.get("/groups", response_model=list[ComboOption])
async def list_groups(
    old_group: str | None = Query(default=None, description="Old group id or exact old group name."),
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> list[ComboOption]:
    return await _options("group", old_group, context, db)


@router.get("/districts", response_model=list[ComboOption])
async def list_districts(
    group: str | None = Query(default=None, description="Group id or exact group name."),
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> list[ComboOption]:
    return await _options("district", group, context, db)
