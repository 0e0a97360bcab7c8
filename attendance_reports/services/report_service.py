"""Attendance report orchestration: scope resolution, filtering, layout and export."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, replace
from datetime import datetime
from typing import TypeVar

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from attendance_reports.core.auth import RequestUserContext
from attendance_reports.core.config import Settings, get_settings
from attendance_reports.core.errors import (
    InsufficientDataError,
    ReportError,
    ScopeFilterInputError,
    UnauthorizedScopeError,
    UnresolvableScopeError,
    UpstreamFetchError,
)
from attendance_reports.models.scope import (
    FilterCriteria,
    OrgUnit,
    ScopeSelection,
)
from attendance_reports.repositories.directory import OrgDirectory, SqlOrgDirectory
from attendance_reports.services.aggregation import AttendanceStats, calculate_attendance_stats
from attendance_reports.services.export import ExportFilePayload, export_layout
from attendance_reports.services.months import previous_month
from attendance_reports.services.record_filter import filter_attendance_records, filter_records_for_scope
from attendance_reports.services.scope_filters import (
    ComboItem,
    get_districts_by_group,
    get_groups_by_old_group,
    get_old_groups_by_region,
    get_state_regions_for_combobox,
    resolve_id_from_value,
    resolve_state_id_from_value,
    to_combo_items,
)
from attendance_reports.services.sheet_layout import SCOPE_SHEETS, SheetLayout, build_scope_sheet, build_youth_sheet
from attendance_reports.services.visibility import LEVEL_LABELS, apply_fixed_scope, owned_scope, resolve_visibility

logger = logging.getLogger(__name__)

UnitT = TypeVar("UnitT")

REPORT_KINDS: tuple[str, ...] = ("state", "region", "old_group", "group", "district", "youth")
SCOPE_OPTION_LEVELS: tuple[str, ...] = ("state", "region", "old_group", "group", "district")
PARENT_LEVELS: dict[str, str] = {
    "region": "state",
    "old_group": "region",
    "group": "old_group",
    "district": "group",
}
CHILD_SELECTORS = {
    "region": get_state_regions_for_combobox,
    "old_group": get_old_groups_by_region,
    "group": get_groups_by_old_group,
    "district": get_districts_by_group,
}

KIND_LABELS: dict[str, str] = {
    "state": "state",
    "region": "region",
    "old_group": "old group",
    "group": "group",
    "district": "district",
    "youth": "region",
}

ERROR_STATUS: dict[type[ReportError], int] = {
    UnresolvableScopeError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ScopeFilterInputError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    InsufficientDataError: status.HTTP_404_NOT_FOUND,
    UpstreamFetchError: status.HTTP_503_SERVICE_UNAVAILABLE,
    UnauthorizedScopeError: status.HTTP_403_FORBIDDEN,
}


def normalize_kind(value: str) -> str:
    return value.strip().lower().replace("-", "_").replace(" ", "_")


def _level_of(field: str) -> str:
    return field.removesuffix("_id")


def _narrow_ids(
    units: list[OrgUnit],
    own_id: int | None,
    *parents: tuple[str, set[int] | None],
) -> set[int] | None:
    """Ids of ``units`` matching ``own_id`` and lying under every constrained parent set."""

    constraints = [(attr, ids) for attr, ids in parents if ids is not None]
    if own_id is None and not constraints:
        return None
    return {
        unit.id
        for unit in units
        if (own_id is None or unit.id == own_id) and all(getattr(unit, attr) in ids for attr, ids in constraints)
    }


def to_http_exception(exc: ReportError) -> HTTPException:
    for error_type, status_code in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=exc.message)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.message)


@dataclass(slots=True)
class StatsSummary:
    criteria: FilterCriteria
    stats: AttendanceStats

    def to_dict(self) -> dict[str, object]:
        return {"criteria": asdict(self.criteria), "stats": asdict(self.stats)}


class AttendanceReportService:
    """Builds scope and youth report sheets for an authenticated caller.

    Domain errors are logged and converted to ``HTTPException`` at the public
    method boundary; the core helpers raise ``ReportError`` subclasses only.
    """

    def __init__(
        self,
        db: Session,
        *,
        directory: OrgDirectory | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.db = db
        self.directory: OrgDirectory = directory or SqlOrgDirectory(db)
        self.settings = settings or get_settings()

    # ---------- Public API ----------
    async def build_layout(
        self,
        *,
        context: RequestUserContext,
        kind: str,
        selection: ScopeSelection,
    ) -> SheetLayout:
        normalized = self._require_kind(kind)
        try:
            resolved = apply_fixed_scope(selection, context)
            owned = owned_scope(context)
            if normalized == "youth":
                layout = await self._build_youth(resolved, owned)
            else:
                layout = await self._build_scope(normalized, resolved, owned)
        except ReportError as exc:
            self._log_failure(normalized, exc, context)
            raise to_http_exception(exc) from exc

        logger.info(
            "Built %s report for %s (user=%s, rows=%d)",
            normalized,
            self._describe(resolved),
            context.email,
            len(layout.rows),
        )
        return layout

    async def export_report(
        self,
        *,
        context: RequestUserContext,
        kind: str,
        selection: ScopeSelection,
        now: datetime | None = None,
    ) -> ExportFilePayload:
        layout = await self.build_layout(context=context, kind=kind, selection=selection)
        return export_layout(layout, self._require_kind(kind), now=now)

    async def attendance_summary(
        self,
        *,
        context: RequestUserContext,
        criteria: FilterCriteria,
    ) -> StatsSummary:
        try:
            fixed = apply_fixed_scope(
                ScopeSelection(
                    state_id=criteria.state_id,
                    region_id=criteria.region_id,
                    old_group_id=criteria.old_group_id,
                    group_id=criteria.group_id,
                    district_id=criteria.district_id,
                    year=criteria.year,
                ),
                context,
            )
            resolved = replace(
                criteria,
                state_id=fixed.state_id,
                region_id=fixed.region_id,
                old_group_id=fixed.old_group_id,
                group_id=fixed.group_id,
                district_id=fixed.district_id,
            )
            records = await self.directory.attendance_records(year=resolved.year)
        except ReportError as exc:
            self._log_failure("summary", exc, context)
            raise to_http_exception(exc) from exc

        matched = filter_attendance_records(records, resolved)
        return StatsSummary(criteria=resolved, stats=calculate_attendance_stats(matched))

    async def scope_options(
        self,
        *,
        context: RequestUserContext,
        level: str,
        parent: str | None = None,
    ) -> list[ComboItem]:
        """Combobox items for one level, narrowed by a free-form parent value.

        A fixed parent level always resolves to the caller's own unit, and only
        units inside the caller's assignment are offered.
        """

        normalized = normalize_kind(level)
        if normalized not in SCOPE_OPTION_LEVELS:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown scope level.")

        owned = owned_scope(context)
        try:
            units = await self._scope_units(normalized, parent, owned)
            units = await self._narrow_to_owned(normalized, units, owned)
        except ReportError as exc:
            self._log_failure(f"scope:{normalized}", exc, context)
            raise to_http_exception(exc) from exc

        if not resolve_visibility(context.roles).is_pickable(normalized):
            own_id = getattr(context, f"{normalized}_id")
            units = [unit for unit in units if unit.id == own_id]
        return sorted(to_combo_items(units), key=lambda item: item.label)

    # ---------- Scope sheets ----------
    def _require_kind(self, kind: str) -> str:
        normalized = normalize_kind(kind)
        if normalized not in REPORT_KINDS:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Unknown report kind. Expected one of: {', '.join(REPORT_KINDS)}.",
            )
        return normalized

    def _aborts_on_empty(self, kind: str) -> bool:
        return kind in {normalize_kind(level) for level in self.settings.report_abort_on_empty_levels}

    @staticmethod
    def _find(units: list[UnitT], unit_id: int, label: str) -> UnitT:
        for unit in units:
            if unit.id == unit_id:
                return unit
        raise UnresolvableScopeError(f"The selected {label} does not exist.")

    async def _resolve_scope(self, kind: str, selection: ScopeSelection) -> tuple[OrgUnit, list[OrgUnit]]:
        """Scope unit and its candidate children, fetched before any record is touched."""

        if kind == "state":
            state_id = self._required(selection.state_id, "state")
            unit = self._find(await self.directory.list_states(), state_id, "state")
            return unit, await self.directory.regions_by_state(state_id)
        if kind == "region":
            region_id = self._required(selection.region_id, "region")
            unit = self._find(await self.directory.list_regions(), region_id, "region")
            return unit, await self.directory.old_groups_by_region(region_id)
        if kind == "old_group":
            old_group_id = self._required(selection.old_group_id, "old group")
            unit = self._find(await self.directory.list_old_groups(), old_group_id, "old group")
            return unit, await self.directory.groups_by_old_group(old_group_id)

        group_id = self._required(selection.group_id, "group")
        unit = self._find(await self.directory.list_groups(), group_id, "group")
        districts = await self.directory.districts_by_group(group_id)
        if kind == "district" and selection.district_id is not None:
            districts = [district for district in districts if district.id == selection.district_id]
            if not districts:
                raise UnresolvableScopeError("The selected district does not belong to the selected group.")
        return unit, districts

    @staticmethod
    def _required(value: int | None, label: str) -> int:
        if value is None or value <= 0:
            raise UnresolvableScopeError(f"Select a {label} before generating the report.")
        return value

    async def _build_scope(self, kind: str, selection: ScopeSelection, owned: dict[str, int]) -> SheetLayout:
        descriptor = SCOPE_SHEETS[kind]
        year = self._required(selection.year, "year")
        scope_unit, candidates = await self._resolve_scope(kind, selection)
        await self._require_owned(_level_of(descriptor.scope_field), scope_unit.id, owned)
        candidates = await self._narrow_to_owned(_level_of(descriptor.child_field), candidates, owned)

        scope_ids = {f"{level}_id": own_id for level, own_id in owned.items()}
        scope_ids[descriptor.scope_field] = scope_unit.id
        criteria = FilterCriteria(year=year, month_range=selection.month_spec.range, **scope_ids)
        records = await self.directory.attendance_records(year=year)
        if kind == "district":
            criteria = replace(criteria, district_id=selection.district_id)
            matched = await filter_records_for_scope(
                records, criteria, self.directory, restrict_to_group_districts=True
            )
        else:
            matched = filter_attendance_records(records, criteria)

        if not matched and self._aborts_on_empty(kind):
            raise InsufficientDataError(
                f"No attendance records found for the selected {KIND_LABELS[kind]} and period."
            )

        title_name = candidates[0].name if kind == "district" and selection.district_id is not None else None
        return build_scope_sheet(
            descriptor,
            scope_unit=scope_unit,
            candidates=candidates,
            records=matched,
            month_spec=selection.month_spec,
            year=year,
            organization_name=self.settings.organization_name,
            title_name=title_name,
        )

    # ---------- Youth sheet ----------
    async def _build_youth(self, selection: ScopeSelection, owned: dict[str, int]) -> SheetLayout:
        region_id = self._required(selection.region_id, "region")
        year = self._required(selection.year, "year")
        month = selection.month_spec.single
        if month is None:
            raise UnresolvableScopeError("Select a single month for the youth report.")

        region = self._find(await self.directory.list_regions(), region_id, "region")
        await self._require_owned("region", region.id, owned)
        groups = await self._narrow_to_owned("group", await self.directory.groups_by_region(region_id), owned)
        last_month, last_year = previous_month(month, year)
        records = await self.directory.youth_records(
            region_id=region_id,
            years=tuple(dict.fromkeys((year, last_year))),
            months=(month, last_month),
        )
        if "district" in owned:
            records = [record for record in records if record.district_id == owned["district"]]

        in_month = [record for record in records if record.year == year and record.month == month]
        if not in_month and self._aborts_on_empty("youth"):
            raise InsufficientDataError("No youth attendance records found for the selected region and month.")

        return build_youth_sheet(
            records=records,
            region_name=region.name,
            month=month,
            year=year,
            groups=groups,
            title=self.settings.youth_report_title,
        )

    # ---------- Scope options ----------
    async def _list_units(self, level: str) -> list[OrgUnit]:
        listers = {
            "state": self.directory.list_states,
            "region": self.directory.list_regions,
            "old_group": self.directory.list_old_groups,
            "group": self.directory.list_groups,
            "district": self.directory.list_districts,
        }
        return await listers[level]()

    async def _scope_units(self, level: str, parent: str | None, owned: dict[str, int]) -> list[OrgUnit]:
        if level == "state":
            return await self.directory.list_states()

        parent_level = PARENT_LEVELS[level]
        resolver = resolve_state_id_from_value if parent_level == "state" else resolve_id_from_value
        parent_id = resolver(parent, await self._list_units(parent_level))
        own_parent = owned.get(parent_level)
        if own_parent is not None:
            if parent_id and parent_id != own_parent:
                raise UnauthorizedScopeError(f"You may only browse your own {LEVEL_LABELS[parent_level]}.")
            parent_id = own_parent
        return CHILD_SELECTORS[level](parent_id or None, await self._list_units(level))

    # ---------- Caller assignment ----------
    async def _allowed_ids(self, level: str, owned: dict[str, int]) -> set[int] | None:
        """Ids at ``level`` inside the caller's assignment; None when unrestricted."""

        if not owned:
            return None
        state_ids = {owned["state"]} if "state" in owned else None
        if level == "state":
            return state_ids
        region_ids = _narrow_ids(await self.directory.list_regions(), owned.get("region"), ("state_id", state_ids))
        if level == "region":
            return region_ids
        old_group_ids = _narrow_ids(
            await self.directory.list_old_groups(), owned.get("old_group"), ("region_id", region_ids)
        )
        if level == "old_group":
            return old_group_ids
        group_ids = _narrow_ids(
            await self.directory.list_groups(),
            owned.get("group"),
            ("region_id", region_ids),
            ("old_group_id", old_group_ids if "old_group" in owned else None),
        )
        if level == "group":
            return group_ids
        return _narrow_ids(await self.directory.list_districts(), owned.get("district"), ("group_id", group_ids))

    async def _require_owned(self, level: str, unit_id: int, owned: dict[str, int]) -> None:
        allowed = await self._allowed_ids(level, owned)
        if allowed is not None and unit_id not in allowed:
            raise UnauthorizedScopeError(f"The selected {LEVEL_LABELS[level]} is outside your assignment.")

    async def _narrow_to_owned(self, level: str, units: list[UnitT], owned: dict[str, int]) -> list[UnitT]:
        allowed = await self._allowed_ids(level, owned)
        if allowed is None:
            return list(units)
        return [unit for unit in units if unit.id in allowed]

    # ---------- Logging helpers ----------
    @staticmethod
    def _describe(selection: ScopeSelection) -> str:
        parts = [
            f"{field}={value}"
            for field, value in (
                ("state_id", selection.state_id),
                ("region_id", selection.region_id),
                ("old_group_id", selection.old_group_id),
                ("group_id", selection.group_id),
                ("district_id", selection.district_id),
                ("year", selection.year),
            )
            if value is not None
        ]
        return ", ".join(parts) or "unscoped"

    @staticmethod
    def _log_failure(kind: str, exc: ReportError, context: RequestUserContext) -> None:
        if isinstance(exc, UpstreamFetchError):
            logger.error("Report %s failed upstream for %s: %s", kind, context.email, exc.message)
        else:
            logger.warning("Report %s rejected for %s: %s", kind, context.email, exc.message)
