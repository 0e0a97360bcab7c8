"""Read helpers for the organizational hierarchy and attendance submissions."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session, aliased

from attendance_reports.models import entities as orm
from attendance_reports.models.scope import (
    AttendanceRecord,
    District,
    Group,
    OldGroup,
    Region,
    State,
    YouthWeeklyRecord,
)


class OrgRepository:
    """SQL reads returning immutable domain snapshots."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # ---------- Org units ----------
    def list_states(self) -> list[State]:
        rows = self.db.scalars(select(orm.State).order_by(orm.State.name.asc())).all()
        return [State(id=row.id, name=row.name) for row in rows]

    def get_state(self, state_id: int) -> State | None:
        row = self.db.scalar(select(orm.State).where(orm.State.id == state_id))
        return State(id=row.id, name=row.name) if row is not None else None

    def list_regions(self, *, state_id: int | None = None) -> list[Region]:
        stmt = (
            select(orm.Region, orm.State.name)
            .outerjoin(orm.State, orm.Region.state_id == orm.State.id)
            .order_by(orm.Region.name.asc(), orm.Region.id.asc())
        )
        if state_id is not None:
            stmt = stmt.where(orm.Region.state_id == state_id)
        return [
            Region(id=region.id, name=region.name, state_id=region.state_id, state=state_name)
            for region, state_name in self.db.execute(stmt).all()
        ]

    def get_region(self, region_id: int) -> Region | None:
        row = self.db.execute(
            select(orm.Region, orm.State.name)
            .outerjoin(orm.State, orm.Region.state_id == orm.State.id)
            .where(orm.Region.id == region_id)
        ).first()
        if row is None:
            return None
        region, state_name = row
        return Region(id=region.id, name=region.name, state_id=region.state_id, state=state_name)

    def _old_group_stmt(self):
        return (
            select(orm.OldGroup, orm.State.name, orm.Region.name)
            .outerjoin(orm.State, orm.OldGroup.state_id == orm.State.id)
            .outerjoin(orm.Region, orm.OldGroup.region_id == orm.Region.id)
        )

    @staticmethod
    def _to_old_group(old_group: orm.OldGroup, state_name: str | None, region_name: str | None) -> OldGroup:
        return OldGroup(
            id=old_group.id,
            name=old_group.name,
            state_id=old_group.state_id,
            region_id=old_group.region_id,
            state=state_name,
            region=region_name,
        )

    def list_old_groups(self, *, region_id: int | None = None) -> list[OldGroup]:
        stmt = self._old_group_stmt().order_by(orm.OldGroup.name.asc(), orm.OldGroup.id.asc())
        if region_id is not None:
            stmt = stmt.where(orm.OldGroup.region_id == region_id)
        return [self._to_old_group(*row) for row in self.db.execute(stmt).all()]

    def get_old_group(self, old_group_id: int) -> OldGroup | None:
        row = self.db.execute(self._old_group_stmt().where(orm.OldGroup.id == old_group_id)).first()
        return self._to_old_group(*row) if row is not None else None

    def _group_stmt(self):
        return (
            select(orm.Group, orm.Region.name, orm.OldGroup.name)
            .outerjoin(orm.Region, orm.Group.region_id == orm.Region.id)
            .outerjoin(orm.OldGroup, orm.Group.old_group_id == orm.OldGroup.id)
        )

    @staticmethod
    def _to_group(group: orm.Group, region_name: str | None, old_group_name: str | None) -> Group:
        return Group(
            id=group.id,
            name=group.name,
            region_id=group.region_id,
            old_group_id=group.old_group_id,
            region=region_name,
            old_group=old_group_name,
        )

    def list_groups(self, *, region_id: int | None = None, old_group_id: int | None = None) -> list[Group]:
        stmt = self._group_stmt().order_by(orm.Group.name.asc(), orm.Group.id.asc())
        if region_id is not None:
            stmt = stmt.where(orm.Group.region_id == region_id)
        if old_group_id is not None:
            stmt = stmt.where(orm.Group.old_group_id == old_group_id)
        return [self._to_group(*row) for row in self.db.execute(stmt).all()]

    def get_group(self, group_id: int) -> Group | None:
        row = self.db.execute(self._group_stmt().where(orm.Group.id == group_id)).first()
        return self._to_group(*row) if row is not None else None

    def list_districts(self, *, group_id: int | None = None) -> list[District]:
        parent = aliased(orm.Group)
        stmt = (
            select(orm.District, parent.name)
            .outerjoin(parent, orm.District.group_id == parent.id)
            .order_by(orm.District.name.asc(), orm.District.id.asc())
        )
        if group_id is not None:
            stmt = stmt.where(orm.District.group_id == group_id)
        return [
            District(id=district.id, name=district.name, group_id=district.group_id, group=group_name)
            for district, group_name in self.db.execute(stmt).all()
        ]

    def get_district(self, district_id: int) -> District | None:
        row = self.db.scalar(select(orm.District).where(orm.District.id == district_id))
        if row is None:
            return None
        return District(id=row.id, name=row.name, group_id=row.group_id)

    # ---------- Attendance ----------
    def list_attendance(
        self,
        *,
        year: int | None = None,
        state_id: int | None = None,
        region_id: int | None = None,
        old_group_id: int | None = None,
        group_id: int | None = None,
        district_id: int | None = None,
    ) -> list[AttendanceRecord]:
        stmt = select(orm.AttendanceEntry).order_by(orm.AttendanceEntry.id.asc())
        for column, value in (
            (orm.AttendanceEntry.year, year),
            (orm.AttendanceEntry.state_id, state_id),
            (orm.AttendanceEntry.region_id, region_id),
            (orm.AttendanceEntry.old_group_id, old_group_id),
            (orm.AttendanceEntry.group_id, group_id),
            (orm.AttendanceEntry.district_id, district_id),
        ):
            if value is not None:
                stmt = stmt.where(column == value)

        return [
            AttendanceRecord(
                id=row.id,
                state_id=row.state_id,
                region_id=row.region_id,
                old_group_id=row.old_group_id,
                group_id=row.group_id,
                district_id=row.district_id,
                year=row.year,
                month=row.month,
                week=row.week,
                men=row.men,
                women=row.women,
                youth_boys=row.youth_boys,
                youth_girls=row.youth_girls,
                children_boys=row.children_boys,
                children_girls=row.children_girls,
                service_type=row.service_type,
                new_comers=row.new_comers,
                tithe_offering=row.tithe_offering,
            )
            for row in self.db.scalars(stmt).all()
        ]

    def list_youth_attendance(
        self,
        *,
        region_id: int,
        years: tuple[int, ...],
        months: tuple[str, ...],
    ) -> list[YouthWeeklyRecord]:
        stmt = (
            select(orm.YouthAttendanceEntry)
            .where(
                orm.YouthAttendanceEntry.region_id == region_id,
                orm.YouthAttendanceEntry.year.in_(years),
                orm.YouthAttendanceEntry.month.in_(months),
            )
            .order_by(orm.YouthAttendanceEntry.id.asc())
        )
        return [
            YouthWeeklyRecord(
                id=row.id,
                state_id=row.state_id,
                region_id=row.region_id,
                old_group_id=row.old_group_id,
                group_id=row.group_id,
                district_id=row.district_id,
                year=row.year,
                month=row.month,
                week=row.week,
                attendance_type=row.attendance_type,
                male=row.male,
                female=row.female,
                member_boys=row.member_boys,
                member_girls=row.member_girls,
                visitor_boys=row.visitor_boys,
                visitor_girls=row.visitor_girls,
            )
            for row in self.db.scalars(stmt).all()
        ]
