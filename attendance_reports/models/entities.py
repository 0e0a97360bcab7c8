"""ORM entities for the organizational hierarchy and attendance submissions."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from attendance_reports.db.base import Base


class State(Base):
    __tablename__ = "states"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    code: Mapped[str | None] = mapped_column(String(32), nullable=True)


class Region(Base):
    __tablename__ = "regions"
    __table_args__ = (Index("ix_regions_state_id", "state_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str | None] = mapped_column(String(32), nullable=True)
    state_id: Mapped[int | None] = mapped_column(ForeignKey("states.id"), nullable=True)


class OldGroup(Base):
    __tablename__ = "old_groups"
    __table_args__ = (Index("ix_old_groups_region_id", "region_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str | None] = mapped_column(String(32), nullable=True)
    state_id: Mapped[int | None] = mapped_column(ForeignKey("states.id"), nullable=True)
    region_id: Mapped[int | None] = mapped_column(ForeignKey("regions.id"), nullable=True)


class Group(Base):
    __tablename__ = "groups"
    __table_args__ = (
        Index("ix_groups_region_id", "region_id"),
        Index("ix_groups_old_group_id", "old_group_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str | None] = mapped_column(String(32), nullable=True)
    state_id: Mapped[int | None] = mapped_column(ForeignKey("states.id"), nullable=True)
    region_id: Mapped[int | None] = mapped_column(ForeignKey("regions.id"), nullable=True)
    old_group_id: Mapped[int | None] = mapped_column(ForeignKey("old_groups.id"), nullable=True)


class District(Base):
    __tablename__ = "districts"
    __table_args__ = (Index("ix_districts_group_id", "group_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str | None] = mapped_column(String(32), nullable=True)
    group_id: Mapped[int | None] = mapped_column(ForeignKey("groups.id"), nullable=True)


class AttendanceEntry(Base):
    __tablename__ = "attendance_records"
    __table_args__ = (
        Index("ix_attendance_scope_year", "state_id", "region_id", "year"),
        Index("ix_attendance_group_month", "group_id", "year", "month"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    state_id: Mapped[int] = mapped_column(ForeignKey("states.id"), nullable=False)
    region_id: Mapped[int] = mapped_column(ForeignKey("regions.id"), nullable=False)
    old_group_id: Mapped[int | None] = mapped_column(ForeignKey("old_groups.id"), nullable=True)
    group_id: Mapped[int] = mapped_column(ForeignKey("groups.id"), nullable=False)
    district_id: Mapped[int] = mapped_column(ForeignKey("districts.id"), nullable=False)
    service_type: Mapped[str] = mapped_column(String(64), nullable=False, default="Sunday Service")
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[str] = mapped_column(String(16), nullable=False)
    week: Mapped[int] = mapped_column(Integer, nullable=False)
    men: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    women: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    youth_boys: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    youth_girls: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    children_boys: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    children_girls: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    new_comers: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tithe_offering: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)


class YouthAttendanceEntry(Base):
    __tablename__ = "youth_attendance_records"
    __table_args__ = (Index("ix_youth_attendance_region_month", "region_id", "year", "month"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    attendance_type: Mapped[str] = mapped_column(String(16), nullable=False, default="weekly")
    state_id: Mapped[int] = mapped_column(ForeignKey("states.id"), nullable=False)
    region_id: Mapped[int] = mapped_column(ForeignKey("regions.id"), nullable=False)
    old_group_id: Mapped[int | None] = mapped_column(ForeignKey("old_groups.id"), nullable=True)
    group_id: Mapped[int] = mapped_column(ForeignKey("groups.id"), nullable=False)
    district_id: Mapped[int] = mapped_column(ForeignKey("districts.id"), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[str] = mapped_column(String(16), nullable=False)
    week: Mapped[int | None] = mapped_column(Integer, nullable=True)
    male: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    female: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    member_boys: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    member_girls: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    visitor_boys: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    visitor_girls: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="active")
    state_id: Mapped[int | None] = mapped_column(ForeignKey("states.id"), nullable=True)
    region_id: Mapped[int | None] = mapped_column(ForeignKey("regions.id"), nullable=True)
    old_group_id: Mapped[int | None] = mapped_column(ForeignKey("old_groups.id"), nullable=True)
    group_id: Mapped[int | None] = mapped_column(ForeignKey("groups.id"), nullable=True)
    district_id: Mapped[int | None] = mapped_column(ForeignKey("districts.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)


class RoleAssignment(Base):
    __tablename__ = "role_assignments"
    __table_args__ = (
        UniqueConstraint("user_id", "role_name", name="uq_role_assignments_user_role"),
        Index("ix_role_assignments_user_id", "user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    # Free-form role name as issued by the identity admin ("Region Admin", "admin", ...).
    role_name: Mapped[str] = mapped_column(String(64), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
