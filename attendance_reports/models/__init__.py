"""ORM model package."""

from attendance_reports.models.entities import (
    AttendanceEntry,
    District,
    Group,
    OldGroup,
    Region,
    RoleAssignment,
    State,
    User,
    YouthAttendanceEntry,
)

__all__ = [
    "AttendanceEntry",
    "District",
    "Group",
    "OldGroup",
    "Region",
    "RoleAssignment",
    "State",
    "User",
    "YouthAttendanceEntry",
]
