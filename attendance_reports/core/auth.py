"""Authentication context extraction and role hierarchy helpers."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy import and_, select
from sqlalchemy.orm import Session

from attendance_reports.core.config import get_settings
from attendance_reports.db.dependencies import get_db_session
from attendance_reports.models.entities import RoleAssignment, User


class AppRole(str, Enum):
    """Role names as issued to organization staff."""

    SUPER_ADMIN = "Super Admin"
    ADMIN = "admin"
    STATE_ADMIN = "State Admin"
    REGION_ADMIN = "Region Admin"
    OLD_GROUP_ADMIN = "Old Group Admin"
    GROUP_ADMIN = "Group Admin"
    DISTRICT_ADMIN = "District Admin"
    VIEWER = "Viewer"


ROLE_LEVELS: dict[AppRole, int] = {
    AppRole.SUPER_ADMIN: 7,
    AppRole.ADMIN: 6,
    AppRole.STATE_ADMIN: 5,
    AppRole.REGION_ADMIN: 4,
    AppRole.OLD_GROUP_ADMIN: 3,
    AppRole.GROUP_ADMIN: 2,
    AppRole.DISTRICT_ADMIN: 1,
    AppRole.VIEWER: 0,
}

# Checked in order; "old group admin" must win over its "group admin" suffix.
_ROLE_NAME_FRAGMENTS: tuple[tuple[str, AppRole], ...] = (
    ("super admin", AppRole.SUPER_ADMIN),
    ("state admin", AppRole.STATE_ADMIN),
    ("region admin", AppRole.REGION_ADMIN),
    ("old group admin", AppRole.OLD_GROUP_ADMIN),
    ("group admin", AppRole.GROUP_ADMIN),
    ("district admin", AppRole.DISTRICT_ADMIN),
    ("viewer", AppRole.VIEWER),
)


def to_app_role(role_name: str | AppRole) -> AppRole:
    """Normalize a free-form role name; unrecognized names map to Viewer."""

    if isinstance(role_name, AppRole):
        return role_name

    for role in AppRole:
        if role.value == role_name:
            return role

    lowered = role_name.strip().lower()
    for fragment, role in _ROLE_NAME_FRAGMENTS:
        if fragment in lowered:
            return role
    if lowered == "admin":
        return AppRole.ADMIN
    return AppRole.VIEWER


def role_level(role_name: str | AppRole) -> int:
    return ROLE_LEVELS[to_app_role(role_name)]


def highest_role(role_names: Iterable[str | AppRole]) -> AppRole:
    """Return the most privileged role, Viewer for an empty role set."""

    best = AppRole.VIEWER
    for name in role_names:
        role = to_app_role(name)
        if ROLE_LEVELS[role] > ROLE_LEVELS[best]:
            best = role
    return best


def is_role_above_or_equal(role_name: str | AppRole, required: str | AppRole) -> bool:
    return role_level(role_name) >= role_level(required)


@dataclass(frozen=True)
class RequestUserContext:
    """Authenticated request actor with own organizational assignment."""

    user_id: int
    email: str
    display_name: str
    status: str
    roles: tuple[AppRole, ...]
    state_id: int | None = None
    region_id: int | None = None
    old_group_id: int | None = None
    group_id: int | None = None
    district_id: int | None = None

    @property
    def role_names(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(role.value for role in self.roles))

    @property
    def highest_role(self) -> AppRole:
        return highest_role(self.roles)


def _resolve_email(x_user_email: str | None) -> str:
    settings = get_settings()
    if x_user_email and x_user_email.strip():
        return x_user_email.strip().lower()

    if settings.auth_allow_dev_principal:
        return settings.auth_dev_email.strip().lower()

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Missing identity header. Expected X-USER-EMAIL or enable development principal fallback.",
    )


def ensure_user_principal(
    db: Session,
    *,
    email: str,
    display_name: str,
    roles: Iterable[str] = (),
    state_id: int | None = None,
    region_id: int | None = None,
    old_group_id: int | None = None,
    group_id: int | None = None,
    district_id: int | None = None,
) -> User:
    """Create or update a user with its own assignment and role names.

    Utility exported for tests and seed helpers.
    """

    normalized_email = email.strip().lower()
    user = db.scalar(select(User).where(User.email == normalized_email))
    if user is None:
        user = User(
            email=normalized_email,
            display_name=display_name.strip() or normalized_email,
            status="active",
            created_at=datetime.utcnow(),
        )
        db.add(user)

    user.state_id = state_id
    user.region_id = region_id
    user.old_group_id = old_group_id
    user.group_id = group_id
    user.district_id = district_id
    db.flush()

    existing = {
        assignment.role_name
        for assignment in db.scalars(select(RoleAssignment).where(RoleAssignment.user_id == user.id)).all()
    }
    for role_name in roles:
        if role_name not in existing:
            db.add(RoleAssignment(user_id=user.id, role_name=role_name, active=True))
            existing.add(role_name)

    db.commit()
    db.refresh(user)
    return user


def _load_roles(db: Session, *, user_id: int) -> tuple[AppRole, ...]:
    assignments = db.scalars(
        select(RoleAssignment).where(and_(RoleAssignment.user_id == user_id, RoleAssignment.active.is_(True)))
    ).all()
    return tuple(dict.fromkeys(to_app_role(assignment.role_name) for assignment in assignments))


def build_user_context(user: User, roles: tuple[AppRole, ...]) -> RequestUserContext:
    return RequestUserContext(
        user_id=user.id,
        email=user.email,
        display_name=user.display_name,
        status=user.status,
        roles=roles,
        state_id=user.state_id,
        region_id=user.region_id,
        old_group_id=user.old_group_id,
        group_id=user.group_id,
        district_id=user.district_id,
    )


def get_current_user_context(
    x_user_email: str | None = Header(default=None, alias="X-USER-EMAIL"),
    db: Session = Depends(get_db_session),
) -> RequestUserContext:
    """Resolve current request user, roles and own organizational assignment.

    Identity comes from a trusted proxy header. The development principal is
    provisioned on first use with no roles; any other unknown user is rejected.
    """

    settings = get_settings()
    email = _resolve_email(x_user_email)
    user = db.scalar(select(User).where(User.email == email))

    if user is None:
        if settings.auth_allow_dev_principal and email == settings.auth_dev_email.strip().lower():
            user = ensure_user_principal(db, email=email, display_name=email)
        else:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Unknown user.",
            )

    if user.status != "active":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is not active.",
        )

    return build_user_context(user, _load_roles(db, user_id=user.id))
