"""Which scope levels a caller may pick, and auto-fill of the fixed ones."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace

from attendance_reports.core.auth import AppRole, RequestUserContext, highest_role
from attendance_reports.core.errors import UnauthorizedScopeError, UnresolvableScopeError
from attendance_reports.models.scope import ScopeSelection

SCOPE_LEVELS: tuple[str, ...] = ("state", "region", "old_group", "group", "district")

LEVEL_LABELS: dict[str, str] = {
    "state": "state",
    "region": "region",
    "old_group": "old group",
    "group": "group",
    "district": "district",
}

# Levels a role fixes to its own assignment, top-down.
_FIXED_LEVELS: dict[AppRole, tuple[str, ...]] = {
    AppRole.SUPER_ADMIN: (),
    AppRole.ADMIN: (),
    AppRole.VIEWER: (),
    AppRole.STATE_ADMIN: SCOPE_LEVELS[:1],
    AppRole.REGION_ADMIN: SCOPE_LEVELS[:2],
    AppRole.OLD_GROUP_ADMIN: SCOPE_LEVELS[:3],
    AppRole.GROUP_ADMIN: SCOPE_LEVELS[:4],
    AppRole.DISTRICT_ADMIN: SCOPE_LEVELS[:5],
}


@dataclass(frozen=True)
class ScopeVisibility:
    show_state: bool = True
    show_region: bool = True
    show_old_group: bool = True
    show_group: bool = True
    show_district: bool = True

    def is_pickable(self, level: str) -> bool:
        return getattr(self, f"show_{level}")

    @property
    def fixed_levels(self) -> tuple[str, ...]:
        return tuple(level for level in SCOPE_LEVELS if not self.is_pickable(level))

    def to_dict(self) -> dict[str, bool]:
        return {f"show_{level}": self.is_pickable(level) for level in SCOPE_LEVELS}


def resolve_visibility(role_names: Iterable[str | AppRole]) -> ScopeVisibility:
    """Visibility for the most privileged of the caller's roles."""

    fixed = _FIXED_LEVELS[highest_role(role_names)]
    return ScopeVisibility(**{f"show_{level}": level not in fixed for level in SCOPE_LEVELS})


def apply_fixed_scope(selection: ScopeSelection, context: RequestUserContext) -> ScopeSelection:
    """Write the caller's own assignment into every level the caller may not pick.

    A requested value for a fixed level must equal the caller's own value. The
    role's own (lowest fixed) level must be assigned on the user record.
    """

    visibility = resolve_visibility(context.roles)
    fixed = visibility.fixed_levels
    if not fixed:
        return selection

    own_level = fixed[-1]
    if getattr(context, f"{own_level}_id") is None:
        raise UnresolvableScopeError(
            f"Your account has no {LEVEL_LABELS[own_level]} assignment; contact an administrator."
        )

    updates: dict[str, int | None] = {}
    for level in fixed:
        field = f"{level}_id"
        own_value = getattr(context, field)
        requested = getattr(selection, field)
        if requested is not None and own_value is not None and requested != own_value:
            raise UnauthorizedScopeError(
                f"You may only report on your own {LEVEL_LABELS[level]}."
            )
        updates[field] = own_value
    return replace(selection, **updates)


def owned_scope(context: RequestUserContext) -> dict[str, int]:
    """The caller's own id for every fixed level that is assigned on the user record."""

    owned: dict[str, int] = {}
    for level in resolve_visibility(context.roles).fixed_levels:
        own_value = getattr(context, f"{level}_id")
        if own_value is not None:
            owned[level] = own_value
    return owned
