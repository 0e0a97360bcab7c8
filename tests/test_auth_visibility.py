from __future__ import annotations

import pytest

from attendance_reports.core.auth import (
    AppRole,
    RequestUserContext,
    highest_role,
    is_role_above_or_equal,
    role_level,
    to_app_role,
)
from attendance_reports.core.errors import UnauthorizedScopeError, UnresolvableScopeError
from attendance_reports.models.scope import ScopeSelection
from attendance_reports.services.visibility import ScopeVisibility, apply_fixed_scope, owned_scope, resolve_visibility


def _context(*roles: AppRole, **assignment: int) -> RequestUserContext:
    return RequestUserContext(
        user_id=1,
        email="user@test.local",
        display_name="User",
        status="active",
        roles=roles,
        **assignment,
    )


def test_role_names_are_normalized() -> None:
    assert to_app_role("Super Admin") is AppRole.SUPER_ADMIN
    assert to_app_role("admin") is AppRole.ADMIN
    assert to_app_role("REGION ADMIN") is AppRole.REGION_ADMIN
    assert to_app_role("Old Group Admin") is AppRole.OLD_GROUP_ADMIN
    assert to_app_role("Senior Group Admin") is AppRole.GROUP_ADMIN
    assert to_app_role("district admin") is AppRole.DISTRICT_ADMIN
    assert to_app_role("Treasurer") is AppRole.VIEWER


def test_role_hierarchy_helpers() -> None:
    assert role_level("Super Admin") == 7
    assert role_level("Viewer") == 0
    assert highest_role([]) is AppRole.VIEWER
    assert highest_role(["Group Admin", "Region Admin", "Viewer"]) is AppRole.REGION_ADMIN
    assert is_role_above_or_equal("State Admin", AppRole.REGION_ADMIN) is True
    assert is_role_above_or_equal("District Admin", "Group Admin") is False


@pytest.mark.parametrize(
    ("roles", "expected"),
    [
        (["Super Admin"], ScopeVisibility()),
        (["Viewer"], ScopeVisibility()),
        (["State Admin"], ScopeVisibility(show_state=False)),
        (["Region Admin"], ScopeVisibility(show_state=False, show_region=False)),
        (
            ["Old Group Admin"],
            ScopeVisibility(show_state=False, show_region=False, show_old_group=False),
        ),
        (
            ["Group Admin"],
            ScopeVisibility(show_state=False, show_region=False, show_old_group=False, show_group=False),
        ),
        (
            ["District Admin"],
            ScopeVisibility(
                show_state=False,
                show_region=False,
                show_old_group=False,
                show_group=False,
                show_district=False,
            ),
        ),
        (["District Admin", "State Admin"], ScopeVisibility(show_state=False)),
    ],
)
def test_visibility_by_highest_role(roles: list[str], expected: ScopeVisibility) -> None:
    assert resolve_visibility(roles) == expected


def test_fixed_levels_take_own_assignment() -> None:
    context = _context(AppRole.REGION_ADMIN, state_id=1, region_id=5)

    resolved = apply_fixed_scope(ScopeSelection(group_id=100, year=2025), context)

    assert resolved.state_id == 1
    assert resolved.region_id == 5
    assert resolved.group_id == 100
    assert resolved.year == 2025


def test_fixed_level_cannot_be_overridden() -> None:
    context = _context(AppRole.DISTRICT_ADMIN, state_id=1, region_id=5, group_id=100, district_id=1000)

    with pytest.raises(UnauthorizedScopeError):
        apply_fixed_scope(ScopeSelection(district_id=1001), context)


def test_missing_own_assignment_is_unresolvable() -> None:
    with pytest.raises(UnresolvableScopeError):
        apply_fixed_scope(ScopeSelection(), _context(AppRole.GROUP_ADMIN, region_id=5))


def test_super_admin_selection_is_untouched() -> None:
    selection = ScopeSelection(state_id=2, region_id=7, year=2024)

    assert apply_fixed_scope(selection, _context(AppRole.SUPER_ADMIN, state_id=1)) is selection


def test_owned_scope_lists_assigned_fixed_levels() -> None:
    context = _context(AppRole.GROUP_ADMIN, region_id=5, old_group_id=10, group_id=100, district_id=1000)

    assert owned_scope(context) == {"region": 5, "old_group": 10, "group": 100}
    assert owned_scope(_context(AppRole.VIEWER, state_id=1)) == {}
