"""Selectors narrowing sibling org units by their parent.

Every selector resolves the parent through ``matches_parent``: numeric foreign
key equality when both the selector and the unit carry one, otherwise exact,
case-sensitive equality on the denormalized parent name. ``"akwa ibom"`` never
matches ``"AKWA IBOM"``.

Malformed input raises ``ScopeFilterInputError`` in every environment.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TypeVar

from attendance_reports.core.errors import ScopeFilterInputError
from attendance_reports.models.scope import District, Group, OldGroup, OrgUnit, Region, State

UnitT = TypeVar("UnitT", State, Region, OldGroup, Group, District)

ParentSelector = int | str | State | Region | OldGroup | Group | District | None

_ORG_UNIT_TYPES = (State, Region, OldGroup, Group, District)


@dataclass(frozen=True)
class ComboItem:
    label: str
    value: str


def _parent_key(selector: ParentSelector, *, function: str) -> tuple[int | None, str | None]:
    """Split a selector into (numeric id, exact name); both ``None`` means no parent."""

    if selector is None:
        return None, None
    if isinstance(selector, bool):
        raise ScopeFilterInputError(f"{function}: parent selector must be an id, a name or an org unit, got bool.")
    if isinstance(selector, int):
        return (selector if selector > 0 else None), None
    if isinstance(selector, str):
        return None, (selector if selector else None)
    if isinstance(selector, _ORG_UNIT_TYPES):
        return selector.id, selector.name
    raise ScopeFilterInputError(
        f"{function}: parent selector must be an id, a name or an org unit, got {type(selector).__name__}."
    )


def _require_units(candidates: object, unit_type: type, *, function: str) -> Sequence:
    if isinstance(candidates, (str, bytes)) or not isinstance(candidates, Sequence):
        raise ScopeFilterInputError(
            f"{function}: expected a list of {unit_type.__name__}, got {type(candidates).__name__}."
        )
    return candidates


def matches_parent(
    unit: OrgUnit,
    *,
    parent_id: int | None,
    parent_name: str | None,
    id_attr: str,
    name_attr: str,
) -> bool:
    """Numeric key preferred; exact name fallback."""

    unit_parent_id = getattr(unit, id_attr, None)
    if parent_id is not None and unit_parent_id is not None:
        return unit_parent_id == parent_id
    unit_parent_name = getattr(unit, name_attr, None)
    if parent_name is not None and unit_parent_name is not None:
        return unit_parent_name == parent_name
    return False


def select_children(
    selector: ParentSelector,
    candidates: Sequence[UnitT],
    *,
    unit_type: type[UnitT],
    id_attr: str,
    name_attr: str,
    function: str,
) -> list[UnitT]:
    """Subset of ``candidates`` under ``selector``, order preserved; no parent yields []."""

    units = _require_units(candidates, unit_type, function=function)
    parent_id, parent_name = _parent_key(selector, function=function)
    if parent_id is None and parent_name is None:
        return []

    selected: list[UnitT] = []
    for unit in units:
        if not isinstance(unit, unit_type):
            raise ScopeFilterInputError(
                f"{function}: expected {unit_type.__name__} items, got {type(unit).__name__}."
            )
        if matches_parent(unit, parent_id=parent_id, parent_name=parent_name, id_attr=id_attr, name_attr=name_attr):
            selected.append(unit)
    return selected


def get_regions_by_state(state: ParentSelector, regions: Sequence[Region]) -> list[Region]:
    return select_children(
        state, regions, unit_type=Region, id_attr="state_id", name_attr="state", function="get_regions_by_state"
    )


def get_regions_by_state_name(state_name: str, regions: Sequence[Region]) -> list[Region]:
    """Regions whose denormalized state name equals ``state_name`` exactly."""

    if not isinstance(state_name, str):
        raise ScopeFilterInputError(
            f"get_regions_by_state_name: state name must be a string, got {type(state_name).__name__}."
        )
    return select_children(
        state_name,
        regions,
        unit_type=Region,
        id_attr="state_id",
        name_attr="state",
        function="get_regions_by_state_name",
    )


def get_state_regions_for_combobox(state: ParentSelector, regions: Sequence[Region]) -> list[Region]:
    """Like ``get_regions_by_state`` but with no state chosen every region stays selectable."""

    units = _require_units(regions, Region, function="get_state_regions_for_combobox")
    parent_id, parent_name = _parent_key(state, function="get_state_regions_for_combobox")
    if parent_id is None and parent_name is None:
        return list(units)
    return get_regions_by_state(state, units)


def get_old_groups_by_region(region: ParentSelector, old_groups: Sequence[OldGroup]) -> list[OldGroup]:
    return select_children(
        region,
        old_groups,
        unit_type=OldGroup,
        id_attr="region_id",
        name_attr="region",
        function="get_old_groups_by_region",
    )


def get_groups_by_region(region: ParentSelector, groups: Sequence[Group]) -> list[Group]:
    return select_children(
        region, groups, unit_type=Group, id_attr="region_id", name_attr="region", function="get_groups_by_region"
    )


def get_groups_by_old_group(old_group: ParentSelector, groups: Sequence[Group]) -> list[Group]:
    return select_children(
        old_group,
        groups,
        unit_type=Group,
        id_attr="old_group_id",
        name_attr="old_group",
        function="get_groups_by_old_group",
    )


def get_districts_by_group(group: ParentSelector, districts: Sequence[District]) -> list[District]:
    return select_children(
        group,
        districts,
        unit_type=District,
        id_attr="group_id",
        name_attr="group",
        function="get_districts_by_group",
    )


def resolve_id_from_value(value: str | int | None, units: Sequence[OrgUnit]) -> int:
    """Resolve a combobox value (numeric id string or exact display name) to an id.

    A positive numeric value is returned as-is even when no unit carries it.
    Returns 0 when the value is empty or matches nothing.
    """

    candidates = _require_units(units, object, function="resolve_id_from_value")
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ScopeFilterInputError(
            f"resolve_id_from_value: value must be a string or an integer, got {type(value).__name__}."
        )
    if isinstance(value, int):
        return value if value > 0 else 0

    text = value.strip()
    if not text:
        return 0
    if text.isdigit() and int(text) > 0:
        return int(text)
    for unit in candidates:
        if unit.name == value:
            return unit.id
    return 0


def resolve_state_id_from_value(value: str | int | None, states: Sequence[State]) -> int:
    return resolve_id_from_value(value, states)


def to_combo_items(units: Sequence[OrgUnit]) -> list[ComboItem]:
    candidates = _require_units(units, object, function="to_combo_items")
    return [ComboItem(label=unit.name, value=str(unit.id)) for unit in candidates]
