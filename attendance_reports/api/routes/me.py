"""Current user endpoint."""

from fastapi import APIRouter, Depends

from attendance_reports.core.auth import RequestUserContext, get_current_user_context
from attendance_reports.services.visibility import resolve_visibility

router = APIRouter(prefix="/me", tags=["me"])


@router.get("")
def get_me(context: RequestUserContext = Depends(get_current_user_context)) -> dict[str, object]:
    """Return current user, roles, own assignment and which scope levels are pickable."""

    return {
        "id": context.user_id,
        "email": context.email,
        "display_name": context.display_name,
        "status": context.status,
        "roles": list(context.role_names),
        "highest_role": context.highest_role.value,
        "assignment": {
            "state_id": context.state_id,
            "region_id": context.region_id,
            "old_group_id": context.old_group_id,
            "group_id": context.group_id,
            "district_id": context.district_id,
        },
        "visibility": resolve_visibility(context.roles).to_dict(),
    }
