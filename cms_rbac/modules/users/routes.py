from fastapi import APIRouter, Depends

from cms_rbac.core.dependencies import authenticate, get_user_role_service
from cms_rbac.modules.users.schemas import Actor, RoleAssign
from cms_rbac.modules.users.service import UserRoleService

router = APIRouter(prefix="/users", tags=["users"])


@router.put("/{user_id}/role", response_model=Actor)
async def assign_role(
    user_id: str,
    body: RoleAssign,
    actor: Actor = Depends(authenticate),
    service: UserRoleService = Depends(get_user_role_service)
):
    """Assign a role to a user. Only super admins can grant or take away super_admin."""
    return service.assign_role(actor, user_id, body.role_id)


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: str,
    actor: Actor = Depends(authenticate),
    service: UserRoleService = Depends(get_user_role_service)
):
    """Delete user"""
    service.delete_user(actor, user_id)
    return None
