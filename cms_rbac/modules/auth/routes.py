from fastapi import APIRouter, Depends

from cms_rbac.core.context import AccessContext
from cms_rbac.core.dependencies import authenticate, get_context
from cms_rbac.modules.auth.schemas import EffectivePermissionsResponse
from cms_rbac.modules.permissions.engine import get_effective_permissions, is_super_admin
from cms_rbac.modules.users.schemas import Actor

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me", response_model=Actor)
async def get_me(actor: Actor = Depends(authenticate)):
    """Get the authenticated user"""
    return actor


@router.get("/me/permissions", response_model=EffectivePermissionsResponse)
async def get_my_permissions(
    actor: Actor = Depends(authenticate),
    ctx: AccessContext = Depends(get_context)
):
    """Effective permissions for rendering the admin UI; not used for enforcement"""
    return EffectivePermissionsResponse(
        user_id=actor.id,
        role_id=actor.role_id,
        legacy_role=None if actor.role_id else actor.role,
        is_super_admin=is_super_admin(ctx, actor),
        permissions=get_effective_permissions(ctx, actor)
    )
