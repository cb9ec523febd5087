from fastapi import APIRouter, Depends
from typing import List

from cms_rbac.core.dependencies import authenticate, get_role_service
from cms_rbac.modules.roles.schemas import Role, RoleCreate, RoleUpdate
from cms_rbac.modules.roles.service import RoleService
from cms_rbac.modules.users.schemas import Actor

router = APIRouter(prefix="/roles", tags=["roles"])


@router.post("", response_model=Role, status_code=201)
async def create_role(
    role_data: RoleCreate,
    actor: Actor = Depends(authenticate),
    service: RoleService = Depends(get_role_service)
):
    """Create a new role (requires roles:manage)"""
    return service.create_role(actor, role_data)


@router.get("", response_model=List[Role])
async def list_roles(
    order_by: str = "created_at",
    order_dir: str = "asc",
    actor: Actor = Depends(authenticate),
    service: RoleService = Depends(get_role_service)
):
    """List roles ordered by name, display_name or created_at"""
    return service.list_roles(actor, order_by=order_by, order_dir=order_dir)


@router.get("/{role_id}", response_model=Role)
async def get_role(
    role_id: str,
    actor: Actor = Depends(authenticate),
    service: RoleService = Depends(get_role_service)
):
    """Get role by ID"""
    return service.get_role(actor, role_id)


@router.put("/{role_id}", response_model=Role)
async def update_role(
    role_id: str,
    role_data: RoleUpdate,
    actor: Actor = Depends(authenticate),
    service: RoleService = Depends(get_role_service)
):
    """Update role (requires roles:manage)"""
    return service.update_role(actor, role_id, role_data)


@router.delete("/{role_id}", status_code=204)
async def delete_role(
    role_id: str,
    actor: Actor = Depends(authenticate),
    service: RoleService = Depends(get_role_service)
):
    """Delete role (requires roles:manage; system and assigned roles are refused)"""
    service.delete_role(actor, role_id)
    return None
