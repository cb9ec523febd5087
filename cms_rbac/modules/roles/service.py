import uuid
from datetime import datetime, timezone
from typing import List

from cms_rbac.config.roles_config import CUSTOM_ROLE_DEFAULT_PERMISSIONS
from cms_rbac.core.context import AccessContext
from cms_rbac.core.exceptions import ConflictError, NotFoundError, ValidationError
from cms_rbac.modules.permissions.engine import require_permission
from cms_rbac.modules.permissions.schemas import Action, PermissionSet, Resource
from cms_rbac.modules.roles.schemas import Role, RoleCreate, RoleUpdate, validate_role_name
from cms_rbac.modules.users.schemas import Actor


class RoleService:
    def __init__(self, ctx: AccessContext):
        self.ctx = ctx
        self.store = ctx.role_store

    def create_role(self, actor: Actor, role_data: RoleCreate) -> Role:
        """Create a new custom role"""
        require_permission(self.ctx, actor, Resource.ROLES, Action.MANAGE)

        if not role_data.name or not role_data.display_name:
            raise ValidationError("Name and display name are required")
        validate_role_name(role_data.name)

        if self.store.find_by_name(role_data.name):
            raise ConflictError("Role name already exists")

        if role_data.permissions is None:
            permissions = PermissionSet.from_raw(CUSTOM_ROLE_DEFAULT_PERMISSIONS)
        else:
            permissions = PermissionSet.from_raw(role_data.permissions)

        now = datetime.now(timezone.utc)
        role = Role(
            id=str(uuid.uuid4()),
            name=role_data.name,
            display_name=role_data.display_name,
            description=role_data.description or None,
            permissions=permissions,
            is_system=False,
            created_at=now,
            updated_at=now
        )
        self.store.insert(role)
        return role

    def get_role(self, actor: Actor, role_id: str) -> Role:
        """Get role by ID"""
        require_permission(self.ctx, actor, Resource.ROLES, Action.READ)
        return self._get_existing(role_id)

    def list_roles(self, actor: Actor, order_by: str = "created_at", order_dir: str = "asc") -> List[Role]:
        """List all roles"""
        require_permission(self.ctx, actor, Resource.ROLES, Action.READ)
        return self.store.list_all(order_by=order_by, order_dir=order_dir)

    def update_role(self, actor: Actor, role_id: str, role_data: RoleUpdate) -> Role:
        """Update role; fields absent from the request are left as they are"""
        require_permission(self.ctx, actor, Resource.ROLES, Action.MANAGE)

        existing = self._get_existing(role_id)
        provided = role_data.model_fields_set
        update_data = {"updated_at": datetime.now(timezone.utc)}

        if role_data.name and role_data.name != existing.name:
            if existing.is_system:
                raise ConflictError("Cannot change the name of a system role")
            validate_role_name(role_data.name)
            if self.store.find_by_name(role_data.name):
                raise ConflictError("Role name already exists")
            update_data["name"] = role_data.name

        if "display_name" in provided:
            if not role_data.display_name:
                raise ValidationError("Display name cannot be empty")
            update_data["display_name"] = role_data.display_name

        if "description" in provided:
            update_data["description"] = role_data.description

        if "permissions" in provided:
            update_data["permissions"] = PermissionSet.from_raw(role_data.permissions)

        self.store.update(role_id, update_data)
        return self._get_existing(role_id)

    def delete_role(self, actor: Actor, role_id: str) -> None:
        """Delete a custom role that nobody is assigned to"""
        require_permission(self.ctx, actor, Resource.ROLES, Action.MANAGE)

        role = self._get_existing(role_id)
        if role.is_system:
            raise ConflictError("Cannot delete system roles")

        user_count = self.store.count_actors_with_role(role_id)
        if user_count > 0:
            raise ConflictError(
                f"Cannot delete role. {user_count} user(s) are currently assigned to this role."
            )

        self.store.delete(role_id)

    def _get_existing(self, role_id: str) -> Role:
        role = self.store.find_by_id(role_id)
        if role is None:
            raise NotFoundError("Role not found")
        return role
