from typing import Optional

from cms_rbac.config.roles_config import SUPER_ADMIN_ROLE
from cms_rbac.core.context import AccessContext
from cms_rbac.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from cms_rbac.modules.permissions.engine import is_super_admin, require_permission
from cms_rbac.modules.permissions.schemas import Action, Resource
from cms_rbac.modules.users.schemas import Actor


class UserRoleService:
    """User operations gated by the super-admin guard"""

    def __init__(self, ctx: AccessContext):
        self.ctx = ctx

    def assign_role(self, actor: Actor, user_id: str, role_id: str) -> Actor:
        """Assign a role to a user"""
        require_permission(self.ctx, actor, Resource.USERS, Action.UPDATE)

        target = self._get_existing(user_id)
        if role_id == target.role_id:
            return target

        role = self.ctx.role_store.find_by_id(role_id)
        if role is None:
            raise ValidationError("Invalid role ID")

        target_is_super = self._role_name(target.role_id) == SUPER_ADMIN_ROLE

        if actor.id == target.id and target_is_super:
            raise self._denied("Cannot change your own super_admin role")

        if role.name == SUPER_ADMIN_ROLE and not is_super_admin(self.ctx, actor):
            raise self._denied("Only super administrators can assign the super_admin role")

        if target_is_super and not is_super_admin(self.ctx, actor):
            raise self._denied("Only super administrators can reassign super_admin users")

        self.ctx.user_store.set_role_id(target.id, role_id)
        return self._get_existing(user_id)

    def delete_user(self, actor: Actor, user_id: str) -> None:
        """Delete a user"""
        require_permission(self.ctx, actor, Resource.USERS, Action.DELETE)

        if actor.id == user_id:
            raise ValidationError("Cannot delete your own account")

        target = self._get_existing(user_id)
        if self._role_name(target.role_id) == SUPER_ADMIN_ROLE and not is_super_admin(self.ctx, actor):
            raise AuthorizationError(
                resource=Resource.USERS.value,
                action=Action.DELETE.value,
                reason="Only super administrators can delete super_admin users"
            )

        self.ctx.user_store.delete(user_id)

    def _get_existing(self, user_id: str) -> Actor:
        user = self.ctx.user_store.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def _role_name(self, role_id: Optional[str]) -> Optional[str]:
        if not role_id:
            return None
        role = self.ctx.role_store.find_by_id(role_id)
        return role.name if role else None

    @staticmethod
    def _denied(reason: str) -> AuthorizationError:
        return AuthorizationError(
            resource=Resource.USERS.value,
            action=Action.UPDATE.value,
            reason=reason
        )
