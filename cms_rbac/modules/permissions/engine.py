"""
Permission resolution.

Every check re-reads the actor's role through the RoleStore; nothing is
cached, so role edits apply to the next check.
"""

import logging
from typing import Any, Iterable, Optional, Union

from cms_rbac.config.roles_config import (
    DEFAULT_LEGACY_ROLE,
    LEGACY_ADMIN,
    LEGACY_ADMIN_DENIED,
    LEGACY_EDITOR,
    LEGACY_EDITOR_GRANTS,
    SUPER_ADMIN_ROLE,
)
from cms_rbac.core.context import AccessContext
from cms_rbac.core.exceptions import AuthorizationError
from cms_rbac.modules.permissions.schemas import (
    SCOPED_RESOURCES,
    WILDCARD,
    Action,
    Decision,
    PermissionCheck,
    PermissionSet,
    Resource,
    to_action,
    to_resource,
)
from cms_rbac.modules.users.schemas import Actor

logger = logging.getLogger(__name__)


def check_permission(
    ctx: AccessContext,
    actor: Actor,
    resource: Union[str, Resource],
    action: Union[str, Action],
    instance_name: Optional[str] = None
) -> Decision:
    """Decide whether `actor` may perform `action` on `resource` (optionally a named instance)"""
    resource = to_resource(resource)
    action = to_action(action)

    if not actor.role_id:
        return check_legacy_permission(actor, resource, action)

    role = ctx.role_store.find_by_id(actor.role_id)
    if role is None:
        return Decision.deny("Role not found")

    return check_role_permissions(role.permissions, resource, action, instance_name)


def granted_actions(value: Any) -> list:
    """Action tokens from a stored grant; anything but a list grants nothing"""
    return value if isinstance(value, list) else []


def check_role_permissions(
    permissions: PermissionSet,
    resource: Resource,
    action: Action,
    instance_name: Optional[str] = None
) -> Decision:
    if resource in SCOPED_RESOURCES:
        scoped = getattr(permissions, resource.value)
        if not isinstance(scoped, dict):
            return Decision.deny(f"No {resource.value} permissions")

        # A specific entry that lacks the action still falls through to the
        # wildcard; it does not override it.
        specific = granted_actions(scoped.get(instance_name)) if instance_name else []
        if action.value in specific:
            return Decision.allow()

        if action.value in granted_actions(scoped.get(WILDCARD)):
            return Decision.allow()

        target = f"{resource.value}/{instance_name}" if instance_name else resource.value
        return Decision.deny(f"Missing '{action.value}' permission for {target}")

    if action.value not in granted_actions(getattr(permissions, resource.value)):
        return Decision.deny(f"Missing '{action.value}' permission for {resource.value}")

    return Decision.allow()


def check_legacy_permission(actor: Actor, resource: Resource, action: Action) -> Decision:
    """Fallback for actors without a role_id, driven by the legacy `role` column"""
    role = actor.role or DEFAULT_LEGACY_ROLE

    if role == LEGACY_ADMIN:
        denied_reason = LEGACY_ADMIN_DENIED.get((resource.value, action.value))
        if denied_reason:
            return Decision.deny(denied_reason)
        return Decision.allow()

    if role == LEGACY_EDITOR and action.value in LEGACY_EDITOR_GRANTS.get(resource.value, ()):
        return Decision.allow()

    return Decision.deny(f"Insufficient permissions (legacy role: {role})")


def has_any(ctx: AccessContext, actor: Actor, checks: Iterable[PermissionCheck]) -> bool:
    """True if at least one check is allowed. Stops at the first allow."""
    for check in checks:
        if check_permission(ctx, actor, check.resource, check.action, check.instance_name).allowed:
            return True
    return False


def has_all(ctx: AccessContext, actor: Actor, checks: Iterable[PermissionCheck]) -> bool:
    """True if every check is allowed. Stops at the first deny."""
    for check in checks:
        decision = check_permission(ctx, actor, check.resource, check.action, check.instance_name)
        if not decision.allowed:
            logger.debug(f"Permission denied for user {actor.id}: {decision.reason}")
            return False
    return True


def require_permission(
    ctx: AccessContext,
    actor: Actor,
    resource: Union[str, Resource],
    action: Union[str, Action],
    instance_name: Optional[str] = None
) -> None:
    """Raise AuthorizationError unless the check is allowed"""
    decision = check_permission(ctx, actor, resource, action, instance_name)
    if not decision.allowed:
        raise AuthorizationError(
            resource=to_resource(resource).value,
            action=to_action(action).value,
            instance_name=instance_name,
            reason=decision.reason
        )


def get_effective_permissions(ctx: AccessContext, actor: Actor) -> Optional[PermissionSet]:
    """
    Permissions to show for `actor` (UI only; enforcement goes through
    check_permission). None when the assigned role no longer exists.
    """
    if not actor.role_id:
        return legacy_permission_set(actor.role or DEFAULT_LEGACY_ROLE)

    role = ctx.role_store.find_by_id(actor.role_id)
    if role is None:
        return None
    return role.permissions


def legacy_permission_set(role: str) -> PermissionSet:
    """PermissionSet granting exactly what check_legacy_permission allows for `role`"""
    grants = {}
    for resource in Resource:
        if role == LEGACY_ADMIN:
            grants[resource.value] = [
                action.value for action in Action
                if (resource.value, action.value) not in LEGACY_ADMIN_DENIED
            ]
        elif role == LEGACY_EDITOR:
            grants[resource.value] = list(LEGACY_EDITOR_GRANTS.get(resource.value, []))
        else:
            grants[resource.value] = []
    return PermissionSet.from_grants(grants)


def is_super_admin(ctx: AccessContext, actor: Actor) -> bool:
    """
    True if the actor's role is `super_admin`.

    Legacy actors (no role_id) with role "admin" also count. This keeps
    pre-migration admins able to manage elevation, but it means anyone
    holding the legacy admin value is trusted as a super admin.
    """
    if not actor.role_id:
        return actor.role == LEGACY_ADMIN

    role = ctx.role_store.find_by_id(actor.role_id)
    return role is not None and role.name == SUPER_ADMIN_ROLE
