"""
Bootstrap: install/re-sync the system roles and move legacy users onto them.
Run once at process startup, seeding first.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, Tuple

from cms_rbac.config.roles_config import ADMIN_ROLE, EDITOR_ROLE, LEGACY_ADMIN
from cms_rbac.core.context import AccessContext
from cms_rbac.core.exceptions import ConfigurationError, ConflictError
from cms_rbac.modules.permissions.schemas import PermissionSet
from cms_rbac.modules.roles.schemas import Role

logger = logging.getLogger(__name__)


def seed_default_roles(ctx: AccessContext) -> Dict[str, int]:
    """
    Make sure every default role exists as a system role.

    Missing roles are created. Existing system roles get their permissions,
    display name and description reset to the canonical values (id and
    created_at are kept). A non-system role holding a default name is left
    alone. Returns created/updated/skipped counts.
    """
    logger.info("Seeding default roles...")

    counts = {"created": 0, "updated": 0, "skipped": 0}
    now = datetime.now(timezone.utc)

    for role_data in ctx.default_roles.values():
        permissions = PermissionSet.from_raw(role_data["permissions"])
        existing = ctx.role_store.find_by_name(role_data["name"])

        if existing is None:
            role = Role(
                id=str(uuid.uuid4()),
                name=role_data["name"],
                display_name=role_data["display_name"],
                description=role_data.get("description"),
                permissions=permissions,
                is_system=True,
                created_at=now,
                updated_at=now
            )
            try:
                ctx.role_store.insert(role)
                counts["created"] += 1
                logger.info(f"Created default role: {role.display_name}")
                continue
            except ConflictError:
                # Another instance seeded it first
                logger.info(f"Default role {role_data['name']} was created concurrently, syncing instead")
                existing = ctx.role_store.find_by_name(role_data["name"])
                if existing is None:
                    raise ConfigurationError(
                        f"Role {role_data['name']} conflicted on insert but cannot be read back"
                    )

        if not existing.is_system:
            counts["skipped"] += 1
            logger.warning(f"Role {existing.name} exists but is not a system role; leaving it untouched")
            continue

        ctx.role_store.update(existing.id, {
            "permissions": permissions,
            "display_name": role_data["display_name"],
            "description": role_data.get("description"),
            "updated_at": now
        })
        counts["updated"] += 1
        logger.debug(f"Synced default role: {existing.name}")

    logger.info(f"Roles seeded: {counts['created']} created, {counts['updated']} updated, {counts['skipped']} skipped")
    return counts


def resolve_default_role_ids(ctx: AccessContext) -> Tuple[str, str]:
    """Return (admin role id, editor role id), or raise ConfigurationError"""
    admin_role = ctx.role_store.find_by_name(ADMIN_ROLE)
    editor_role = ctx.role_store.find_by_name(EDITOR_ROLE)
    if admin_role is None or editor_role is None:
        raise ConfigurationError("default roles not found")
    return admin_role.id, editor_role.id


def migrate_legacy_users(ctx: AccessContext) -> int:
    """
    Assign a role_id to every user that only has the legacy `role` column.

    Legacy admins go to the `admin` role, everyone else to `editor`. If the
    default roles cannot be resolved nothing is touched. Users are updated one
    by one, so a failure leaves a partial migration; running again finishes it.
    Returns the number of migrated users.
    """
    try:
        admin_role_id, editor_role_id = resolve_default_role_ids(ctx)
    except ConfigurationError as e:
        logger.warning(f"Cannot migrate users: {e.reason}")
        return 0

    migrated = 0
    for user in ctx.user_store.list_without_role():
        if user.role_id:
            continue

        new_role_id = admin_role_id if user.role == LEGACY_ADMIN else editor_role_id
        try:
            ctx.user_store.set_role_id(user.id, new_role_id)
        except Exception as e:
            logger.error(f"Error migrating user {user.id}: {e}")
            continue

        migrated += 1
        logger.info(f"Migrated user {user.username or user.id} to role system")

    logger.info(f"Legacy users migrated: {migrated}")
    return migrated
