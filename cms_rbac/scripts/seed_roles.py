"""
Seed Roles Script
Installs/re-syncs the system roles and migrates legacy users onto them.
Runs on application startup too; use this to do it by hand or from a job:

    python -m cms_rbac.scripts.seed_roles
"""

import sys
import logging

from cms_rbac.config.settings import get_settings
from cms_rbac.core.context import build_context
from cms_rbac.database.supabase_client import create_supabase
from cms_rbac.modules.permissions.seeder import migrate_legacy_users, seed_default_roles

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main():
    """Seed roles, then migrate legacy users"""
    try:
        settings = get_settings()
        ctx = build_context(settings, create_supabase(settings))

        logger.info("Starting role seeding...")

        # Seed roles first; migration looks them up by name
        counts = seed_default_roles(ctx)
        migrated = migrate_legacy_users(ctx)

        logger.info("Seeding completed successfully!")
        logger.info(
            f"Total: {counts['created']} roles created, {counts['updated']} synced, "
            f"{migrated} users migrated"
        )

    except Exception as e:
        logger.error(f"Error during seeding: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
