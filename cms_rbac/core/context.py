"""
Explicit context passed into every access-control operation.
Holds the store handles and configuration; nothing is kept process-wide.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from supabase import Client

from cms_rbac.config.roles_config import DEFAULT_ROLES
from cms_rbac.config.settings import Settings
from cms_rbac.modules.roles.store import RoleStore, SupabaseRoleStore
from cms_rbac.modules.users.store import SupabaseUserStore, UserStore


@dataclass
class AccessContext:
    role_store: RoleStore
    user_store: UserStore
    settings: Optional[Settings] = None
    default_roles: Mapping[str, Dict[str, Any]] = field(default_factory=lambda: copy.deepcopy(DEFAULT_ROLES))


def build_context(settings: Settings, supabase: Client) -> AccessContext:
    return AccessContext(
        role_store=SupabaseRoleStore(supabase, settings.roles_table, settings.users_table),
        user_store=SupabaseUserStore(supabase, settings.users_table),
        settings=settings
    )
