"""
Roles Configuration
Defines the canonical system roles and the legacy two-tier grants.
Used by the seeder on every startup to install/re-sync system roles, and by
the resolution engine for actors that have not been migrated yet.
"""

SUPER_ADMIN_ROLE = "super_admin"
ADMIN_ROLE = "admin"
EDITOR_ROLE = "editor"

# Legacy `role` column values
LEGACY_ADMIN = "admin"
LEGACY_EDITOR = "editor"
DEFAULT_LEGACY_ROLE = LEGACY_EDITOR

ALL_ACTIONS = ["create", "read", "update", "delete", "publish", "manage"]

# System roles, keyed by a fixed identifier
DEFAULT_ROLES = {
    "super_admin": {
        "name": SUPER_ADMIN_ROLE,
        "display_name": "Super Admin",
        "description": "Full access to everything, including role management",
        "permissions": {
            "collections": {"*": list(ALL_ACTIONS)},
            "singletons": {"*": list(ALL_ACTIONS)},
            "media": list(ALL_ACTIONS),
            "users": list(ALL_ACTIONS),
            "roles": list(ALL_ACTIONS),
            "settings": list(ALL_ACTIONS)
        }
    },
    "admin": {
        "name": ADMIN_ROLE,
        "display_name": "Administrator",
        "description": "Manage content, media and users; cannot manage roles",
        "permissions": {
            "collections": {"*": ["create", "read", "update", "delete", "publish"]},
            "singletons": {"*": ["read", "update", "publish"]},
            "media": ["create", "read", "update", "delete"],
            "users": ["create", "read", "update", "delete"],
            "roles": ["read"],
            "settings": ["read", "update"]
        }
    },
    "editor": {
        "name": EDITOR_ROLE,
        "display_name": "Editor",
        "description": "Create, edit and publish content and media",
        "permissions": {
            "collections": {"*": ["create", "read", "update", "publish"]},
            "singletons": {"*": ["read", "update", "publish"]},
            "media": ["create", "read", "update"],
            "users": [],
            "roles": [],
            "settings": ["read"]
        }
    }
}

# Permissions for a custom role created without an explicit permission set
CUSTOM_ROLE_DEFAULT_PERMISSIONS = {
    "collections": {"*": ["read"]},
    "singletons": {"*": ["read"]},
    "media": ["read"],
    "users": [],
    "roles": [],
    "settings": []
}

# What a legacy editor may do, per resource class. Legacy admins get
# everything except the pairs in LEGACY_ADMIN_DENIED.
LEGACY_EDITOR_GRANTS = {
    "collections": ["create", "read", "update", "publish"],
    "singletons": ["create", "read", "update", "publish"],
    "media": ["create", "read", "update"],
    "settings": ["read"]
}

LEGACY_ADMIN_DENIED = {
    ("roles", "manage"): "Only super_admin can manage roles"
}
