# Supabase table: cms_roles (name configurable via ROLES_TABLE)
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in store.py

"""
Expected Supabase table structure:

cms_roles:
- id: text (primary key) - uuid4 string generated by the application
- name: text (not null, unique) - e.g., "super_admin", "admin", "editor"
- display_name: text (not null)
- description: text (nullable)
- permissions: jsonb (not null) - e.g.
    {
      "collections": {"*": ["read"], "posts": ["read", "update"]},
      "singletons": {"*": ["read"]},
      "media": ["read"],
      "users": [],
      "roles": [],
      "settings": []
    }
- is_system: boolean (not null, default: false)
- created_at: timestamp (not null)
- updated_at: timestamp (nullable)

The unique constraint on name is what makes concurrent seeding safe:
a losing insert fails with 23505 and the seeder falls back to syncing.
"""
