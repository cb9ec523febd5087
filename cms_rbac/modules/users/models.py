# Supabase table: cms_users (name configurable via USERS_TABLE)
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in store.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

cms_users:
- id: text (primary key, references auth.users.id)
- username: text (unique, not null)
- email: text (nullable)
- role: text (nullable, default: 'editor') - legacy field, 'admin' | 'editor'
- role_id: text (nullable, references cms_roles.id) - null until migrated
- created_at: timestamp (not null)
- updated_at: timestamp (not null)

Only the columns used for permission resolution are read here; profile
and credential columns belong to the user-management flows.
"""
