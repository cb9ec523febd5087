from supabase import create_client, Client
from cms_rbac.config.settings import Settings


def create_supabase(settings: Settings) -> Client:
    """Client for the role/user tables. Uses the service_role key when configured (bypasses RLS)."""
    key = settings.supabase_service_role_key or settings.supabase_key
    return create_client(settings.supabase_url, key)
