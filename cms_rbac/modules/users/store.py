from datetime import datetime, timezone
from typing import List, Optional, Protocol, runtime_checkable

from supabase import Client

from cms_rbac.modules.users.schemas import Actor

ACTOR_COLUMNS = "id, username, email, role, role_id, created_at, updated_at"


@runtime_checkable
class UserStore(Protocol):
    """Access to the user rows the access-control core needs."""

    def find_by_id(self, user_id: str) -> Optional[Actor]: ...

    def list_without_role(self) -> List[Actor]: ...

    def set_role_id(self, user_id: str, role_id: str) -> None: ...

    def delete(self, user_id: str) -> None: ...


class SupabaseUserStore:
    def __init__(self, supabase: Client, table: str = "cms_users"):
        self.supabase = supabase
        self.table = table

    def find_by_id(self, user_id: str) -> Optional[Actor]:
        result = self.supabase.table(self.table)\
            .select(ACTOR_COLUMNS)\
            .eq("id", user_id)\
            .limit(1)\
            .execute()
        return Actor(**result.data[0]) if result.data else None

    def list_without_role(self) -> List[Actor]:
        result = self.supabase.table(self.table)\
            .select(ACTOR_COLUMNS)\
            .is_("role_id", "null")\
            .execute()
        return [Actor(**user) for user in result.data]

    def set_role_id(self, user_id: str, role_id: str) -> None:
        self.supabase.table(self.table)\
            .update({
                "role_id": role_id,
                "updated_at": datetime.now(timezone.utc).isoformat()
            })\
            .eq("id", user_id)\
            .execute()

    def delete(self, user_id: str) -> None:
        self.supabase.table(self.table)\
            .delete()\
            .eq("id", user_id)\
            .execute()
