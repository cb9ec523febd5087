import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from postgrest.exceptions import APIError
from pydantic import ValidationError as PydanticValidationError
from supabase import Client

from cms_rbac.core.exceptions import ConflictError, ValidationError
from cms_rbac.modules.permissions.schemas import PermissionSet
from cms_rbac.modules.roles.schemas import Role

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"

ORDER_COLUMNS = ("name", "display_name", "created_at")


@runtime_checkable
class RoleStore(Protocol):
    """Persistence of role records."""

    def find_by_name(self, name: str) -> Optional[Role]: ...

    def find_by_id(self, role_id: str) -> Optional[Role]: ...

    def list_all(self, order_by: str = "created_at", order_dir: str = "asc") -> List[Role]: ...

    def insert(self, role: Role) -> None: ...

    def update(self, role_id: str, changes: Dict[str, Any]) -> None: ...

    def delete(self, role_id: str) -> None: ...

    def count_actors_with_role(self, role_id: str) -> int: ...


def to_record(changes: Dict[str, Any]) -> Dict[str, Any]:
    """Serialize a partial update into column values"""
    record = {}
    for key, value in changes.items():
        if isinstance(value, PermissionSet):
            value = value.to_dict()
        elif isinstance(value, datetime):
            value = value.isoformat()
        record[key] = value
    return record


def to_role(row: Dict[str, Any]) -> Role:
    """Build a Role from a table row; unreadable rows raise ValidationError"""
    row = dict(row)
    if row.get("permissions") is None:
        row["permissions"] = {}
    row["permissions"] = PermissionSet.from_raw(row["permissions"])
    try:
        return Role(**row)
    except PydanticValidationError as e:
        raise ValidationError(f"Malformed role record: {row.get('id')}") from e


class SupabaseRoleStore:
    def __init__(self, supabase: Client, table: str = "cms_roles", users_table: str = "cms_users"):
        self.supabase = supabase
        self.table = table
        self.users_table = users_table

    def find_by_name(self, name: str) -> Optional[Role]:
        result = self.supabase.table(self.table)\
            .select("*")\
            .eq("name", name)\
            .limit(1)\
            .execute()
        return to_role(result.data[0]) if result.data else None

    def find_by_id(self, role_id: str) -> Optional[Role]:
        result = self.supabase.table(self.table)\
            .select("*")\
            .eq("id", role_id)\
            .limit(1)\
            .execute()
        return to_role(result.data[0]) if result.data else None

    def list_all(self, order_by: str = "created_at", order_dir: str = "asc") -> List[Role]:
        if order_by not in ORDER_COLUMNS:
            order_by = "created_at"
        result = self.supabase.table(self.table)\
            .select("*")\
            .order(order_by, desc=order_dir != "asc")\
            .execute()
        return [to_role(row) for row in result.data]

    def insert(self, role: Role) -> None:
        try:
            self.supabase.table(self.table).insert(role.to_record()).execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise ConflictError(f"Role name already exists: {role.name}") from e
            raise

    def update(self, role_id: str, changes: Dict[str, Any]) -> None:
        self.supabase.table(self.table)\
            .update(to_record(changes))\
            .eq("id", role_id)\
            .execute()

    def delete(self, role_id: str) -> None:
        self.supabase.table(self.table)\
            .delete()\
            .eq("id", role_id)\
            .execute()

    def count_actors_with_role(self, role_id: str) -> int:
        result = self.supabase.table(self.users_table)\
            .select("id", count="exact")\
            .eq("role_id", role_id)\
            .execute()
        return result.count or 0
