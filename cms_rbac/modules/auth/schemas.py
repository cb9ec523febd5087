from pydantic import BaseModel, field_serializer
from typing import Optional

from cms_rbac.modules.permissions.schemas import PermissionSet


class EffectivePermissionsResponse(BaseModel):
    user_id: str
    role_id: Optional[str] = None
    legacy_role: Optional[str] = None
    is_super_admin: bool
    permissions: Optional[PermissionSet] = None

    @field_serializer("permissions")
    def serialize_permissions(self, permissions: Optional[PermissionSet]):
        return permissions.to_dict() if permissions is not None else None
