import re
from pydantic import BaseModel, Field, field_serializer
from typing import Any, Optional
from datetime import datetime

from cms_rbac.core.exceptions import ValidationError
from cms_rbac.modules.permissions.schemas import PermissionSet

ROLE_NAME_PATTERN = re.compile(r"[a-z][a-z0-9_]*")


def validate_role_name(name: Any) -> str:
    """Role names start with a letter and contain only lowercase letters, digits and underscores"""
    if not isinstance(name, str) or not ROLE_NAME_PATTERN.fullmatch(name):
        raise ValidationError(
            "Role name must start with a letter and contain only lowercase letters, numbers, and underscores"
        )
    return name


class Role(BaseModel):
    id: str
    name: str
    display_name: str
    description: Optional[str] = None
    permissions: PermissionSet = Field(default_factory=PermissionSet)
    is_system: bool = False
    created_at: datetime
    updated_at: Optional[datetime] = None

    @field_serializer("permissions")
    def serialize_permissions(self, permissions: PermissionSet):
        return permissions.to_dict()

    def to_record(self) -> dict:
        """Row shape for the roles table"""
        return self.model_dump(mode="json")


# Request bodies are loosely typed on purpose: the service reports missing
# fields and non-object permissions as ValidationError.
class RoleCreate(BaseModel):
    name: Optional[str] = None
    display_name: Optional[str] = None
    description: Optional[str] = None
    permissions: Optional[Any] = None


class RoleUpdate(BaseModel):
    name: Optional[str] = None
    display_name: Optional[str] = None
    description: Optional[str] = None
    permissions: Optional[Any] = None
