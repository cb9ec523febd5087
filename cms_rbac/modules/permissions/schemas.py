import copy
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict

from cms_rbac.core.exceptions import ValidationError

WILDCARD = "*"


class Resource(str, Enum):
    COLLECTIONS = "collections"
    SINGLETONS = "singletons"
    MEDIA = "media"
    USERS = "users"
    ROLES = "roles"
    SETTINGS = "settings"


class Action(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    PUBLISH = "publish"
    MANAGE = "manage"


# Resource classes whose grants are keyed by instance name (or "*")
SCOPED_RESOURCES = (Resource.COLLECTIONS, Resource.SINGLETONS)


def to_resource(value: Union[str, Resource]) -> Resource:
    try:
        return Resource(value)
    except ValueError:
        raise ValidationError(f"Unknown resource: {value}")


def to_action(value: Union[str, Action]) -> Action:
    try:
        return Action(value)
    except ValueError:
        raise ValidationError(f"Unknown action: {value}")


class PermissionSet(BaseModel):
    """
    Grants held by a role.

    `collections`/`singletons` map an instance name (or "*") to allowed
    actions; the other resource classes are flat action lists. Unknown keys
    and unknown action tokens are kept as-is so newer permission shapes
    survive a round trip through older code.
    """

    model_config = ConfigDict(extra="allow")

    # Stored as given; resolution treats anything that is not a dict of lists
    # (scoped) or a list (simple) as granting nothing.
    collections: Optional[Any] = None
    singletons: Optional[Any] = None
    media: Optional[Any] = None
    users: Optional[Any] = None
    roles: Optional[Any] = None
    settings: Optional[Any] = None

    @classmethod
    def from_raw(cls, raw: Any) -> "PermissionSet":
        """Build from untyped input (e.g. a request body or a JSON column)."""
        if isinstance(raw, PermissionSet):
            return raw
        if not isinstance(raw, dict):
            raise ValidationError("Permissions must be an object")
        return cls.model_validate(raw)

    @classmethod
    def from_grants(cls, grants: Mapping[str, Sequence[str]]) -> "PermissionSet":
        """Build from flat per-resource grants; scoped resources get them under the wildcard."""
        data: Dict[str, Any] = {}
        for resource, actions in grants.items():
            if resource in (r.value for r in SCOPED_RESOURCES):
                data[resource] = {WILDCARD: list(actions)}
            else:
                data[resource] = list(actions)
        return cls.model_validate(data)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-compatible shape for storage/transport; keeps only keys that were set."""
        data = self.model_dump(exclude_unset=True)
        if self.model_extra:
            data.update(copy.deepcopy(self.model_extra))
        return data


class Decision(BaseModel):
    allowed: bool
    reason: Optional[str] = None

    @classmethod
    def allow(cls) -> "Decision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> "Decision":
        return cls(allowed=False, reason=reason)


class PermissionCheck(BaseModel):
    resource: Resource
    action: Action
    instance_name: Optional[str] = None
