"""
Typed errors raised by the access-control core.
Each carries a machine-readable `kind` and a human `reason`; the HTTP layer
maps the kind to a status code (see main.py).
"""

from typing import Any, Dict, Optional


class AccessControlError(Exception):
    kind = "error"

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "detail": self.reason}


class ValidationError(AccessControlError):
    """Malformed input to role creation/update."""
    kind = "validation"


class NotFoundError(AccessControlError):
    kind = "not_found"


class ConflictError(AccessControlError):
    """Duplicate role name, or a protected role cannot be changed/removed."""
    kind = "conflict"


class ConfigurationError(AccessControlError):
    """Required default roles cannot be resolved."""
    kind = "configuration"


class AuthorizationError(AccessControlError):
    kind = "authorization"

    def __init__(
        self,
        resource: str,
        action: str,
        instance_name: Optional[str] = None,
        reason: Optional[str] = None
    ):
        super().__init__(reason or "You do not have permission to perform this action")
        self.resource = resource
        self.action = action
        self.instance_name = instance_name

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "resource": self.resource,
            "action": self.action,
            "instance_name": self.instance_name
        })
        return data
