from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class Actor(BaseModel):
    """Authenticated identity performing an operation.

    `role_id` is None for legacy, unmigrated users; once set it is the only
    input to permission resolution and the legacy `role` column is ignored.
    """
    id: str
    username: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None  # legacy: "admin" | "editor"
    role_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RoleAssign(BaseModel):
    role_id: str
