from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest

from cms_rbac.config.roles_config import SUPER_ADMIN_ROLE
from cms_rbac.core.context import AccessContext
from cms_rbac.core.exceptions import ConflictError
from cms_rbac.modules.permissions.schemas import PermissionSet
from cms_rbac.modules.permissions.seeder import seed_default_roles
from cms_rbac.modules.roles.schemas import Role
from cms_rbac.modules.users.schemas import Actor


class InMemoryUserStore:
    def __init__(self):
        self.users: Dict[str, Actor] = {}
        self.fail_on: set = set()

    def add(self, actor: Actor) -> Actor:
        self.users[actor.id] = actor
        return actor

    def find_by_id(self, user_id: str) -> Optional[Actor]:
        return self.users.get(user_id)

    def list_without_role(self) -> List[Actor]:
        return [u for u in self.users.values() if not u.role_id]

    def set_role_id(self, user_id: str, role_id: str) -> None:
        if user_id in self.fail_on:
            raise RuntimeError("connection reset")
        self.users[user_id] = self.users[user_id].model_copy(update={"role_id": role_id})

    def delete(self, user_id: str) -> None:
        self.users.pop(user_id, None)


class InMemoryRoleStore:
    def __init__(self, user_store: InMemoryUserStore):
        self.roles: Dict[str, Role] = {}
        self.user_store = user_store

    def find_by_name(self, name: str) -> Optional[Role]:
        return next((r for r in self.roles.values() if r.name == name), None)

    def find_by_id(self, role_id: str) -> Optional[Role]:
        return self.roles.get(role_id)

    def list_all(self, order_by: str = "created_at", order_dir: str = "asc") -> List[Role]:
        if order_by not in ("name", "display_name", "created_at"):
            order_by = "created_at"
        return sorted(self.roles.values(), key=lambda r: getattr(r, order_by), reverse=order_dir != "asc")

    def insert(self, role: Role) -> None:
        if self.find_by_name(role.name):
            raise ConflictError(f"Role name already exists: {role.name}")
        self.roles[role.id] = role

    def update(self, role_id: str, changes: Dict[str, Any]) -> None:
        self.roles[role_id] = self.roles[role_id].model_copy(update=changes)

    def delete(self, role_id: str) -> None:
        self.roles.pop(role_id, None)

    def count_actors_with_role(self, role_id: str) -> int:
        return sum(1 for u in self.user_store.users.values() if u.role_id == role_id)


@pytest.fixture()
def user_store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture()
def role_store(user_store: InMemoryUserStore) -> InMemoryRoleStore:
    return InMemoryRoleStore(user_store)


@pytest.fixture()
def ctx(role_store: InMemoryRoleStore, user_store: InMemoryUserStore) -> AccessContext:
    return AccessContext(role_store=role_store, user_store=user_store)


@pytest.fixture()
def seeded_ctx(ctx: AccessContext) -> AccessContext:
    seed_default_roles(ctx)
    return ctx


def make_role(role_store: InMemoryRoleStore, name: str, permissions: dict, is_system: bool = False) -> Role:
    role = Role(
        id=f"role-{name}",
        name=name,
        display_name=name.replace("_", " ").title(),
        permissions=PermissionSet.from_raw(permissions),
        is_system=is_system,
        created_at=datetime.now(timezone.utc)
    )
    role_store.insert(role)
    return role


def actor_with_role(ctx: AccessContext, role_name: str, actor_id: Optional[str] = None) -> Actor:
    role = ctx.role_store.find_by_name(role_name)
    actor = Actor(id=actor_id or f"user-{role_name}", username=role_name, role_id=role.id)
    ctx.user_store.add(actor)
    return actor


@pytest.fixture()
def super_admin(seeded_ctx: AccessContext) -> Actor:
    return actor_with_role(seeded_ctx, SUPER_ADMIN_ROLE)


@pytest.fixture()
def admin(seeded_ctx: AccessContext) -> Actor:
    return actor_with_role(seeded_ctx, "admin")


@pytest.fixture()
def editor(seeded_ctx: AccessContext) -> Actor:
    return actor_with_role(seeded_ctx, "editor")
