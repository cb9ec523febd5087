"""Supabase-backed stores, exercised against a mocked query builder."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from postgrest.exceptions import APIError

from cms_rbac.core.context import AccessContext
from cms_rbac.core.exceptions import ConflictError, ValidationError
from cms_rbac.modules.permissions.engine import check_permission, get_effective_permissions, is_super_admin
from cms_rbac.modules.permissions.schemas import PermissionSet
from cms_rbac.modules.roles.schemas import Role
from cms_rbac.modules.roles.store import SupabaseRoleStore, to_record
from cms_rbac.modules.users.schemas import Actor
from cms_rbac.modules.users.store import SupabaseUserStore

ROLE_ROW = {
    "id": "r1",
    "name": "editor",
    "display_name": "Editor",
    "description": None,
    "permissions": {"collections": {"*": ["read"]}, "media": []},
    "is_system": True,
    "created_at": "2024-01-01T00:00:00+00:00",
    "updated_at": None,
}


@pytest.fixture()
def supabase():
    return MagicMock()


def query(supabase):
    return supabase.table.return_value


def test_find_by_name_builds_role(supabase):
    query(supabase).select.return_value.eq.return_value.limit.return_value.execute.return_value.data = [ROLE_ROW]

    role = SupabaseRoleStore(supabase).find_by_name("editor")

    supabase.table.assert_called_with("cms_roles")
    query(supabase).select.return_value.eq.assert_called_with("name", "editor")
    assert role.id == "r1"
    assert role.permissions.to_dict() == {"collections": {"*": ["read"]}, "media": []}


def test_find_by_id_missing(supabase):
    query(supabase).select.return_value.eq.return_value.limit.return_value.execute.return_value.data = []

    assert SupabaseRoleStore(supabase).find_by_id("nope") is None


def stored_role(supabase, **overrides):
    row = {**ROLE_ROW, **overrides}
    query(supabase).select.return_value.eq.return_value.limit.return_value.execute.return_value.data = [row]
    return AccessContext(role_store=SupabaseRoleStore(supabase), user_store=SupabaseUserStore(supabase))


def test_malformed_stored_permissions_resolve_to_denies(supabase):
    ctx = stored_role(supabase, permissions={"media": "read", "collections": {"*": ["read", None]}})
    actor = Actor(id="u1", role_id="r1")

    assert check_permission(ctx, actor, "collections", "read", "posts").allowed is True
    assert check_permission(ctx, actor, "media", "read").allowed is False
    assert is_super_admin(ctx, actor) is False
    assert get_effective_permissions(ctx, actor).to_dict() == {
        "media": "read",
        "collections": {"*": ["read", None]},
    }


def test_null_stored_permissions_grant_nothing(supabase):
    ctx = stored_role(supabase, permissions=None)

    decision = check_permission(ctx, Actor(id="u1", role_id="r1"), "media", "read")
    assert decision.reason == "Missing 'read' permission for media"


@pytest.mark.parametrize("overrides", [{"permissions": ["read"]}, {"name": None}])
def test_unreadable_role_row_is_a_validation_error(supabase, overrides):
    ctx = stored_role(supabase, **overrides)

    with pytest.raises(ValidationError):
        check_permission(ctx, Actor(id="u1", role_id="r1"), "media", "read")


def test_list_all_falls_back_to_created_at(supabase):
    query(supabase).select.return_value.order.return_value.execute.return_value.data = [ROLE_ROW]

    roles = SupabaseRoleStore(supabase).list_all(order_by="password", order_dir="desc")

    query(supabase).select.return_value.order.assert_called_with("created_at", desc=True)
    assert [r.name for r in roles] == ["editor"]


def test_insert_maps_unique_violation_to_conflict(supabase):
    query(supabase).insert.return_value.execute.side_effect = APIError(
        {"code": "23505", "message": "duplicate key value violates unique constraint", "details": None, "hint": None}
    )
    role = Role(**ROLE_ROW)

    with pytest.raises(ConflictError):
        SupabaseRoleStore(supabase).insert(role)

    inserted = query(supabase).insert.call_args[0][0]
    assert inserted["permissions"] == ROLE_ROW["permissions"]
    assert inserted["created_at"].startswith("2024-01-01")


def test_insert_propagates_other_errors(supabase):
    query(supabase).insert.return_value.execute.side_effect = APIError(
        {"code": "42P01", "message": "relation does not exist", "details": None, "hint": None}
    )

    with pytest.raises(APIError):
        SupabaseRoleStore(supabase).insert(Role(**ROLE_ROW))


def test_to_record_serializes_domain_values():
    now = datetime(2024, 5, 1, tzinfo=timezone.utc)

    record = to_record({"permissions": PermissionSet(media=["read"]), "updated_at": now, "display_name": "X"})

    assert record == {"permissions": {"media": ["read"]}, "updated_at": now.isoformat(), "display_name": "X"}


def test_count_actors_with_role(supabase):
    query(supabase).select.return_value.eq.return_value.execute.return_value.count = 3

    assert SupabaseRoleStore(supabase, users_table="people").count_actors_with_role("r1") == 3
    supabase.table.assert_called_with("people")


def test_user_store_lists_unmigrated_users(supabase):
    query(supabase).select.return_value.is_.return_value.execute.return_value.data = [
        {"id": "u1", "username": "old", "email": None, "role": "admin", "role_id": None,
         "created_at": None, "updated_at": None}
    ]

    users = SupabaseUserStore(supabase).list_without_role()

    query(supabase).select.return_value.is_.assert_called_with("role_id", "null")
    assert users[0].role == "admin"
    assert users[0].role_id is None


def test_user_store_set_role_id(supabase):
    SupabaseUserStore(supabase).set_role_id("u1", "r1")

    payload = query(supabase).update.call_args[0][0]
    assert payload["role_id"] == "r1"
    query(supabase).update.return_value.eq.assert_called_with("id", "u1")
