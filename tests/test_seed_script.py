"""Tests for the seed_roles command-line entry point."""

import pytest

from cms_rbac.config.settings import Settings
from cms_rbac.modules.users.schemas import Actor
from cms_rbac.scripts import seed_roles


@pytest.fixture()
def script_ctx(ctx, monkeypatch):
    monkeypatch.setattr(seed_roles, "get_settings", lambda: Settings(supabase_url="http://localhost", supabase_key="test"))
    monkeypatch.setattr(seed_roles, "create_supabase", lambda settings: None)
    monkeypatch.setattr(seed_roles, "build_context", lambda settings, supabase: ctx)
    return ctx


def test_main_seeds_then_migrates(script_ctx, role_store, user_store):
    user_store.add(Actor(id="legacy", role="admin"))

    seed_roles.main()

    assert {r.name for r in role_store.roles.values()} == {"super_admin", "admin", "editor"}
    assert user_store.find_by_id("legacy").role_id == role_store.find_by_name("admin").id


def test_main_exits_1_when_store_fails(script_ctx, role_store, monkeypatch, caplog):
    def unavailable(name):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(role_store, "find_by_name", unavailable)

    with pytest.raises(SystemExit) as exc_info:
        seed_roles.main()

    assert exc_info.value.code == 1
    assert "database unavailable" in caplog.text
