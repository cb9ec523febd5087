"""Tests for PermissionSet parsing/serialization and role name validation."""

import json

import pytest

from cms_rbac.core.exceptions import ValidationError
from cms_rbac.modules.permissions.schemas import (
    Action,
    PermissionSet,
    Resource,
    to_action,
    to_resource,
)
from cms_rbac.modules.roles.schemas import validate_role_name


# -- PermissionSet.from_raw ---------------------------------------------------


@pytest.mark.parametrize("raw", [None, "collections", 42, ["read"], True])
def test_from_raw_rejects_non_objects(raw):
    with pytest.raises(ValidationError) as exc_info:
        PermissionSet.from_raw(raw)
    assert exc_info.value.reason == "Permissions must be an object"
    assert exc_info.value.kind == "validation"


def test_from_raw_accepts_empty_object():
    permissions = PermissionSet.from_raw({})
    assert permissions.collections is None
    assert permissions.media is None


def test_from_raw_keeps_unknown_keys_and_actions():
    raw = {
        "collections": {"posts": ["read", "archive"]},
        "webhooks": ["trigger"],
    }
    permissions = PermissionSet.from_raw(raw)

    assert permissions.collections == {"posts": ["read", "archive"]}
    assert permissions.to_dict()["webhooks"] == ["trigger"]


def test_from_raw_keeps_wrong_shapes_and_tokens_as_given():
    raw = {
        "media": ["read", 7],
        "users": {"*": ["read"]},
        "collections": {"*": ["read", None], "posts": "update"},
    }
    permissions = PermissionSet.from_raw(raw)

    assert permissions.to_dict() == raw


def test_from_raw_returns_existing_instance():
    permissions = PermissionSet(media=["read"])
    assert PermissionSet.from_raw(permissions) is permissions


# -- Serialization ------------------------------------------------------------


def test_round_trip_is_lossless_through_json():
    raw = {
        "collections": {"posts": ["read"], "pages": []},
        "singletons": {"*": ["read", "update"]},
        "media": [],
        "users": [],
        "roles": ["read"],
        "settings": ["read"],
        "future_resource": {"nested": [1, 2]},
    }
    restored = PermissionSet.from_raw(json.loads(json.dumps(PermissionSet.from_raw(raw).to_dict())))

    assert restored.to_dict() == raw


def test_to_dict_omits_absent_keys():
    assert PermissionSet.from_raw({"collections": {"posts": ["read"]}}).to_dict() == {
        "collections": {"posts": ["read"]}
    }


def test_from_grants_puts_scoped_resources_under_wildcard():
    permissions = PermissionSet.from_grants({"collections": ["read"], "media": ["create"]})
    assert permissions.to_dict() == {"collections": {"*": ["read"]}, "media": ["create"]}


# -- Vocabulary -----------------------------------------------------------------


def test_vocabulary_coercion():
    assert to_resource("collections") is Resource.COLLECTIONS
    assert to_action(Action.PUBLISH) is Action.PUBLISH
    with pytest.raises(ValidationError):
        to_resource("pages")
    with pytest.raises(ValidationError):
        to_action("archive")


# -- Role names -----------------------------------------------------------------


@pytest.mark.parametrize("name", ["admin2_ok", "a", "content_manager"])
def test_valid_role_names(name):
    assert validate_role_name(name) == name


@pytest.mark.parametrize("name", ["Admin", "2admin", "admin name", "", "_admin", "admin\n", None])
def test_invalid_role_names(name):
    with pytest.raises(ValidationError):
        validate_role_name(name)
