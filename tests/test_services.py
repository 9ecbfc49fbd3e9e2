"""User, permission and role services against a recording transport."""
import json
from urllib.parse import parse_qs, urlparse

import pytest

from conftest import envelope
from iam_client import (
    DecodeError,
    Permission,
    PermissionService,
    RemoteError,
    Role,
    RoleService,
    User,
    UserService,
)


def _path_and_query(prepared):
    parsed = urlparse(prepared.url)
    return parsed.path, parse_qs(parsed.query, keep_blank_values=True)


# ─────────────────────────────────────────────────────────────────────────────
# Users
# ─────────────────────────────────────────────────────────────────────────────
def test_get_users_lists_organization(client, transport):
    transport.queue(envelope(data=[{"owner": "built-in", "name": "alice"}, {"owner": "built-in", "name": "bob"}]))

    users = UserService(client).get_users()

    assert [u.name for u in users] == ["alice", "bob"]
    assert _path_and_query(transport.last) == ("/api/get-users", {"owner": ["built-in"]})


def test_get_user_returns_none_when_missing(client, transport):
    transport.queue(envelope(data=None))

    assert UserService(client).get_user("ghost") is None
    assert _path_and_query(transport.last) == ("/api/get-user", {"id": ["built-in/ghost"]})


def test_get_user_by_email(client, transport):
    transport.queue(envelope(data={"owner": "built-in", "name": "alice", "email": "alice@example.com"}))

    user = UserService(client).get_user_by_email("alice@example.com")

    assert user.name == "alice"
    _, query = _path_and_query(transport.last)
    assert query == {"owner": ["built-in"], "email": ["alice@example.com"]}


def test_get_sorted_users(client, transport):
    transport.queue(envelope(data=[]))
    UserService(client).get_sorted_users("created_time", 25)
    path, query = _path_and_query(transport.last)
    assert path == "/api/get-sorted-users"
    assert query == {"owner": ["built-in"], "sorter": ["created_time"], "limit": ["25"]}


@pytest.mark.parametrize("is_online, expected", [(None, ""), (True, "1"), (False, "0")])
def test_get_user_count(client, transport, is_online, expected):
    transport.queue(envelope(data=7))
    assert UserService(client).get_user_count(is_online) == 7
    _, query = _path_and_query(transport.last)
    assert query["isOnline"] == [expected]


def test_get_user_count_rejects_non_integer(client, transport):
    transport.queue(envelope(data="seven"))
    with pytest.raises(DecodeError):
        UserService(client).get_user_count()


def test_add_user_overwrites_owner_and_uses_user_id(client, transport):
    transport.queue(envelope(data="Affected"))
    user = User(owner="someone-else", name="alice", email="alice@example.com")

    assert UserService(client).add_user(user) is True

    path, query = _path_and_query(transport.last)
    assert path == "/api/add-user"
    assert query == {"id": ["someone-else/alice"]}
    assert json.loads(transport.last.body)["owner"] == "built-in"


def test_update_user_for_columns(client, transport):
    transport.queue(envelope(data="Affected"))
    user = User(owner="built-in", name="alice", id="uuid-1", phone="123")

    UserService(client).update_user_for_columns(user, ["phone", "email"])

    _, query = _path_and_query(transport.last)
    assert query == {"id": ["uuid-1"], "columns": ["phone,email"]}


def test_update_user_by_id_targets_explicit_id(client, transport):
    transport.queue(envelope(data="Affected"))
    UserService(client).update_user_by_id("built-in/old-name", User(name="new-name"))
    _, query = _path_and_query(transport.last)
    assert query == {"id": ["built-in/old-name"]}


def test_modify_user_returns_envelope_and_flag(client, transport):
    transport.queue({"status": "ok", "msg": "", "data": "Affected"})
    resp, affected = UserService(client).modify_user("delete-user", User(owner="built-in", name="alice"))
    assert resp.ok and affected is True


def test_delete_user_remote_failure(client, transport):
    transport.queue({"status": "error", "msg": "user not found"})
    with pytest.raises(RemoteError) as exc_info:
        UserService(client).delete_user(User(name="ghost"))
    assert exc_info.value.message == "user not found"


# ─────────────────────────────────────────────────────────────────────────────
# Permissions
# ─────────────────────────────────────────────────────────────────────────────
def test_get_permissions(client, transport):
    transport.queue(envelope(data=[{"owner": "built-in", "name": "read", "actions": ["Read"]}]))
    perms = PermissionService(client).get_permissions()
    assert perms == [Permission(owner="built-in", name="read", actions=["Read"])]
    assert _path_and_query(transport.last)[0] == "/api/get-permissions"


def test_get_permission(client, transport):
    transport.queue(envelope(data={"owner": "built-in", "name": "read"}))
    assert PermissionService(client).get_permission("read").name == "read"
    assert _path_and_query(transport.last) == ("/api/get-permission", {"id": ["built-in/read"]})


@pytest.mark.parametrize(
    "method, action",
    [
        ("add_permission", "add-permission"),
        ("update_permission", "update-permission"),
        ("delete_permission", "delete-permission"),
    ],
)
def test_permission_mutators(client, transport, method, action):
    transport.queue(envelope(data="Affected"))
    perm = Permission(owner="org1", name="read")

    assert getattr(PermissionService(client), method)(perm) is True

    path, query = _path_and_query(transport.last)
    assert path == f"/api/{action}"
    assert query == {"id": ["org1/read"]}
    assert json.loads(transport.last.body)["owner"] == "built-in"


def test_update_permission_for_columns(client, transport):
    transport.queue(envelope(data="Affected"))
    PermissionService(client).update_permission_for_columns(Permission(owner="o", name="p"), ["users"])
    assert _path_and_query(transport.last)[1]["columns"] == ["users"]


# ─────────────────────────────────────────────────────────────────────────────
# Roles
# ─────────────────────────────────────────────────────────────────────────────
def test_add_role_scenario(client, transport):
    """add-role with owner org1: id keeps org1, body carries the configured org."""
    transport.queue({"status": "ok", "msg": "", "data": "Affected"})
    role = Role(owner="org1", name="editor")

    resp, affected = RoleService(client).modify_role("add-role", role)

    assert affected is True
    path, query = _path_and_query(transport.last)
    assert path == "/api/add-role"
    assert query == {"id": ["org1/editor"]}
    body = json.loads(transport.last.body)
    assert body["owner"] == "built-in"
    assert body["owner"] != "org1"


def test_update_role_not_affected(client, transport):
    transport.queue(envelope(data="Unaffected"))
    assert RoleService(client).update_role(Role(owner="o", name="r")) is False


def test_update_role_for_columns_and_delete(client, transport):
    transport.queue(envelope(data="Affected"))
    transport.queue(envelope(data="Affected"))
    service = RoleService(client)
    role = Role(owner="o", name="r")

    assert service.update_role_for_columns(role, ["users", "roles"])
    # owner was stamped by the first call, so the second id uses it
    assert service.delete_role(role)

    first, second = (_path_and_query(r) for r in transport.requests)
    assert first == ("/api/update-role", {"id": ["o/r"], "columns": ["users,roles"]})
    assert second == ("/api/delete-role", {"id": ["built-in/r"]})


def test_get_roles_and_role(client, transport):
    transport.queue(envelope(data=[{"owner": "built-in", "name": "admin", "users": ["built-in/alice"]}]))
    transport.queue(envelope(data=None))
    service = RoleService(client)

    roles = service.get_roles()
    assert roles[0].users == ["built-in/alice"]
    assert service.get_role("missing") is None


def test_get_roles_with_non_object_items_raises_decode_error(client, transport):
    transport.queue(envelope(data=["built-in/admin", 3]))
    with pytest.raises(DecodeError):
        RoleService(client).get_roles()


def test_update_fetched_user_targets_its_dedicated_id(client, transport):
    """A user read back from the service is addressed by its id field, not owner/name."""
    transport.queue(envelope(data={"owner": "built-in", "name": "alice", "id": "9f2c-uuid"}))
    transport.queue(envelope(data="Affected"))
    transport.queue(envelope(data="Affected"))
    service = UserService(client)

    user = service.get_user("alice")
    assert service.update_user(user) is True
    assert service.update_user_by_id("built-in/alice", user) is True

    update, update_by_name = (_path_and_query(r)[1] for r in transport.requests[1:])
    assert update == {"id": ["9f2c-uuid"]}
    assert update_by_name == {"id": ["built-in/alice"]}
