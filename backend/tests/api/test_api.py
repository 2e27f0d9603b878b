"""
HTTP 接口测试（httpx.AsyncClient + ASGITransport）
"""
import pytest

from rbac_admin.core.config import settings
from rbac_admin.scripts.init_data import init_data

from conftest import make_permission, make_role, make_user

API = settings.API_V1_STR


async def _login(client, username, password):
    return await client.post(f"{API}/auth/login", json={"username": username, "password": password})


async def _admin_headers(client, container):
    await init_data(container)
    response = await _login(client, settings.FIRST_SUPERUSER, settings.FIRST_SUPERUSER_PASSWORD)
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['accessToken']}"}


@pytest.mark.asyncio
async def test_login_returns_token_and_camel_case_payload(client, container):
    await init_data(container)
    response = await _login(client, settings.FIRST_SUPERUSER, settings.FIRST_SUPERUSER_PASSWORD)

    assert response.status_code == 200
    body = response.json()
    assert body["tokenType"] == "bearer"
    assert body["expiresIn"] == settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    assert body["user"]["username"] == settings.FIRST_SUPERUSER
    assert "realName" in body["user"]
    assert [role["code"] for role in body["roles"]] == ["admin"]
    assert "user:read" in body["permissions"]
    assert response.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_login_failures_use_error_envelope(client, container):
    await make_user(container, "alice", password="pw-123456")
    await make_user(container, "bob", password="pw-123456", status="inactive")

    unknown = await _login(client, "nobody", "pw-123456")
    wrong = await _login(client, "alice", "bad")
    disabled = await _login(client, "bob", "pw-123456")
    blank = await _login(client, "", "")

    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json() == wrong.json() == {"error": "Invalid username or password"}
    assert disabled.status_code == 403
    assert blank.status_code == 400
    assert set(blank.json()) == {"error"}


@pytest.mark.asyncio
async def test_requests_without_token_are_rejected(client):
    response = await client.get(f"{API}/users")
    assert response.status_code == 401
    assert set(response.json()) == {"error"}


@pytest.mark.asyncio
async def test_missing_permission_is_forbidden(client, container):
    permission_id = await make_permission(container, "user:read")
    role_id = await make_role(container, "访客", code="viewer", permission_ids=[permission_id])
    await make_user(container, "alice", password="pw-123456", role_ids=[role_id])
    token = (await _login(client, "alice", "pw-123456")).json()["accessToken"]
    headers = {"Authorization": f"Bearer {token}"}

    allowed = await client.get(f"{API}/users", headers=headers)
    assert allowed.status_code == 200

    denied = await client.delete(f"{API}/users/1", headers=headers)
    assert denied.status_code == 403
    assert denied.json() == {"error": "Missing permission: user:delete"}


@pytest.mark.asyncio
async def test_auth_me(client, container):
    headers = await _admin_headers(client, container)
    response = await client.get(f"{API}/auth/me", headers=headers)

    assert response.status_code == 200
    assert response.json()["user"]["username"] == settings.FIRST_SUPERUSER


@pytest.mark.asyncio
async def test_dept_crud_over_http(client, container):
    headers = await _admin_headers(client, container)

    created = await client.post(f"{API}/depts", json={"name": "总部", "code": "HQ"}, headers=headers)
    assert created.status_code == 200, created.text
    root_id = created.json()["id"]

    child = await client.post(
        f"{API}/depts", json={"name": "研发部", "code": "RD", "parentId": root_id, "sortOrder": 1}, headers=headers
    )
    assert child.json()["parentName"] == "总部"

    duplicate = await client.post(f"{API}/depts", json={"name": "X", "code": "HQ"}, headers=headers)
    assert duplicate.status_code == 400

    tree = (await client.get(f"{API}/depts/tree", headers=headers)).json()
    assert tree[0]["children"][0]["code"] == "RD"

    blocked = await client.delete(f"{API}/depts/{root_id}", headers=headers)
    assert blocked.status_code == 400

    missing = await client.get(f"{API}/depts/999", headers=headers)
    assert missing.status_code == 404
    assert set(missing.json()) == {"error"}


@pytest.mark.asyncio
async def test_pagination_over_http(client, container):
    headers = await _admin_headers(client, container)
    for i in range(24):
        await make_user(container, f"user{i:02d}")

    response = await client.get(f"{API}/users", params={"page": 3, "pageSize": 10}, headers=headers)
    body = response.json()

    # 24 个新用户 + 初始管理员
    assert body["total"] == 25
    assert body["totalPages"] == 3
    assert body["page"] == 3
    assert body["pageSize"] == 10
    assert len(body["data"]) == 5


@pytest.mark.asyncio
async def test_invalid_query_parameter_is_bad_request(client, container):
    headers = await _admin_headers(client, container)
    response = await client.get(f"{API}/users", params={"page": "abc"}, headers=headers)

    assert response.status_code == 400
    assert set(response.json()) == {"error"}


@pytest.mark.asyncio
async def test_role_and_menu_endpoints(client, container):
    headers = await _admin_headers(client, container)

    menu = await client.post(f"{API}/menus", json={"name": "系统管理", "type": "directory"}, headers=headers)
    assert menu.status_code == 200, menu.text
    menu_id = menu.json()["id"]

    role = await client.post(f"{API}/roles", json={"name": "运营"}, headers=headers)
    assert role.json()["code"].startswith("ROLE_")
    role_id = role.json()["id"]

    assigned = await client.put(f"{API}/roles/{role_id}/menus", json={"menuIds": [menu_id]}, headers=headers)
    assert assigned.json()["menuIds"] == [menu_id]

    routes = await client.get(f"{API}/menus/routes", headers=headers)
    assert [node["id"] for node in routes.json()] == [menu_id]

    permissions = await client.get(f"{API}/permissions", params={"keyword": "role"}, headers=headers)
    assert {item["code"] for item in permissions.json()["data"]} == {"role:read", "role:write", "role:delete"}
