"""
权限解析测试
"""
import pytest

from rbac_admin.services.sys_permission_resolver import ResolvedAccess, has_permission
from rbac_admin.schemas.sys_permission import PermissionUpdate
from rbac_admin.schemas.sys_role import RoleBrief

from conftest import make_permission, make_role, make_user


def test_has_permission_rules():
    assert has_permission(["admin"], [], "user:delete")
    assert has_permission(["viewer"], ["*"], "user:delete")
    assert has_permission(["viewer"], ["user:read"], "user:read")
    assert not has_permission(["viewer"], ["user:read"], "user:write")
    # 不支持前缀或通配段
    assert not has_permission(["viewer"], ["user:*"], "user:read")
    assert not has_permission([], [], "user:read")


def test_resolved_access_allows():
    access = ResolvedAccess(roles=[RoleBrief(id=1, name="编辑", code="editor")], permissions=["a"])
    assert access.role_codes == ["editor"]
    assert access.allows("a")
    assert not access.allows("b")


@pytest.mark.asyncio
async def test_resolve_unions_permissions_across_roles(container):
    a = await make_permission(container, "a")
    b = await make_permission(container, "b")
    c = await make_permission(container, "c")
    role_1 = await make_role(container, "R1", code="r1", permission_ids=[a, b])
    role_2 = await make_role(container, "R2", code="r2", permission_ids=[b, c])
    user_id = await make_user(container, "alice", role_ids=[role_1, role_2])

    access = await container.permission_resolver().resolve_for_user(user_id)
    assert access.permissions == ["a", "b", "c"]
    assert sorted(access.role_codes) == ["r1", "r2"]


@pytest.mark.asyncio
async def test_resolve_skips_inactive_permissions(container):
    a = await make_permission(container, "a")
    b = await make_permission(container, "b")
    role_id = await make_role(container, "R1", permission_ids=[a, b])
    user_id = await make_user(container, "alice", role_ids=[role_id])

    await container.permission_service().update_permission(b, PermissionUpdate(status="inactive"))

    access = await container.permission_resolver().resolve_for_user(user_id)
    assert access.permissions == ["a"]


@pytest.mark.asyncio
async def test_resolve_user_without_roles(container):
    user_id = await make_user(container, "alice")
    access = await container.permission_resolver().resolve_for_user(user_id)
    assert access.roles == []
    assert access.permissions == []
