"""
角色服务测试
"""
import re

import pytest

from rbac_admin.core.exceptions import DuplicateKey, InUse, InvalidInput
from rbac_admin.schemas.sys_menu import MenuCreate
from rbac_admin.schemas.sys_role import RoleCreate, RoleUpdate
from rbac_admin.services.sys_role_service import generate_role_code

from conftest import make_permission, make_role, make_user

ROLE_CODE_PATTERN = re.compile(r"^ROLE_\d{13}_[0-9a-f]{8}$")


def test_generate_role_code_format():
    codes = {generate_role_code() for _ in range(50)}
    assert len(codes) == 50
    assert all(ROLE_CODE_PATTERN.match(code) for code in codes)


@pytest.mark.asyncio
async def test_create_role_generates_code_when_missing(container):
    role = await container.role_service().create_role(RoleCreate(name="运营"))
    assert ROLE_CODE_PATTERN.match(role.code)
    assert role.status == "active"
    assert role.menu_ids == []
    assert role.permission_ids == []


@pytest.mark.asyncio
async def test_create_role_requires_name_and_unique_code(container):
    service = container.role_service()
    with pytest.raises(InvalidInput):
        await service.create_role(RoleCreate(name=" "))
    await service.create_role(RoleCreate(name="编辑", code="editor"))
    with pytest.raises(DuplicateKey):
        await service.create_role(RoleCreate(name="编辑2", code="editor"))


@pytest.mark.asyncio
async def test_create_role_rejects_unknown_ids(container):
    service = container.role_service()
    with pytest.raises(InvalidInput):
        await service.create_role(RoleCreate(name="编辑", permission_ids=[123]))
    with pytest.raises(InvalidInput):
        await service.create_role(RoleCreate(name="编辑", menu_ids=[123]))
    assert (await service.list_roles()).total == 0


@pytest.mark.asyncio
async def test_update_role_association_semantics(container):
    service = container.role_service()
    p1 = await make_permission(container, "a:read")
    p2 = await make_permission(container, "a:write")
    menu = await container.menu_service().create_menu(MenuCreate(name="系统管理", type="directory"))
    role_id = await make_role(container, "编辑", permission_ids=[p1, p2])

    # 省略的关联保持不变
    out = await service.update_role(role_id, RoleUpdate(menu_ids=[menu.id]))
    assert out.permission_ids == [p1, p2]
    assert out.menu_ids == [menu.id]

    out = await service.update_role(role_id, RoleUpdate(permission_ids=[]))
    assert out.permission_ids == []
    assert out.menu_ids == [menu.id]


@pytest.mark.asyncio
async def test_assign_permissions_is_idempotent(container):
    service = container.role_service()
    ids = [await make_permission(container, f"p:{i}") for i in range(3)]
    role_id = await make_role(container, "编辑")

    await service.assign_permissions(role_id, ids)
    out = await service.assign_permissions(role_id, ids)
    assert out.permission_ids == sorted(ids)

    out = await service.assign_permissions(role_id, [])
    assert out.permission_ids == []


@pytest.mark.asyncio
async def test_delete_role_in_use(container):
    service = container.role_service()
    role_id = await make_role(container, "编辑")
    user_id = await make_user(container, "alice", role_ids=[role_id])

    with pytest.raises(InUse):
        await service.delete_role(role_id)

    await container.user_service().delete_user(user_id)
    result = await service.delete_role(role_id)
    assert result.message == "Role deleted successfully"


@pytest.mark.asyncio
async def test_role_out_counts_users(container):
    role_id = await make_role(container, "编辑")
    await make_user(container, "alice", role_ids=[role_id])
    await make_user(container, "bob", role_ids=[role_id])

    out = await container.role_service().get_role_by_id(role_id)
    assert out.user_count == 2


@pytest.mark.asyncio
async def test_role_options_only_active(container):
    await make_role(container, "启用", code="on")
    await make_role(container, "停用", code="off", status="inactive")

    options = await container.role_service().get_role_options()
    assert [option.tag for option in options] == ["on"]
