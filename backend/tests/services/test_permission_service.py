"""
权限服务测试：CRUD 与菜单绑定
"""
import pytest

from rbac_admin.core.exceptions import DuplicateKey, InUse, InvalidInput
from rbac_admin.schemas.sys_menu import MenuCreate
from rbac_admin.schemas.sys_permission import PermissionCreate, PermissionUpdate

from conftest import make_permission, make_role


async def _menu(container, name):
    return await container.menu_service().create_menu(MenuCreate(name=name, type="menu"))


@pytest.mark.asyncio
async def test_create_permission_requires_fields_and_unique_code(container):
    service = container.permission_service()
    with pytest.raises(InvalidInput):
        await service.create_permission(PermissionCreate(code="user:read", name="查看用户"))

    await make_permission(container, "user:read")
    with pytest.raises(DuplicateKey):
        await make_permission(container, "user:read")


@pytest.mark.asyncio
async def test_create_permission_binds_menu(container):
    menu = await _menu(container, "用户管理")
    permission_id = await make_permission(container, "user:read", menu_id=menu.id)

    out = await container.permission_service().get_permission_by_id(permission_id)
    assert out.menu_id == menu.id
    assert (await container.menu_service().get_menu_by_id(menu.id)).permission_code == "user:read"


@pytest.mark.asyncio
async def test_create_permission_with_unknown_menu_rolls_back(container):
    with pytest.raises(InvalidInput):
        await make_permission(container, "user:read", menu_id=404)
    assert (await container.permission_service().list_permissions()).total == 0


@pytest.mark.asyncio
async def test_unknown_menu_is_rejected_before_any_write(container):
    service = container.permission_service()
    writes = []
    repository = service.permission_repository
    original_create, original_update = repository.create, repository.update

    async def recording_create(session, data):
        writes.append(("create", data))
        return await original_create(session, data)

    async def recording_update(session, entity, data):
        writes.append(("update", data))
        return await original_update(session, entity, data)

    repository.create = recording_create
    repository.update = recording_update

    with pytest.raises(InvalidInput):
        await service.create_permission(PermissionCreate(code="user:read", name="查看用户", type="user", menu_id=404))
    assert writes == []

    permission_id = await make_permission(container, "user:read")
    with pytest.raises(InvalidInput):
        await service.update_permission(permission_id, PermissionUpdate(name="改名", menu_id=404))
    assert writes == []
    assert (await service.get_permission_by_id(permission_id)).name == "user:read"


@pytest.mark.asyncio
async def test_update_permission_menu_binding(container):
    service = container.permission_service()
    menu_a = await _menu(container, "A")
    menu_b = await _menu(container, "B")
    permission_id = await make_permission(container, "user:read", menu_id=menu_a.id)

    # 移到另一个菜单：原菜单上的编码被清除
    out = await service.update_permission(permission_id, PermissionUpdate(menu_id=menu_b.id))
    assert out.menu_id == menu_b.id
    assert (await container.menu_service().get_menu_by_id(menu_a.id)).permission_code is None

    # 不传 menuId：绑定保持
    out = await service.update_permission(permission_id, PermissionUpdate(name="查看用户列表"))
    assert out.menu_id == menu_b.id

    # 编码变更：菜单上的旧编码失效
    out = await service.update_permission(permission_id, PermissionUpdate(code="user:list"))
    assert out.menu_id is None
    assert (await container.menu_service().get_menu_by_id(menu_b.id)).permission_code is None

    await service.update_permission(permission_id, PermissionUpdate(menu_id=menu_a.id))
    # 显式 null：解除绑定
    out = await service.update_permission(permission_id, PermissionUpdate(menu_id=None))
    assert out.menu_id is None
    assert (await container.menu_service().get_menu_by_id(menu_a.id)).permission_code is None


@pytest.mark.asyncio
async def test_delete_permission_guards_and_unbinds(container):
    service = container.permission_service()
    menu = await _menu(container, "用户管理")
    permission_id = await make_permission(container, "user:read", menu_id=menu.id)
    role_id = await make_role(container, "编辑", permission_ids=[permission_id])

    with pytest.raises(InUse):
        await service.delete_permission(permission_id)
    assert (await service.get_permission_by_id(permission_id)).role_count == 1

    await container.role_service().assign_permissions(role_id, [])
    await service.delete_permission(permission_id)
    assert (await container.menu_service().get_menu_by_id(menu.id)).permission_code is None


@pytest.mark.asyncio
async def test_list_permissions_filters(container):
    await make_permission(container, "user:read", type="user")
    await make_permission(container, "role:read", type="role")
    await make_permission(container, "role:write", type="role", status="inactive")

    service = container.permission_service()
    assert (await service.list_permissions(permission_type="role")).total == 2
    assert (await service.list_permissions(keyword="user")).total == 1
    assert (await service.list_permissions(status="inactive")).data[0].code == "role:write"
