"""
用户服务测试
"""
import pytest

from rbac_admin.core.exceptions import DuplicateKey, InvalidInput, ResourceNotFound
from rbac_admin.schemas.sys_dept import DeptCreate
from rbac_admin.schemas.sys_user import UserCreate, UserUpdate

from conftest import make_role, make_user


@pytest.mark.asyncio
async def test_create_user_hashes_password_and_hides_it(container):
    service = container.user_service()
    user_id = await make_user(container, "alice", password="plain-secret")

    out = await service.get_user_by_id(user_id)
    assert "password" not in out.model_dump()

    async with container.user_repository().transaction() as session:
        stored = await container.user_repository().get_by_id(session, user_id)
    assert stored.password != "plain-secret"
    assert container.credential_verifier().verify("plain-secret", stored.password)


@pytest.mark.asyncio
async def test_create_user_requires_fields(container):
    service = container.user_service()
    with pytest.raises(InvalidInput):
        await service.create_user(UserCreate(username="bob", password="", real_name="Bob"))
    with pytest.raises(InvalidInput):
        await service.create_user(UserCreate(username="bob", password="x"))


@pytest.mark.asyncio
async def test_create_user_rejects_duplicate_username(container):
    await make_user(container, "alice")
    with pytest.raises(DuplicateKey):
        await make_user(container, "alice")


@pytest.mark.asyncio
async def test_create_user_validates_department_and_roles(container):
    with pytest.raises(InvalidInput):
        await make_user(container, "alice", department_id=42)
    with pytest.raises(InvalidInput):
        await make_user(container, "alice", role_ids=[7])

    # 校验失败时用户不会被部分写入
    assert (await container.user_service().list_users()).total == 0


@pytest.mark.asyncio
async def test_user_out_includes_department_and_roles(container):
    dept = await container.dept_service().create_dept(DeptCreate(name="研发部", code="RD"))
    editor = await make_role(container, "编辑", code="editor")
    viewer = await make_role(container, "访客", code="viewer")
    user_id = await make_user(container, "alice", department_id=dept.id, role_ids=[viewer, editor, viewer])

    out = await container.user_service().get_user_by_id(user_id)
    assert out.department_name == "研发部"
    assert [role.code for role in out.roles] == ["editor", "viewer"]


@pytest.mark.asyncio
async def test_update_user_role_ids_semantics(container):
    service = container.user_service()
    role_a = await make_role(container, "A", code="role_a")
    role_b = await make_role(container, "B", code="role_b")
    user_id = await make_user(container, "alice", role_ids=[role_a, role_b])

    # 不传 roleIds：角色保持不变
    out = await service.update_user(user_id, UserUpdate(real_name="Alice Liu"))
    assert out.real_name == "Alice Liu"
    assert {role.id for role in out.roles} == {role_a, role_b}

    out = await service.update_user(user_id, UserUpdate(role_ids=[role_b]))
    assert [role.id for role in out.roles] == [role_b]

    # 空列表：清空角色
    out = await service.update_user(user_id, UserUpdate(role_ids=[]))
    assert out.roles == []


@pytest.mark.asyncio
async def test_update_user_blank_password_keeps_digest(container):
    service = container.user_service()
    verifier = container.credential_verifier()
    repository = container.user_repository()
    user_id = await make_user(container, "alice", password="first-pass")

    await service.update_user(user_id, UserUpdate(password=""))
    async with repository.transaction() as session:
        assert verifier.verify("first-pass", (await repository.get_by_id(session, user_id)).password)

    await service.update_user(user_id, UserUpdate(password="second-pass"))
    async with repository.transaction() as session:
        assert verifier.verify("second-pass", (await repository.get_by_id(session, user_id)).password)


@pytest.mark.asyncio
async def test_update_user_rejects_taken_username(container):
    await make_user(container, "alice")
    bob = await make_user(container, "bob")
    with pytest.raises(DuplicateKey):
        await container.user_service().update_user(bob, UserUpdate(username="alice"))


@pytest.mark.asyncio
async def test_delete_user_removes_role_links(container):
    role_id = await make_role(container, "A", code="role_a")
    user_id = await make_user(container, "alice", role_ids=[role_id])

    await container.user_service().delete_user(user_id)

    with pytest.raises(ResourceNotFound):
        await container.user_service().get_user_by_id(user_id)
    async with container.role_repository().transaction() as session:
        assert await container.user_role_sync().count_by_right(session, role_id) == 0


@pytest.mark.asyncio
async def test_list_users_filters_and_paginates(container):
    dept = await container.dept_service().create_dept(DeptCreate(name="研发部", code="RD"))
    for i in range(25):
        await make_user(container, f"user{i:02d}", department_id=dept.id if i % 2 == 0 else None)
    await make_user(container, "inactive", status="inactive")

    page = await container.user_service().list_users(page=3, page_size=10)
    assert page.total == 26
    assert page.total_pages == 3
    assert len(page.data) == 6

    by_dept = await container.user_service().list_users(department_id=dept.id, page_size=100)
    assert by_dept.total == 13

    by_status = await container.user_service().list_users(status="inactive")
    assert [user.username for user in by_status.data] == ["inactive"]
