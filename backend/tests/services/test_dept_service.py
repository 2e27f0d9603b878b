"""
部门服务测试：CRUD、层级校验、删除保护
"""
import pytest

from rbac_admin.core.exceptions import (
    DuplicateKey, HasChildren, HasMembers, InvalidHierarchy, InvalidInput, ResourceNotFound
)
from rbac_admin.schemas.sys_dept import DeptCreate, DeptUpdate

from conftest import make_user


async def _create(service, name, code, parent_id=None, **kwargs):
    return await service.create_dept(DeptCreate(name=name, code=code, parent_id=parent_id, **kwargs))


@pytest.mark.asyncio
async def test_create_dept_applies_defaults(container):
    service = container.dept_service()
    dept = await _create(service, "  总部 ", "HQ")

    assert dept.id is not None
    assert dept.name == "总部"
    assert dept.status == "active"
    assert dept.sort_order == 0
    assert dept.create_time is not None


@pytest.mark.asyncio
async def test_create_dept_requires_name_and_code(container):
    service = container.dept_service()
    with pytest.raises(InvalidInput):
        await _create(service, "", "HQ")
    with pytest.raises(InvalidInput):
        await _create(service, "总部", None)


@pytest.mark.asyncio
async def test_create_dept_rejects_duplicate_code(container):
    service = container.dept_service()
    await _create(service, "总部", "HQ")
    with pytest.raises(DuplicateKey):
        await _create(service, "另一个", "HQ")


@pytest.mark.asyncio
async def test_create_dept_rejects_missing_parent(container):
    with pytest.raises(InvalidInput):
        await _create(container.dept_service(), "研发部", "RD", parent_id=999)


@pytest.mark.asyncio
async def test_dept_tree_and_parent_name(container):
    service = container.dept_service()
    root = await _create(service, "总部", "HQ")
    rd = await _create(service, "研发部", "RD", parent_id=root.id, sort_order=2)
    qa = await _create(service, "测试部", "QA", parent_id=root.id, sort_order=1)

    tree = await service.get_dept_tree()
    assert [node.id for node in tree] == [root.id]
    assert [child.id for child in tree[0].children] == [qa.id, rd.id]

    detail = await service.get_dept_by_id(rd.id)
    assert detail.parent_name == "总部"


@pytest.mark.asyncio
async def test_dept_options_only_include_active(container):
    service = container.dept_service()
    root = await _create(service, "总部", "HQ")
    await _create(service, "停用部门", "OFF", parent_id=root.id, status="inactive")
    rd = await _create(service, "研发部", "RD", parent_id=root.id)

    options = await service.get_dept_options()
    assert len(options) == 1
    assert options[0].value == root.id
    assert options[0].tag == "HQ"
    assert [child.value for child in options[0].children] == [rd.id]
    assert options[0].children[0].children is None


@pytest.mark.asyncio
async def test_update_dept_rejects_self_and_descendant_parent(container):
    service = container.dept_service()
    root = await _create(service, "总部", "HQ")
    child = await _create(service, "研发部", "RD", parent_id=root.id)
    grandchild = await _create(service, "前端组", "FE", parent_id=child.id)

    with pytest.raises(InvalidHierarchy):
        await service.update_dept(root.id, DeptUpdate(parent_id=root.id))
    with pytest.raises(InvalidHierarchy):
        await service.update_dept(root.id, DeptUpdate(parent_id=grandchild.id))

    # 校验失败不改变原有父子关系
    assert (await service.get_dept_by_id(root.id)).parent_id is None


@pytest.mark.asyncio
async def test_update_dept_only_touches_given_fields(container):
    service = container.dept_service()
    root = await _create(service, "总部", "HQ")
    child = await _create(service, "研发部", "RD", parent_id=root.id, manager="张三")

    updated = await service.update_dept(child.id, DeptUpdate(name="研发中心"))
    assert updated.name == "研发中心"
    assert updated.manager == "张三"
    assert updated.parent_id == root.id

    # 显式传 null 把部门移到根
    moved = await service.update_dept(child.id, DeptUpdate(parent_id=None))
    assert moved.parent_id is None


@pytest.mark.asyncio
async def test_update_dept_rejects_blank_name(container):
    service = container.dept_service()
    dept = await _create(service, "总部", "HQ")
    with pytest.raises(InvalidInput):
        await service.update_dept(dept.id, DeptUpdate(name="  "))


@pytest.mark.asyncio
async def test_delete_dept_guards(container):
    service = container.dept_service()
    root = await _create(service, "总部", "HQ")
    child = await _create(service, "研发部", "RD", parent_id=root.id)
    await make_user(container, "alice", department_id=child.id)

    with pytest.raises(HasChildren):
        await service.delete_dept(root.id)
    with pytest.raises(HasMembers):
        await service.delete_dept(child.id)

    assert (await service.get_dept_by_id(child.id)).user_count == 1


@pytest.mark.asyncio
async def test_delete_dept(container):
    service = container.dept_service()
    dept = await _create(service, "总部", "HQ")

    result = await service.delete_dept(dept.id)
    assert result.message == "Department deleted successfully"
    with pytest.raises(ResourceNotFound):
        await service.get_dept_by_id(dept.id)


@pytest.mark.asyncio
async def test_list_depts_paginates(container):
    service = container.dept_service()
    for i in range(25):
        await _create(service, f"部门{i:02d}", f"D{i:02d}", sort_order=i)

    page = await service.list_depts(page=3, page_size=10)
    assert page.total == 25
    assert page.total_pages == 3
    assert len(page.data) == 5
    assert page.data[0].code == "D20"

    filtered = await service.list_depts(keyword="d0")
    assert filtered.total == 10


@pytest.mark.asyncio
async def test_create_dept_returns_parent_name(container):
    service = container.dept_service()
    root = await _create(service, "总部", "HQ")
    child = await _create(service, "研发部", "RD", parent_id=root.id)

    assert child.parent_name == "总部"
    assert child.user_count == 0
    assert root.parent_name is None


@pytest.mark.asyncio
async def test_list_depts_keyword_is_literal_substring(container):
    service = container.dept_service()
    await _create(service, "Sales", "SALES")
    await _create(service, "R&D", "RD")
    await _create(service, "Growth 100%", "GROWTH")
    await _create(service, "Ops_East", "OPS")

    percent = await service.list_depts(keyword="%")
    assert [d.name for d in percent.data] == ["Growth 100%"]

    underscore = await service.list_depts(keyword="_")
    assert [d.name for d in underscore.data] == ["Ops_East"]

    assert (await service.list_depts(keyword="\\")).total == 0
