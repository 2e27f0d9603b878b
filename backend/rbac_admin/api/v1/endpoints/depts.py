"""
部门API端点
backend/rbac_admin/api/v1/endpoints/depts.py
"""
from typing import List, Optional

from dependency_injector.wiring import inject
from fastapi import APIRouter, Depends, Query

from rbac_admin.api.deps import DeptServiceDep
from rbac_admin.enums.sys_permissions import PermissionCode
from rbac_admin.schemas.responses import PageResult, Message, DEFAULT_PAGE_SIZE
from rbac_admin.schemas.sys_dept import DeptCreate, DeptUpdate, DeptOut, DeptTreeNode, DeptOption
from rbac_admin.utils.permission_checker import permission_checker

router = APIRouter(prefix="/depts", tags=["部门管理"])


@router.get(
    "/options",
    response_model=List[DeptOption],
    summary="部门下拉选项",
    description="获取部门树形下拉选项，仅返回启用状态的部门",
    dependencies=[Depends(permission_checker(PermissionCode.DEPT_READ))],
)
@inject
async def get_dept_options(dept_service: DeptServiceDep) -> List[DeptOption]:
    """
    返回格式：
    [{"value": 部门ID, "label": "部门名称", "tag": "部门编码", "children": [...]}]
    """
    return await dept_service.get_dept_options()


@router.get(
    "/tree",
    response_model=List[DeptTreeNode],
    summary="部门树形结构",
    dependencies=[Depends(permission_checker(PermissionCode.DEPT_READ))],
)
@inject
async def get_dept_tree(dept_service: DeptServiceDep) -> List[DeptTreeNode]:
    return await dept_service.get_dept_tree()


@router.get(
    "",
    response_model=PageResult[DeptOut],
    summary="部门列表",
    description="获取部门列表，支持分页和关键词搜索",
    dependencies=[Depends(permission_checker(PermissionCode.DEPT_READ))],
)
@inject
async def list_depts(
        dept_service: DeptServiceDep,
        keyword: Optional[str] = Query(None, description="名称/编码关键词"),
        status: Optional[str] = Query(None, description="状态"),
        page: int = Query(1, description="页码"),
        page_size: int = Query(DEFAULT_PAGE_SIZE, alias="pageSize", description="每页条数"),
) -> PageResult[DeptOut]:
    return await dept_service.list_depts(keyword=keyword, status=status, page=page, page_size=page_size)


@router.get(
    "/{dept_id}",
    response_model=DeptOut,
    summary="部门详情",
    dependencies=[Depends(permission_checker(PermissionCode.DEPT_READ))],
)
@inject
async def get_dept(dept_id: int, dept_service: DeptServiceDep) -> DeptOut:
    return await dept_service.get_dept_by_id(dept_id)


@router.post(
    "",
    response_model=DeptOut,
    summary="创建部门",
    dependencies=[Depends(permission_checker(PermissionCode.DEPT_WRITE))],
)
@inject
async def create_dept(dept_in: DeptCreate, dept_service: DeptServiceDep) -> DeptOut:
    return await dept_service.create_dept(dept_in)


@router.put(
    "/{dept_id}",
    response_model=DeptOut,
    summary="更新部门",
    dependencies=[Depends(permission_checker(PermissionCode.DEPT_WRITE))],
)
@inject
async def update_dept(dept_id: int, dept_in: DeptUpdate, dept_service: DeptServiceDep) -> DeptOut:
    return await dept_service.update_dept(dept_id, dept_in)


@router.delete(
    "/{dept_id}",
    response_model=Message,
    summary="删除部门",
    description="存在子部门或部门下仍有用户时拒绝删除",
    dependencies=[Depends(permission_checker(PermissionCode.DEPT_DELETE))],
)
@inject
async def delete_dept(dept_id: int, dept_service: DeptServiceDep) -> Message:
    return await dept_service.delete_dept(dept_id)
