"""
角色API端点
backend/rbac_admin/api/v1/endpoints/roles.py
"""
from typing import List, Optional

from dependency_injector.wiring import inject
from fastapi import APIRouter, Depends, Query

from rbac_admin.api.deps import RoleServiceDep
from rbac_admin.enums.sys_permissions import PermissionCode
from rbac_admin.schemas.responses import PageResult, Message, DEFAULT_PAGE_SIZE
from rbac_admin.schemas.sys_role import (
    RoleCreate, RoleUpdate, RoleOut, RoleOption, RolePermissionAssign, RoleMenuAssign
)
from rbac_admin.utils.permission_checker import permission_checker

router = APIRouter(prefix="/roles", tags=["角色管理"])


@router.get(
    "/options",
    response_model=List[RoleOption],
    summary="角色下拉选项",
    dependencies=[Depends(permission_checker(PermissionCode.ROLE_READ))],
)
@inject
async def get_role_options(role_service: RoleServiceDep) -> List[RoleOption]:
    return await role_service.get_role_options()


@router.get(
    "",
    response_model=PageResult[RoleOut],
    summary="角色列表",
    dependencies=[Depends(permission_checker(PermissionCode.ROLE_READ))],
)
@inject
async def list_roles(
        role_service: RoleServiceDep,
        keyword: Optional[str] = Query(None),
        status: Optional[str] = Query(None),
        page: int = Query(1),
        page_size: int = Query(DEFAULT_PAGE_SIZE, alias="pageSize"),
) -> PageResult[RoleOut]:
    return await role_service.list_roles(keyword=keyword, status=status, page=page, page_size=page_size)


@router.get(
    "/{role_id}",
    response_model=RoleOut,
    summary="角色详情",
    dependencies=[Depends(permission_checker(PermissionCode.ROLE_READ))],
)
@inject
async def get_role(role_id: int, role_service: RoleServiceDep) -> RoleOut:
    return await role_service.get_role_by_id(role_id)


@router.post(
    "",
    response_model=RoleOut,
    summary="创建角色",
    description="编码缺省时自动生成 ROLE_<毫秒时间戳>_<8位十六进制>",
    dependencies=[Depends(permission_checker(PermissionCode.ROLE_WRITE))],
)
@inject
async def create_role(role_in: RoleCreate, role_service: RoleServiceDep) -> RoleOut:
    return await role_service.create_role(role_in)


@router.put(
    "/{role_id}",
    response_model=RoleOut,
    summary="更新角色",
    dependencies=[Depends(permission_checker(PermissionCode.ROLE_WRITE))],
)
@inject
async def update_role(role_id: int, role_in: RoleUpdate, role_service: RoleServiceDep) -> RoleOut:
    return await role_service.update_role(role_id, role_in)


@router.put(
    "/{role_id}/permissions",
    response_model=RoleOut,
    summary="分配角色权限",
    dependencies=[Depends(permission_checker(PermissionCode.ROLE_WRITE))],
)
@inject
async def assign_role_permissions(
        role_id: int, assign_in: RolePermissionAssign, role_service: RoleServiceDep
) -> RoleOut:
    return await role_service.assign_permissions(role_id, assign_in.permission_ids)


@router.put(
    "/{role_id}/menus",
    response_model=RoleOut,
    summary="分配角色菜单",
    dependencies=[Depends(permission_checker(PermissionCode.ROLE_WRITE))],
)
@inject
async def assign_role_menus(role_id: int, assign_in: RoleMenuAssign, role_service: RoleServiceDep) -> RoleOut:
    return await role_service.assign_menus(role_id, assign_in.menu_ids)


@router.delete(
    "/{role_id}",
    response_model=Message,
    summary="删除角色",
    description="仍有用户拥有该角色时拒绝删除",
    dependencies=[Depends(permission_checker(PermissionCode.ROLE_DELETE))],
)
@inject
async def delete_role(role_id: int, role_service: RoleServiceDep) -> Message:
    return await role_service.delete_role(role_id)
