"""
权限API端点
backend/rbac_admin/api/v1/endpoints/permissions.py
"""
from typing import Optional

from dependency_injector.wiring import inject
from fastapi import APIRouter, Depends, Query

from rbac_admin.api.deps import PermissionServiceDep
from rbac_admin.enums.sys_permissions import PermissionCode
from rbac_admin.schemas.responses import PageResult, Message, DEFAULT_PAGE_SIZE
from rbac_admin.schemas.sys_permission import PermissionCreate, PermissionUpdate, PermissionOut
from rbac_admin.utils.permission_checker import permission_checker

router = APIRouter(prefix="/permissions", tags=["权限管理"])


@router.get(
    "",
    response_model=PageResult[PermissionOut],
    summary="权限列表",
    dependencies=[Depends(permission_checker(PermissionCode.PERMISSION_READ))],
)
@inject
async def list_permissions(
        permission_service: PermissionServiceDep,
        keyword: Optional[str] = Query(None),
        permission_type: Optional[str] = Query(None, alias="type"),
        status: Optional[str] = Query(None),
        page: int = Query(1),
        page_size: int = Query(DEFAULT_PAGE_SIZE, alias="pageSize"),
) -> PageResult[PermissionOut]:
    return await permission_service.list_permissions(
        keyword=keyword,
        permission_type=permission_type,
        status=status,
        page=page,
        page_size=page_size,
    )


@router.get(
    "/{permission_id}",
    response_model=PermissionOut,
    summary="权限详情",
    dependencies=[Depends(permission_checker(PermissionCode.PERMISSION_READ))],
)
@inject
async def get_permission(permission_id: int, permission_service: PermissionServiceDep) -> PermissionOut:
    return await permission_service.get_permission_by_id(permission_id)


@router.post(
    "",
    response_model=PermissionOut,
    summary="创建权限",
    description="传入 menuId 时同时把编码绑定到该菜单",
    dependencies=[Depends(permission_checker(PermissionCode.PERMISSION_WRITE))],
)
@inject
async def create_permission(
        permission_in: PermissionCreate, permission_service: PermissionServiceDep
) -> PermissionOut:
    return await permission_service.create_permission(permission_in)


@router.put(
    "/{permission_id}",
    response_model=PermissionOut,
    summary="更新权限",
    description="menuId 显式为 null 时解除菜单绑定",
    dependencies=[Depends(permission_checker(PermissionCode.PERMISSION_WRITE))],
)
@inject
async def update_permission(
        permission_id: int, permission_in: PermissionUpdate, permission_service: PermissionServiceDep
) -> PermissionOut:
    return await permission_service.update_permission(permission_id, permission_in)


@router.delete(
    "/{permission_id}",
    response_model=Message,
    summary="删除权限",
    description="仍被角色引用时拒绝删除",
    dependencies=[Depends(permission_checker(PermissionCode.PERMISSION_DELETE))],
)
@inject
async def delete_permission(permission_id: int, permission_service: PermissionServiceDep) -> Message:
    return await permission_service.delete_permission(permission_id)
