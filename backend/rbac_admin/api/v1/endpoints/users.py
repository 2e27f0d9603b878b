"""
用户API端点
backend/rbac_admin/api/v1/endpoints/users.py
"""
from typing import Optional

from dependency_injector.wiring import inject
from fastapi import APIRouter, Depends, Query

from rbac_admin.api.deps import UserServiceDep
from rbac_admin.enums.sys_permissions import PermissionCode
from rbac_admin.schemas.responses import PageResult, Message, DEFAULT_PAGE_SIZE
from rbac_admin.schemas.sys_user import UserCreate, UserUpdate, UserOut
from rbac_admin.utils.permission_checker import permission_checker

router = APIRouter(prefix="/users", tags=["用户管理"])


@router.get(
    "",
    response_model=PageResult[UserOut],
    summary="用户列表",
    description="关键词匹配用户名/姓名/邮箱，可按部门、状态过滤",
    dependencies=[Depends(permission_checker(PermissionCode.USER_READ))],
)
@inject
async def list_users(
        user_service: UserServiceDep,
        keyword: Optional[str] = Query(None),
        department_id: Optional[int] = Query(None, alias="departmentId"),
        status: Optional[str] = Query(None),
        page: int = Query(1),
        page_size: int = Query(DEFAULT_PAGE_SIZE, alias="pageSize"),
) -> PageResult[UserOut]:
    return await user_service.list_users(
        keyword=keyword,
        department_id=department_id,
        status=status,
        page=page,
        page_size=page_size,
    )


@router.get(
    "/{user_id}",
    response_model=UserOut,
    summary="用户详情",
    dependencies=[Depends(permission_checker(PermissionCode.USER_READ))],
)
@inject
async def get_user(user_id: int, user_service: UserServiceDep) -> UserOut:
    return await user_service.get_user_by_id(user_id)


@router.post(
    "",
    response_model=UserOut,
    summary="创建用户",
    dependencies=[Depends(permission_checker(PermissionCode.USER_WRITE))],
)
@inject
async def create_user(user_in: UserCreate, user_service: UserServiceDep) -> UserOut:
    return await user_service.create_user(user_in)


@router.put(
    "/{user_id}",
    response_model=UserOut,
    summary="更新用户",
    description="密码留空表示不修改；不传 roleIds 表示不修改角色",
    dependencies=[Depends(permission_checker(PermissionCode.USER_WRITE))],
)
@inject
async def update_user(user_id: int, user_in: UserUpdate, user_service: UserServiceDep) -> UserOut:
    return await user_service.update_user(user_id, user_in)


@router.delete(
    "/{user_id}",
    response_model=Message,
    summary="删除用户",
    dependencies=[Depends(permission_checker(PermissionCode.USER_DELETE))],
)
@inject
async def delete_user(user_id: int, user_service: UserServiceDep) -> Message:
    return await user_service.delete_user(user_id)
