"""
菜单API端点
backend/rbac_admin/api/v1/endpoints/menus.py
"""
from typing import List, Optional

from dependency_injector.wiring import inject
from fastapi import APIRouter, Depends, Query

from rbac_admin.api.deps import CurrentAccess, CurrentUser, MenuServiceDep
from rbac_admin.enums.sys_permissions import PermissionCode
from rbac_admin.schemas.responses import Message
from rbac_admin.schemas.sys_menu import MenuCreate, MenuUpdate, MenuOut, MenuTreeNode
from rbac_admin.utils.permission_checker import permission_checker

router = APIRouter(prefix="/menus", tags=["菜单管理"])


@router.get("/routes", response_model=List[MenuTreeNode], summary="当前用户导航菜单")
@inject
async def get_user_routes(
        current_user: CurrentUser,
        access: CurrentAccess,
        menu_service: MenuServiceDep
) -> List[MenuTreeNode]:
    """登录即可访问，按当前用户的角色过滤"""
    return await menu_service.get_user_routes(current_user.id, access.role_codes)


@router.get(
    "/tree",
    response_model=List[MenuTreeNode],
    summary="菜单树",
    dependencies=[Depends(permission_checker(PermissionCode.MENU_READ))],
)
@inject
async def get_menu_tree(menu_service: MenuServiceDep) -> List[MenuTreeNode]:
    return await menu_service.get_menu_tree()


@router.get(
    "/parent-options",
    response_model=List[MenuTreeNode],
    summary="可选父菜单",
    dependencies=[Depends(permission_checker(PermissionCode.MENU_READ))],
)
@inject
async def get_parent_options(menu_service: MenuServiceDep) -> List[MenuTreeNode]:
    return await menu_service.get_parent_options()


@router.get(
    "",
    response_model=List[MenuOut],
    summary="菜单列表",
    dependencies=[Depends(permission_checker(PermissionCode.MENU_READ))],
)
@inject
async def list_menus(
        menu_service: MenuServiceDep,
        keyword: Optional[str] = Query(None),
        menu_type: Optional[str] = Query(None, alias="type"),
        status: Optional[str] = Query(None),
) -> List[MenuOut]:
    return await menu_service.list_menus(keyword=keyword, menu_type=menu_type, status=status)


@router.get(
    "/{menu_id}",
    response_model=MenuOut,
    summary="菜单详情",
    dependencies=[Depends(permission_checker(PermissionCode.MENU_READ))],
)
@inject
async def get_menu(menu_id: int, menu_service: MenuServiceDep) -> MenuOut:
    return await menu_service.get_menu_by_id(menu_id)


@router.post(
    "",
    response_model=MenuOut,
    summary="创建菜单",
    dependencies=[Depends(permission_checker(PermissionCode.MENU_WRITE))],
)
@inject
async def create_menu(menu_in: MenuCreate, menu_service: MenuServiceDep) -> MenuOut:
    return await menu_service.create_menu(menu_in)


@router.put(
    "/{menu_id}",
    response_model=MenuOut,
    summary="更新菜单",
    dependencies=[Depends(permission_checker(PermissionCode.MENU_WRITE))],
)
@inject
async def update_menu(menu_id: int, menu_in: MenuUpdate, menu_service: MenuServiceDep) -> MenuOut:
    return await menu_service.update_menu(menu_id, menu_in)


@router.delete(
    "/{menu_id}",
    response_model=Message,
    summary="删除菜单",
    dependencies=[Depends(permission_checker(PermissionCode.MENU_DELETE))],
)
@inject
async def delete_menu(menu_id: int, menu_service: MenuServiceDep) -> Message:
    return await menu_service.delete_menu(menu_id)
