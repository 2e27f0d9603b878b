"""
权限服务层
backend/rbac_admin/services/sys_permission_service.py
"""
import logging
from typing import List, Optional

from rbac_admin.core.exceptions import DuplicateKey, InUse, InvalidInput, ResourceNotFound
from rbac_admin.core.query_builder import create_permission_query_builder
from rbac_admin.enums.sys_common import CommonStatus
from rbac_admin.models import SysMenu, SysPermission
from rbac_admin.repositories.association_synchronizer import AssociationSynchronizer
from rbac_admin.repositories.sys_menu_repository import MenuRepository
from rbac_admin.repositories.sys_permission_repository import PermissionRepository
from rbac_admin.schemas.responses import PageResult, Message
from rbac_admin.schemas.sys_permission import PermissionCreate, PermissionUpdate, PermissionOut
from rbac_admin.services.validators import require_fields, strip_strings, drop_nulls, normalize_page

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("code", "name", "type")


class PermissionService:
    """权限Service层"""

    def __init__(
            self,
            permission_repository: PermissionRepository,
            menu_repository: MenuRepository,
            role_permission_sync: AssociationSynchronizer):
        self.permission_repository = permission_repository
        self.menu_repository = menu_repository
        self.role_permission_sync = role_permission_sync

    # ------------------------------
    # 查询
    # ------------------------------
    async def list_permissions(
            self,
            keyword: Optional[str] = None,
            permission_type: Optional[str] = None,
            status: Optional[str] = None,
            page: int = 1,
            page_size: int = 10
    ) -> PageResult[PermissionOut]:
        """分页查询权限，附带引用角色数与绑定菜单"""
        page, page_size = normalize_page(page, page_size)
        builder = create_permission_query_builder().filter(
            keyword=keyword, type__eq=permission_type, status__eq=status
        )
        async with self.permission_repository.transaction() as session:
            permissions, total = await self.permission_repository.list_page(session, builder, page, page_size)
            data = await self._to_out_list(session, permissions)
        return PageResult.build(data, total, page, page_size)

    async def get_permission_by_id(self, permission_id: int) -> PermissionOut:
        async with self.permission_repository.transaction() as session:
            permission = await self._get_or_404(session, permission_id)
            return (await self._to_out_list(session, [permission]))[0]

    # ------------------------------
    # 写操作
    # ------------------------------
    async def create_permission(self, permission_in: PermissionCreate) -> PermissionOut:
        data = strip_strings(permission_in.model_dump(), REQUIRED_FIELDS)
        require_fields(data, REQUIRED_FIELDS)
        menu_id = data.pop("menu_id", None)
        data["sort_order"] = data.get("sort_order") or 0
        data["status"] = data.get("status") or CommonStatus.ACTIVE.value

        async with self.permission_repository.transaction() as session:
            if await self.permission_repository.get_by_code(session, data["code"]):
                raise DuplicateKey(f"Permission code '{data['code']}' already exists")
            menu = await self._get_menu(session, menu_id) if menu_id is not None else None
            permission = await self.permission_repository.create(session, data)
            if menu is not None:
                await self._bind_menu(session, menu, permission.code)
            out = (await self._to_out_list(session, [permission]))[0]

        logger.info(f"权限创建成功 | ID：{permission.id} | 编码：{permission.code} | 菜单：{menu_id}")
        return out

    async def update_permission(self, permission_id: int, permission_update: PermissionUpdate) -> PermissionOut:
        """
        更新权限
        - 编码变更：旧编码从持有它的菜单上移除
        - menu_id 有值：绑定到该菜单（其它菜单上的同编码先清除）
        - menu_id 显式为 null：解除该编码的全部菜单绑定
        """
        data = permission_update.model_dump(exclude_unset=True)
        strip_strings(data, REQUIRED_FIELDS)
        require_fields(data, REQUIRED_FIELDS, partial=True)
        drop_nulls(data, ("sort_order", "status"))
        menu_given = "menu_id" in data
        menu_id = data.pop("menu_id", None)

        async with self.permission_repository.transaction() as session:
            permission = await self._get_or_404(session, permission_id)
            old_code = permission.code
            if "code" in data and data["code"] != old_code:
                existing = await self.permission_repository.get_by_code(session, data["code"])
                if existing and existing.id != permission_id:
                    raise DuplicateKey(f"Permission code '{data['code']}' already exists")
            menu = await self._get_menu(session, menu_id) if menu_given and menu_id is not None else None

            permission = await self.permission_repository.update(session, permission, data)
            if permission.code != old_code:
                await self.menu_repository.clear_permission_code(session, old_code)
            if menu_given:
                if menu_id is None:
                    await self.menu_repository.clear_permission_code(session, permission.code)
                else:
                    await self._bind_menu(session, menu, permission.code)
            out = (await self._to_out_list(session, [permission]))[0]

        logger.info(f"权限更新成功 | ID：{permission_id} | 字段：{sorted(data)}")
        return out

    async def delete_permission(self, permission_id: int) -> Message:
        """删除权限（仍被角色引用时拒绝），并解除菜单绑定"""
        async with self.permission_repository.transaction() as session:
            permission = await self._get_or_404(session, permission_id)
            if await self.role_permission_sync.count_by_right(session, permission_id) > 0:
                raise InUse("Permission is assigned to roles and cannot be deleted")
            await self.menu_repository.clear_permission_code(session, permission.code)
            await self.permission_repository.delete(session, permission)

        logger.info(f"权限删除成功 | ID：{permission_id} | 编码：{permission.code}")
        return Message(message="Permission deleted successfully")

    # ------------------------------
    # 辅助方法
    # ------------------------------
    async def _get_or_404(self, session, permission_id: int) -> SysPermission:
        permission = await self.permission_repository.get_by_id(session, permission_id)
        if not permission:
            raise ResourceNotFound(f"Permission {permission_id} not found")
        return permission

    async def _get_menu(self, session, menu_id: int) -> SysMenu:
        menu = await self.menu_repository.get_by_id(session, menu_id)
        if not menu:
            raise InvalidInput(f"Menu {menu_id} does not exist")
        return menu

    async def _bind_menu(self, session, menu: SysMenu, code: str) -> None:
        """把权限编码绑定到指定菜单，保证该编码只出现在这一个菜单上"""
        await self.menu_repository.clear_permission_code(session, code, exclude_menu_id=menu.id)
        await self.menu_repository.update(session, menu, {"permission_code": code})

    async def _to_out_list(self, session, permissions: List[SysPermission]) -> List[PermissionOut]:
        role_counts = await self.role_permission_sync.count_by_right_map(session, [p.id for p in permissions])
        menu_ids = await self.menu_repository.get_ids_by_permission_codes(session, [p.code for p in permissions])

        result = []
        for permission in permissions:
            out = PermissionOut.model_validate(permission)
            out.role_count = role_counts.get(permission.id, 0)
            out.menu_id = menu_ids.get(permission.code)
            result.append(out)
        return result
