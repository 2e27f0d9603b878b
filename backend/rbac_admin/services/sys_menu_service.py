"""
菜单服务层
backend/rbac_admin/services/sys_menu_service.py
"""
import logging
from typing import Iterable, List, Optional

from rbac_admin.core.exceptions import ResourceNotFound
from rbac_admin.core.query_builder import create_menu_query_builder
from rbac_admin.enums.sys_common import CommonStatus
from rbac_admin.enums.sys_permissions import ADMIN_ROLE_CODE
from rbac_admin.models import SysMenu
from rbac_admin.repositories.association_synchronizer import AssociationSynchronizer
from rbac_admin.repositories.sys_menu_repository import MenuRepository
from rbac_admin.schemas.responses import Message
from rbac_admin.schemas.sys_menu import MenuCreate, MenuUpdate, MenuOut, MenuTreeNode
from rbac_admin.services.hierarchy import MenuHierarchyManager, ancestors_of, build_tree
from rbac_admin.services.validators import is_blank, require_fields, strip_strings, drop_nulls

logger = logging.getLogger(__name__)


class MenuService:
    """菜单服务"""

    def __init__(
            self,
            menu_repository: MenuRepository,
            menu_hierarchy: MenuHierarchyManager,
            role_menu_sync: AssociationSynchronizer):
        self.menu_repository = menu_repository
        self.menu_hierarchy = menu_hierarchy
        self.role_menu_sync = role_menu_sync

    # ==================== 查询 ====================
    async def list_menus(
            self,
            keyword: Optional[str] = None,
            menu_type: Optional[str] = None,
            status: Optional[str] = None
    ) -> List[MenuOut]:
        """菜单列表（不分页，按 sort_order、id 升序）"""
        builder = create_menu_query_builder().filter(keyword=keyword, type__eq=menu_type, status__eq=status)
        async with self.menu_repository.transaction() as session:
            menus = await self.menu_repository.list_filtered(session, builder)
        return [MenuOut.model_validate(menu) for menu in menus]

    async def get_menu_tree(self) -> List[MenuTreeNode]:
        async with self.menu_repository.transaction() as session:
            menus = await self.menu_repository.list_all(session)
        return self._to_tree(menus)

    async def get_parent_options(self) -> List[MenuTreeNode]:
        """可选父菜单（目录/菜单，不含按钮）"""
        async with self.menu_repository.transaction() as session:
            menus = await self.menu_repository.list_parent_options(session)
        return self._to_tree(menus)

    async def get_user_routes(self, user_id: int, role_codes: Iterable[str]) -> List[MenuTreeNode]:
        """
        当前用户的导航菜单树
        - 超级管理员：全部启用的非按钮菜单
        - 其他用户：角色关联的菜单及其上级目录
        """
        async with self.menu_repository.transaction() as session:
            menus = await self.menu_repository.list_navigable(session)
            if ADMIN_ROLE_CODE not in set(role_codes):
                granted = await self.menu_repository.list_menu_ids_by_user(session, user_id)
                links = await self.menu_repository.list_parent_links(session)
                allowed = set(granted)
                for menu_id in granted:
                    allowed.update(ancestors_of(links, menu_id))
                menus = [menu for menu in menus if menu.id in allowed]
        return self._to_tree(menus)

    async def get_menu_by_id(self, menu_id: int) -> MenuOut:
        async with self.menu_repository.transaction() as session:
            menu = await self._get_or_404(session, menu_id)
        return MenuOut.model_validate(menu)

    # ==================== 写操作 ====================
    async def create_menu(self, menu_in: MenuCreate) -> MenuOut:
        data = strip_strings(menu_in.model_dump(), ("name", "permission_code"))
        require_fields(data, ("name", "type"))
        if is_blank(data.get("permission_code")):
            data["permission_code"] = None
        data["sort_order"] = data.get("sort_order") or 0
        data["status"] = data.get("status") or CommonStatus.ACTIVE.value

        async with self.menu_repository.transaction() as session:
            await self.menu_hierarchy.validate_parent(session, data.get("parent_id"))
            if data["permission_code"]:
                await self.menu_repository.clear_permission_code(session, data["permission_code"])
            menu = await self.menu_repository.create(session, data)

        logger.info(f"菜单创建成功 | ID：{menu.id} | 名称：{menu.name} | 类型：{menu.type}")
        return MenuOut.model_validate(menu)

    async def update_menu(self, menu_id: int, menu_update: MenuUpdate) -> MenuOut:
        data = menu_update.model_dump(exclude_unset=True)
        strip_strings(data, ("name", "permission_code"))
        require_fields(data, ("name", "type"), partial=True)
        drop_nulls(data, ("sort_order", "status"))
        if "permission_code" in data and is_blank(data["permission_code"]):
            data["permission_code"] = None

        async with self.menu_repository.transaction() as session:
            menu = await self._get_or_404(session, menu_id)
            if "type" in data:
                await self.menu_hierarchy.ensure_type_allowed(session, menu_id, data["type"])
            if "parent_id" in data:
                await self.menu_hierarchy.validate_parent(session, data["parent_id"], node_id=menu_id)
            if data.get("permission_code"):
                await self.menu_repository.clear_permission_code(
                    session, data["permission_code"], exclude_menu_id=menu_id
                )
            menu = await self.menu_repository.update(session, menu, data)

        logger.info(f"菜单更新成功 | ID：{menu_id} | 字段：{sorted(data)}")
        return MenuOut.model_validate(menu)

    async def delete_menu(self, menu_id: int) -> Message:
        """删除菜单：存在子菜单时拒绝，同时移除角色关联"""
        async with self.menu_repository.transaction() as session:
            menu = await self._get_or_404(session, menu_id)
            await self.menu_hierarchy.ensure_deletable(session, menu_id)
            await self.role_menu_sync.clear_right(session, menu_id)
            await self.menu_repository.delete(session, menu)

        logger.info(f"菜单删除成功 | ID：{menu_id} | 名称：{menu.name}")
        return Message(message="Menu deleted successfully")

    # ==================== 辅助方法 ====================
    async def _get_or_404(self, session, menu_id: int) -> SysMenu:
        menu = await self.menu_repository.get_by_id(session, menu_id)
        if not menu:
            raise ResourceNotFound(f"Menu {menu_id} not found")
        return menu

    @staticmethod
    def _to_tree(menus: List[SysMenu]) -> List[MenuTreeNode]:
        rows = [MenuOut.model_validate(menu).model_dump() for menu in menus]
        return [MenuTreeNode.model_validate(node) for node in build_tree(rows)]
