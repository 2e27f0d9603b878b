"""
角色服务层
backend/rbac_admin/services/sys_role_service.py
"""
import logging
import time
import uuid
from typing import Dict, List, Optional

from rbac_admin.core.exceptions import DuplicateKey, InUse, InvalidInput, ResourceNotFound
from rbac_admin.core.query_builder import create_role_query_builder
from rbac_admin.enums.sys_common import CommonStatus
from rbac_admin.models import SysRole
from rbac_admin.repositories.association_synchronizer import AssociationSynchronizer
from rbac_admin.repositories.base import BaseRepository
from rbac_admin.repositories.sys_menu_repository import MenuRepository
from rbac_admin.repositories.sys_permission_repository import PermissionRepository
from rbac_admin.repositories.sys_role_repository import RoleRepository
from rbac_admin.schemas.responses import PageResult, Message
from rbac_admin.schemas.sys_role import RoleCreate, RoleUpdate, RoleOut, RoleOption
from rbac_admin.services.validators import require_fields, strip_strings, drop_nulls, normalize_page

logger = logging.getLogger(__name__)


def generate_role_code() -> str:
    """自动生成角色编码：ROLE_<毫秒时间戳>_<8位随机十六进制>"""
    return f"ROLE_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"


class RoleService:
    """角色Service层：仅管业务逻辑"""

    def __init__(
            self,
            role_repository: RoleRepository,
            menu_repository: MenuRepository,
            permission_repository: PermissionRepository,
            user_role_sync: AssociationSynchronizer,
            role_menu_sync: AssociationSynchronizer,
            role_permission_sync: AssociationSynchronizer):
        self.role_repository = role_repository
        self.menu_repository = menu_repository
        self.permission_repository = permission_repository
        self.user_role_sync = user_role_sync
        self.role_menu_sync = role_menu_sync
        self.role_permission_sync = role_permission_sync

    # ------------------------------
    # 查询
    # ------------------------------
    async def list_roles(
            self,
            keyword: Optional[str] = None,
            status: Optional[str] = None,
            page: int = 1,
            page_size: int = 10
    ) -> PageResult[RoleOut]:
        """分页查询角色，附带用户数、菜单ID、权限ID"""
        page, page_size = normalize_page(page, page_size)
        builder = create_role_query_builder().filter(keyword=keyword, status__eq=status)
        async with self.role_repository.transaction() as session:
            roles, total = await self.role_repository.list_page(session, builder, page, page_size)
            data = await self._to_out_list(session, roles)
        return PageResult.build(data, total, page, page_size)

    async def get_role_by_id(self, role_id: int) -> RoleOut:
        async with self.role_repository.transaction() as session:
            role = await self._get_or_404(session, role_id)
            return (await self._to_out_list(session, [role]))[0]

    async def get_role_options(self) -> List[RoleOption]:
        """
        获取角色下拉选项（仅启用角色）

        返回格式：[{"value": 角色ID, "label": "角色名称", "tag": "角色编码"}]
        """
        async with self.role_repository.transaction() as session:
            roles = await self.role_repository.get_options(session)
        return [RoleOption(value=role.id, label=role.name, tag=role.code) for role in roles]

    # ------------------------------
    # 写操作
    # ------------------------------
    async def create_role(self, role_in: RoleCreate) -> RoleOut:
        """创建角色（含菜单、权限分配）"""
        data = strip_strings(role_in.model_dump(), ("name", "code"))
        require_fields(data, ("name",))
        menu_ids = data.pop("menu_ids", None)
        permission_ids = data.pop("permission_ids", None)
        data["code"] = data.get("code") or generate_role_code()
        data["sort_order"] = data.get("sort_order") or 0
        data["status"] = data.get("status") or CommonStatus.ACTIVE.value

        async with self.role_repository.transaction() as session:
            if await self.role_repository.get_by_code(session, data["code"]):
                raise DuplicateKey(f"Role code '{data['code']}' already exists")
            menu_ids = await self._validate_ids(session, self.menu_repository, menu_ids, "menu")
            permission_ids = await self._validate_ids(
                session, self.permission_repository, permission_ids, "permission"
            )

            role = await self.role_repository.create(session, data)
            await self.role_menu_sync.sync(session, role.id, menu_ids)
            await self.role_permission_sync.sync(session, role.id, permission_ids)
            out = (await self._to_out_list(session, [role]))[0]

        logger.info(f"角色创建成功 | ID：{role.id} | 编码：{role.code}")
        return out

    async def update_role(self, role_id: int, role_update: RoleUpdate) -> RoleOut:
        """更新角色；menu_ids/permission_ids 不传则保持原关联"""
        data = role_update.model_dump(exclude_unset=True)
        strip_strings(data, ("name", "code"))
        require_fields(data, ("name", "code"), partial=True)
        drop_nulls(data, ("sort_order", "status"))
        menu_ids = data.pop("menu_ids", None)
        permission_ids = data.pop("permission_ids", None)

        async with self.role_repository.transaction() as session:
            role = await self._get_or_404(session, role_id)
            if "code" in data and data["code"] != role.code:
                existing = await self.role_repository.get_by_code(session, data["code"])
                if existing and existing.id != role_id:
                    raise DuplicateKey(f"Role code '{data['code']}' already exists")
            menu_ids = await self._validate_ids(session, self.menu_repository, menu_ids, "menu")
            permission_ids = await self._validate_ids(
                session, self.permission_repository, permission_ids, "permission"
            )

            role = await self.role_repository.update(session, role, data)
            await self.role_menu_sync.sync(session, role_id, menu_ids)
            await self.role_permission_sync.sync(session, role_id, permission_ids)
            out = (await self._to_out_list(session, [role]))[0]

        logger.info(f"角色更新成功 | ID：{role_id} | 字段：{sorted(data)}")
        return out

    async def assign_permissions(self, role_id: int, permission_ids: List[int]) -> RoleOut:
        """整体替换角色的权限"""
        async with self.role_repository.transaction() as session:
            role = await self._get_or_404(session, role_id)
            permission_ids = await self._validate_ids(
                session, self.permission_repository, permission_ids, "permission"
            )
            await self.role_permission_sync.sync(session, role_id, permission_ids)
            out = (await self._to_out_list(session, [role]))[0]

        logger.info(f"角色权限已分配 | 角色ID：{role_id} | 权限ID：{permission_ids}")
        return out

    async def assign_menus(self, role_id: int, menu_ids: List[int]) -> RoleOut:
        """整体替换角色的菜单"""
        async with self.role_repository.transaction() as session:
            role = await self._get_or_404(session, role_id)
            menu_ids = await self._validate_ids(session, self.menu_repository, menu_ids, "menu")
            await self.role_menu_sync.sync(session, role_id, menu_ids)
            out = (await self._to_out_list(session, [role]))[0]

        logger.info(f"角色菜单已分配 | 角色ID：{role_id} | 菜单ID：{menu_ids}")
        return out

    async def delete_role(self, role_id: int) -> Message:
        """删除角色（仍被用户使用时拒绝）"""
        async with self.role_repository.transaction() as session:
            role = await self._get_or_404(session, role_id)
            if await self.user_role_sync.count_by_right(session, role_id) > 0:
                raise InUse("Role is assigned to users and cannot be deleted")
            await self.role_menu_sync.clear_left(session, role_id)
            await self.role_permission_sync.clear_left(session, role_id)
            await self.role_repository.delete(session, role)

        logger.info(f"角色删除成功 | ID：{role_id} | 编码：{role.code}")
        return Message(message="Role deleted successfully")

    # ------------------------------
    # 辅助方法
    # ------------------------------
    async def _get_or_404(self, session, role_id: int) -> SysRole:
        role = await self.role_repository.get_by_id(session, role_id)
        if not role:
            raise ResourceNotFound(f"Role {role_id} not found")
        return role

    @staticmethod
    async def _validate_ids(
            session,
            repository: BaseRepository,
            ids,
            label: str
    ) -> Optional[List[int]]:
        """None 原样返回；否则去重并校验全部存在"""
        if ids is None:
            return None
        ids = AssociationSynchronizer.normalize_ids(ids)
        existing = await repository.get_existing_ids(session, ids)
        invalid_ids = [i for i in ids if i not in existing]
        if invalid_ids:
            raise InvalidInput(f"Invalid {label} IDs: {', '.join(map(str, invalid_ids))}")
        return ids

    async def _to_out_list(self, session, roles: List[SysRole]) -> List[RoleOut]:
        role_ids = [role.id for role in roles]
        user_counts: Dict[int, int] = await self.user_role_sync.count_by_right_map(session, role_ids)
        menu_map = await self.role_menu_sync.list_right_ids_map(session, role_ids)
        permission_map = await self.role_permission_sync.list_right_ids_map(session, role_ids)

        result = []
        for role in roles:
            out = RoleOut.model_validate(role)
            out.user_count = user_counts.get(role.id, 0)
            out.menu_ids = menu_map.get(role.id, [])
            out.permission_ids = permission_map.get(role.id, [])
            result.append(out)
        return result
