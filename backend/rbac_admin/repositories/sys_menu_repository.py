"""
菜单模块数据访问层
backend/rbac_admin/repositories/sys_menu_repository.py
"""
from typing import Optional, List, Dict, Iterable

from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from rbac_admin.enums.sys_common import CommonStatus, MenuType
from rbac_admin.models import SysMenu, sys_role_menu, sys_user_role
from rbac_admin.repositories.base import BaseRepository, TreeRepositoryMixin


class MenuRepository(TreeRepositoryMixin, BaseRepository):
    """菜单Repo层"""
    model = SysMenu

    async def get_ids_by_permission_codes(self, session: AsyncSession, codes: Iterable[str]) -> Dict[str, int]:
        """权限编码 → 绑定的菜单ID"""
        codes = list(codes)
        if not codes:
            return {}
        stmt = (
            select(SysMenu.permission_code, SysMenu.id)
            .where(SysMenu.permission_code.in_(codes))
            .order_by(SysMenu.id)
        )
        result = await session.execute(stmt)
        mapping: Dict[str, int] = {}
        for code, menu_id in result.all():
            mapping.setdefault(code, menu_id)
        return mapping

    async def clear_permission_code(
            self,
            session: AsyncSession,
            code: str,
            exclude_menu_id: Optional[int] = None
    ) -> None:
        """从其它菜单上移除该权限编码，保证一个编码只绑定一个菜单"""
        stmt = update(SysMenu).where(SysMenu.permission_code == code)
        if exclude_menu_id is not None:
            stmt = stmt.where(SysMenu.id != exclude_menu_id)
        await session.execute(
            stmt.values(permission_code=None).execution_options(synchronize_session="fetch")
        )

    async def list_parent_options(self, session: AsyncSession) -> List[SysMenu]:
        """可作为父节点的菜单（排除按钮）"""
        return await self.list_all(session, SysMenu.type != MenuType.BUTTON.value)

    async def list_navigable(self, session: AsyncSession) -> List[SysMenu]:
        """启用的非按钮菜单"""
        return await self.list_all(
            session,
            SysMenu.status == CommonStatus.ACTIVE.value,
            SysMenu.type != MenuType.BUTTON.value,
        )

    async def list_menu_ids_by_user(self, session: AsyncSession, user_id: int) -> List[int]:
        """用户经由角色关联到的菜单ID"""
        stmt = (
            select(sys_role_menu.c.menu_id)
            .join(sys_user_role, sys_user_role.c.role_id == sys_role_menu.c.role_id)
            .where(sys_user_role.c.user_id == user_id)
            .distinct()
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
