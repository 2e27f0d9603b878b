"""
角色模块数据访问层
backend/rbac_admin/repositories/sys_role_repository.py
"""
from typing import Optional, List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from rbac_admin.enums.sys_common import CommonStatus
from rbac_admin.models import SysRole, sys_user_role
from rbac_admin.repositories.base import BaseRepository


class RoleRepository(BaseRepository):
    """角色Repo层"""
    model = SysRole

    async def get_by_code(self, session: AsyncSession, code: str) -> Optional[SysRole]:
        """按角色编码查询（编码唯一，用于创建校验）"""
        return await self.get_by_field(session, "code", code)

    async def get_options(self, session: AsyncSession) -> List[SysRole]:
        """启用状态的角色（下拉选项）"""
        return await self.list_all(session, SysRole.status == CommonStatus.ACTIVE.value)

    async def list_by_user(self, session: AsyncSession, user_id: int) -> List[SysRole]:
        """用户关联的全部角色（不区分角色状态）"""
        stmt = (
            select(SysRole)
            .join(sys_user_role, sys_user_role.c.role_id == SysRole.id)
            .where(sys_user_role.c.user_id == user_id)
            .order_by(SysRole.sort_order.asc(), SysRole.id.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
