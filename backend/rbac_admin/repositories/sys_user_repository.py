"""
用户模块数据访问层
backend/rbac_admin/repositories/sys_user_repository.py
"""
from typing import Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from rbac_admin.models import SysUser
from rbac_admin.repositories.base import BaseRepository


class UserRepository(BaseRepository):
    """用户Repo层"""
    model = SysUser

    async def get_by_username(self, session: AsyncSession, username: str) -> Optional[SysUser]:
        """按用户名查询（登录、唯一性校验）"""
        return await self.get_by_field(session, "username", username)
