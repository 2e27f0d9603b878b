"""
部门模块数据访问层
backend/rbac_admin/repositories/sys_dept_repository.py
"""
from typing import Optional, List, Dict, Iterable

from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession

from rbac_admin.enums.sys_common import CommonStatus
from rbac_admin.models import SysDept, SysUser
from rbac_admin.repositories.base import BaseRepository, TreeRepositoryMixin


class DeptRepository(TreeRepositoryMixin, BaseRepository):
    """部门仓储层"""
    model = SysDept

    async def get_by_code(self, session: AsyncSession, code: str) -> Optional[SysDept]:
        """根据编码获取部门（编码唯一）"""
        return await self.get_by_field(session, "code", code)

    async def list_enabled(self, session: AsyncSession) -> List[SysDept]:
        """获取所有启用的部门"""
        return await self.list_all(session, SysDept.status == CommonStatus.ACTIVE.value)

    async def count_members(self, session: AsyncSession, dept_id: int) -> int:
        """统计部门下的用户数"""
        stmt = select(func.count()).select_from(SysUser).where(SysUser.department_id == dept_id)
        result = await session.execute(stmt)
        return result.scalar_one()

    async def count_members_map(self, session: AsyncSession, dept_ids: Iterable[int]) -> Dict[int, int]:
        """批量统计：部门ID → 用户数"""
        dept_ids = list(dept_ids)
        counts = {dept_id: 0 for dept_id in dept_ids}
        if not dept_ids:
            return counts
        stmt = (
            select(SysUser.department_id, func.count())
            .where(SysUser.department_id.in_(dept_ids))
            .group_by(SysUser.department_id)
        )
        result = await session.execute(stmt)
        for dept_id, count in result.all():
            counts[dept_id] = count
        return counts
