"""
权限模块数据访问层
backend/rbac_admin/repositories/sys_permission_repository.py
"""
from typing import Optional, List, Iterable

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from rbac_admin.enums.sys_common import CommonStatus
from rbac_admin.models import SysPermission, sys_role_permission
from rbac_admin.repositories.base import BaseRepository


class PermissionRepository(BaseRepository):
    """权限Repo层"""
    model = SysPermission

    async def get_by_code(self, session: AsyncSession, code: str) -> Optional[SysPermission]:
        return await self.get_by_field(session, "code", code)

    async def list_active_codes_by_role_ids(self, session: AsyncSession, role_ids: Iterable[int]) -> List[str]:
        """角色集合关联的启用权限编码（已去重、升序）"""
        role_ids = list(role_ids)
        if not role_ids:
            return []
        stmt = (
            select(SysPermission.code)
            .join(sys_role_permission, sys_role_permission.c.permission_id == SysPermission.id)
            .where(
                sys_role_permission.c.role_id.in_(role_ids),
                SysPermission.status == CommonStatus.ACTIVE.value,
            )
            .distinct()
            .order_by(SysPermission.code)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
