"""
权限解析
backend/rbac_admin/services/sys_permission_resolver.py

用户 → 角色 → 权限 → 去重后的权限编码集合；权限判断只做精确匹配，
不支持前缀或通配段，唯一的例外是 admin 角色与 "*" 全量权限
"""
import logging
from dataclasses import dataclass, field
from typing import Iterable, List

from sqlmodel.ext.asyncio.session import AsyncSession

from rbac_admin.enums.sys_permissions import ADMIN_ROLE_CODE, WILDCARD_PERMISSION
from rbac_admin.repositories.sys_permission_repository import PermissionRepository
from rbac_admin.repositories.sys_role_repository import RoleRepository
from rbac_admin.schemas.sys_role import RoleBrief

logger = logging.getLogger(__name__)


def has_permission(role_codes: Iterable[str], permissions: Iterable[str], code: str) -> bool:
    """admin 角色、"*" 权限或精确匹配任一成立即放行"""
    if ADMIN_ROLE_CODE in set(role_codes):
        return True
    permissions = set(permissions)
    return WILDCARD_PERMISSION in permissions or code in permissions


@dataclass
class ResolvedAccess:
    roles: List[RoleBrief] = field(default_factory=list)
    permissions: List[str] = field(default_factory=list)

    @property
    def role_codes(self) -> List[str]:
        return [role.code for role in self.roles]

    def allows(self, code: str) -> bool:
        return has_permission(self.role_codes, self.permissions, code)


class PermissionResolver:
    """权限解析器：只读，调用方负责提供会话"""

    def __init__(self, role_repository: RoleRepository, permission_repository: PermissionRepository):
        self.role_repository = role_repository
        self.permission_repository = permission_repository

    async def resolve(self, session: AsyncSession, user_id: int) -> ResolvedAccess:
        roles = await self.role_repository.list_by_user(session, user_id)
        permissions = await self.permission_repository.list_active_codes_by_role_ids(
            session, [role.id for role in roles]
        )
        access = ResolvedAccess(
            roles=[RoleBrief.model_validate(role) for role in roles],
            permissions=sorted(set(permissions)),
        )
        logger.debug(f"权限解析完成 | 用户ID：{user_id} | 角色：{access.role_codes} | 权限数：{len(access.permissions)}")
        return access

    async def resolve_for_user(self, user_id: int) -> ResolvedAccess:
        """独立事务中解析（接口鉴权使用）"""
        async with self.role_repository.transaction() as session:
            return await self.resolve(session, user_id)
