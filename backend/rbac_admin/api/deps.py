"""
API 依赖项配置文件
backend/rbac_admin/api/deps.py
"""
from typing import Annotated

from dependency_injector.wiring import inject, Provide
from fastapi import Depends

from rbac_admin.core.security import reusable_oauth2
from rbac_admin.di.container import Container
from rbac_admin.models import SysUser
from rbac_admin.services.sys_auth_service import AuthService
from rbac_admin.services.sys_dept_service import DeptService
from rbac_admin.services.sys_menu_service import MenuService
from rbac_admin.services.sys_permission_resolver import PermissionResolver, ResolvedAccess
from rbac_admin.services.sys_permission_service import PermissionService
from rbac_admin.services.sys_role_service import RoleService
from rbac_admin.services.sys_user_service import UserService


# ------------------------------
# 认证依赖：获取当前用户（OAuth2 Bearer）
# ------------------------------
@inject
async def get_current_user(
    auth_service: AuthService = Depends(Provide[Container.auth_service]),
    token: str = Depends(reusable_oauth2)
) -> SysUser:
    """从Token中解析用户；无效令牌 401，停用账号 403（由 AuthService 抛出）"""
    return await auth_service.get_current_user(token)


CurrentUser = Annotated[SysUser, Depends(get_current_user)]


# ------------------------------
# 权限依赖：解析当前用户的角色与权限
# ------------------------------
@inject
async def resolve_current_access(
    current_user: CurrentUser,
    permission_resolver: PermissionResolver = Depends(Provide[Container.permission_resolver])
) -> ResolvedAccess:
    return await permission_resolver.resolve_for_user(current_user.id)


CurrentAccess = Annotated[ResolvedAccess, Depends(resolve_current_access)]

# 依赖类型注解（简化写法）
AuthServiceDep = Annotated[AuthService, Depends(Provide[Container.auth_service])]
UserServiceDep = Annotated[UserService, Depends(Provide[Container.user_service])]
RoleServiceDep = Annotated[RoleService, Depends(Provide[Container.role_service])]
DeptServiceDep = Annotated[DeptService, Depends(Provide[Container.dept_service])]
MenuServiceDep = Annotated[MenuService, Depends(Provide[Container.menu_service])]
PermissionServiceDep = Annotated[PermissionService, Depends(Provide[Container.permission_service])]
