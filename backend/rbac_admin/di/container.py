"""
DI容器
项目核心框架文件
backend/rbac_admin/di/container.py
"""
from dependency_injector import containers, providers
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from rbac_admin.core.config import settings
from rbac_admin.core.security import CredentialVerifier
from rbac_admin.models import sys_user_role, sys_role_menu, sys_role_permission
from rbac_admin.repositories.association_synchronizer import AssociationSynchronizer
from rbac_admin.repositories.sys_dept_repository import DeptRepository
from rbac_admin.repositories.sys_menu_repository import MenuRepository
from rbac_admin.repositories.sys_permission_repository import PermissionRepository
from rbac_admin.repositories.sys_role_repository import RoleRepository
from rbac_admin.repositories.sys_user_repository import UserRepository
from rbac_admin.services.hierarchy import DeptHierarchyManager, MenuHierarchyManager
from rbac_admin.services.sys_auth_service import AuthService
from rbac_admin.services.sys_dept_service import DeptService
from rbac_admin.services.sys_menu_service import MenuService
from rbac_admin.services.sys_permission_resolver import PermissionResolver
from rbac_admin.services.sys_permission_service import PermissionService
from rbac_admin.services.sys_role_service import RoleService
from rbac_admin.services.sys_user_service import UserService


def create_engine_for_url(url: str, **pool_kwargs):
    """SQLite（测试）不支持连接池参数，仅对服务端数据库启用"""
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=False)
    return create_async_engine(url, echo=False, **pool_kwargs)


class Container(containers.DeclarativeContainer):

    # 模块扫描：注入 Provide[...] 的接口模块
    wiring_config = containers.WiringConfiguration(
        modules=[
            "rbac_admin.api.deps",
            "rbac_admin.api.v1.endpoints.auth",
            "rbac_admin.api.v1.endpoints.depts",
            "rbac_admin.api.v1.endpoints.users",
            "rbac_admin.api.v1.endpoints.roles",
            "rbac_admin.api.v1.endpoints.menus",
            "rbac_admin.api.v1.endpoints.permissions",
        ]
    )

    # 1. 底层：数据库引擎（单例，全局唯一）
    async_engine = providers.Singleton(
        create_engine_for_url,
        settings.SQLALCHEMY_DATABASE_URI,
        pool_pre_ping=settings.DB_POOL_PRE_PING,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_recycle=settings.DB_POOL_RECYCLE,
    )

    # 2. 中层：会话工厂（单例，全局唯一）
    async_session_factory = providers.Singleton(
        async_sessionmaker,
        bind=async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )

    # 3. Repo层：注入会话工厂
    dept_repository = providers.Factory(DeptRepository, async_session_factory=async_session_factory)
    user_repository = providers.Factory(UserRepository, async_session_factory=async_session_factory)
    role_repository = providers.Factory(RoleRepository, async_session_factory=async_session_factory)
    menu_repository = providers.Factory(MenuRepository, async_session_factory=async_session_factory)
    permission_repository = providers.Factory(PermissionRepository, async_session_factory=async_session_factory)

    # 关联表同步器（无状态，单例）
    user_role_sync = providers.Singleton(
        AssociationSynchronizer, table=sys_user_role, left_key="user_id", right_key="role_id"
    )
    role_menu_sync = providers.Singleton(
        AssociationSynchronizer, table=sys_role_menu, left_key="role_id", right_key="menu_id"
    )
    role_permission_sync = providers.Singleton(
        AssociationSynchronizer, table=sys_role_permission, left_key="role_id", right_key="permission_id"
    )

    credential_verifier = providers.Singleton(CredentialVerifier)

    # 4. 领域组件
    dept_hierarchy = providers.Factory(DeptHierarchyManager, repository=dept_repository)
    menu_hierarchy = providers.Factory(MenuHierarchyManager, repository=menu_repository)
    permission_resolver = providers.Factory(
        PermissionResolver,
        role_repository=role_repository,
        permission_repository=permission_repository,
    )

    # 5. Service层
    dept_service = providers.Factory(
        DeptService,
        dept_repository=dept_repository,
        dept_hierarchy=dept_hierarchy,
    )
    user_service = providers.Factory(
        UserService,
        user_repository=user_repository,
        dept_repository=dept_repository,
        role_repository=role_repository,
        user_role_sync=user_role_sync,
        credential_verifier=credential_verifier,
    )
    role_service = providers.Factory(
        RoleService,
        role_repository=role_repository,
        menu_repository=menu_repository,
        permission_repository=permission_repository,
        user_role_sync=user_role_sync,
        role_menu_sync=role_menu_sync,
        role_permission_sync=role_permission_sync,
    )
    menu_service = providers.Factory(
        MenuService,
        menu_repository=menu_repository,
        menu_hierarchy=menu_hierarchy,
        role_menu_sync=role_menu_sync,
    )
    permission_service = providers.Factory(
        PermissionService,
        permission_repository=permission_repository,
        menu_repository=menu_repository,
        role_permission_sync=role_permission_sync,
    )
    auth_service = providers.Factory(
        AuthService,
        user_repository=user_repository,
        dept_repository=dept_repository,
        permission_resolver=permission_resolver,
        credential_verifier=credential_verifier,
    )
