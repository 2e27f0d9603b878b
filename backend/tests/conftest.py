"""
测试配置和 Fixtures
- SQLite 内存数据库（aiosqlite + StaticPool，所有连接共享同一个库）
- 每个测试函数独立的 DI 容器与数据表
"""
import os

# 必须在导入项目模块之前设置
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_TO_FILE_FLAG"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["FIRST_SUPERUSER_PASSWORD"] = "admin-pass-123"

from typing import AsyncGenerator, Iterable, Optional

import pytest
import pytest_asyncio
from dependency_injector import providers
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from rbac_admin.di.container import Container
from rbac_admin.models import Base
from rbac_admin.schemas.sys_permission import PermissionCreate
from rbac_admin.schemas.sys_role import RoleCreate
from rbac_admin.schemas.sys_user import UserCreate

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def container(engine) -> Container:
    """容器的数据库引擎替换为测试引擎，其余组件按正常方式装配"""
    test_container = Container()
    test_container.async_engine.override(providers.Object(engine))
    return test_container


@pytest_asyncio.fixture
async def client(container) -> AsyncGenerator[AsyncClient, None]:
    from rbac_admin.main import create_app

    app = create_app(container)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client
    container.unwire()


# ==================== 数据构造工具 ====================
async def make_permission(container: Container, code: str, **kwargs) -> int:
    out = await container.permission_service().create_permission(
        PermissionCreate(code=code, name=kwargs.pop("name", code), type=kwargs.pop("type", "test"), **kwargs)
    )
    return out.id


async def make_role(
        container: Container,
        name: str,
        code: Optional[str] = None,
        permission_ids: Optional[Iterable[int]] = None,
        **kwargs
) -> int:
    out = await container.role_service().create_role(
        RoleCreate(
            name=name,
            code=code,
            permission_ids=list(permission_ids) if permission_ids is not None else None,
            **kwargs
        )
    )
    return out.id


async def make_user(
        container: Container,
        username: str,
        password: str = "secret-123",
        role_ids: Optional[Iterable[int]] = None,
        **kwargs
) -> int:
    out = await container.user_service().create_user(
        UserCreate(
            username=username,
            password=password,
            real_name=kwargs.pop("real_name", username.title()),
            role_ids=list(role_ids) if role_ids is not None else None,
            **kwargs
        )
    )
    return out.id
