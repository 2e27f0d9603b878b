"""
初始化数据脚本测试
"""
import pytest

from rbac_admin.core.config import settings
from rbac_admin.enums.sys_permissions import PermissionCode
from rbac_admin.schemas.sys_user import UserUpdate
from rbac_admin.scripts.init_data import init_data


@pytest.mark.asyncio
async def test_init_data_is_idempotent(container):
    first = await init_data(container)
    second = await init_data(container)

    assert first["permissions"] == len(PermissionCode.get_all())
    assert first["users"] == 1
    assert second["permissions"] == 0
    assert second["users"] == 0
    assert second["admin_role_id"] == first["admin_role_id"]


@pytest.mark.asyncio
async def test_admin_can_log_in_with_all_permissions(container):
    await init_data(container)
    result = await container.auth_service().authenticate(
        settings.FIRST_SUPERUSER, settings.FIRST_SUPERUSER_PASSWORD
    )
    assert [role.code for role in result.roles] == ["admin"]
    assert set(result.permissions) == {perm.value for perm in PermissionCode}


@pytest.mark.asyncio
async def test_reset_password(container):
    await init_data(container)
    users = await container.user_service().list_users(keyword=settings.FIRST_SUPERUSER)
    await container.user_service().update_user(users.data[0].id, UserUpdate(password="changed-pass"))

    await init_data(container, reset_password=True)
    result = await container.auth_service().authenticate(
        settings.FIRST_SUPERUSER, settings.FIRST_SUPERUSER_PASSWORD
    )
    assert result.user.username == settings.FIRST_SUPERUSER
