"""
初始化基础数据
backend/rbac_admin/scripts/init_data.py

可重复执行：已存在的记录不会重复插入
1. 建表（create_all）
2. 每个 PermissionCode 同步为一条 sys_permission 记录
3. admin 角色（拥有全部权限）
4. 初始管理员账号 FIRST_SUPERUSER，--reset-password 时重置为 FIRST_SUPERUSER_PASSWORD

用法：python -m rbac_admin.scripts.init_data [--reset-password]
"""
import argparse
import asyncio
import logging
from typing import Dict

from rbac_admin.core.config import settings
from rbac_admin.di.container import Container
from rbac_admin.enums.sys_common import CommonStatus
from rbac_admin.enums.sys_permissions import ADMIN_ROLE_CODE, PermissionCode
from rbac_admin.models import Base, validate_models

logger = logging.getLogger(__name__)


async def create_tables(container: Container) -> None:
    validate_models()
    engine = container.async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("数据表检查完成")


async def init_permissions(container: Container, session) -> int:
    """按枚举补齐权限记录，已存在的编码跳过"""
    permission_repository = container.permission_repository()
    added_count = 0
    for sort_order, perm in enumerate(PermissionCode.get_all(), start=1):
        if await permission_repository.get_by_code(session, perm.value):
            continue
        await permission_repository.create(session, {
            "code": perm.value,
            "name": perm.display_name,
            "type": perm.category,
            "sort_order": sort_order,
            "status": CommonStatus.ACTIVE.value,
        })
        added_count += 1
    logger.info(f"权限数据初始化完成，新增 {added_count} 条记录")
    return added_count


async def init_admin_role(container: Container, session) -> int:
    """admin 角色不存在时创建，并确保拥有全部权限"""
    role_repository = container.role_repository()
    permission_repository = container.permission_repository()

    role = await role_repository.get_by_code(session, ADMIN_ROLE_CODE)
    if role is None:
        role = await role_repository.create(session, {
            "name": "超级管理员",
            "code": ADMIN_ROLE_CODE,
            "sort_order": 1,
            "status": CommonStatus.ACTIVE.value,
            "description": "系统内置角色，拥有全部权限",
        })
        logger.info(f"创建角色：{ADMIN_ROLE_CODE}")

    permissions = await permission_repository.list_all(session)
    await container.role_permission_sync().sync(session, role.id, [p.id for p in permissions])
    return role.id


async def init_admin_user(container: Container, session, admin_role_id: int, reset_password: bool) -> bool:
    """创建初始管理员；已存在时仅在 reset_password 为真时重置密码"""
    user_repository = container.user_repository()
    credential_verifier = container.credential_verifier()
    user_role_sync = container.user_role_sync()

    user = await user_repository.get_by_username(session, settings.FIRST_SUPERUSER)
    created = user is None
    if created:
        user = await user_repository.create(session, {
            "username": settings.FIRST_SUPERUSER,
            "password": credential_verifier.digest(settings.FIRST_SUPERUSER_PASSWORD),
            "real_name": "系统管理员",
            "status": CommonStatus.ACTIVE.value,
        })
        logger.info(f"创建管理员账号：{settings.FIRST_SUPERUSER}")
    elif reset_password:
        await user_repository.update(session, user, {
            "password": credential_verifier.digest(settings.FIRST_SUPERUSER_PASSWORD),
            "status": CommonStatus.ACTIVE.value,
        })
        logger.info(f"管理员密码已重置：{settings.FIRST_SUPERUSER}")

    role_ids = await user_role_sync.list_right_ids(session, user.id)
    if admin_role_id not in role_ids:
        await user_role_sync.sync(session, user.id, role_ids + [admin_role_id])
    return created


async def init_data(container: Container, reset_password: bool = False) -> Dict[str, int]:
    await create_tables(container)
    permission_repository = container.permission_repository()

    async with permission_repository.transaction() as session:
        permission_count = await init_permissions(container, session)
        admin_role_id = await init_admin_role(container, session)
        user_created = await init_admin_user(container, session, admin_role_id, reset_password)

    stats = {"permissions": permission_count, "admin_role_id": admin_role_id, "users": int(user_created)}
    logger.info(f"基础数据初始化完成 | 统计：{stats}")
    return stats


async def main(reset_password: bool = False) -> None:
    container = Container()
    try:
        await init_data(container, reset_password=reset_password)
    finally:
        await container.async_engine().dispose()


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s"
    )
    parser = argparse.ArgumentParser(description="初始化RBAC基础数据")
    parser.add_argument("--reset-password", action="store_true", help="重置初始管理员密码")
    args = parser.parse_args()
    asyncio.run(main(reset_password=args.reset_password))
