"""
权限校验工具文件
backend/rbac_admin/utils/permission_checker.py
核心功能：
1. 接口级权限校验工厂：permission_checker(PermissionCode.X)
2. 每次请求重新解析当前用户的权限，角色/权限变更即时生效
3. 日志关联请求上下文（request_id），用户ID脱敏输出
"""
import hashlib
import logging
from contextvars import ContextVar
from typing import Awaitable, Callable, Optional, Union

from fastapi import Depends

from rbac_admin.api.deps import CurrentUser, resolve_current_access
from rbac_admin.core.exceptions import PermissionDenied
from rbac_admin.enums.sys_permissions import PermissionCode
from rbac_admin.services.sys_permission_resolver import ResolvedAccess

logger = logging.getLogger(__name__)
# 请求ID上下文变量（由 main.py 的中间件注入）
request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

__all__ = ["permission_checker", "request_id_ctx", "desensitize_user_id"]


def desensitize_user_id(user_id: Union[int, str]) -> str:
    """用户ID脱敏：只输出摘要前8位"""
    return hashlib.md5(str(user_id).encode()).hexdigest()[:8]


def permission_checker(required: Union[PermissionCode, str]) -> Callable[..., Awaitable[ResolvedAccess]]:
    """
    权限验证工厂函数

    :param required: 所需权限码（PermissionCode 或其字符串值）
    :return: FastAPI依赖函数，校验失败抛出 PermissionDenied(403)
    """
    code = required.value if isinstance(required, PermissionCode) else required

    async def checker(
            current_user: CurrentUser,
            access: ResolvedAccess = Depends(resolve_current_access)
    ) -> ResolvedAccess:
        request_id = request_id_ctx.get()
        desensitized_uid = desensitize_user_id(current_user.id)
        if not access.allows(code):
            logger.warning(
                f"用户权限不足 | 用户：{desensitized_uid} | 所需权限：{code} | 角色：{access.role_codes}",
                extra={"request_id": request_id, "user_id": desensitized_uid, "required_perm": code}
            )
            raise PermissionDenied(f"Missing permission: {code}")

        logger.debug(
            f"用户权限校验通过 | 用户：{desensitized_uid} | 所需权限：{code}",
            extra={"request_id": request_id, "user_id": desensitized_uid, "required_perm": code}
        )
        return access

    return checker
