"""
认证服务层
backend/rbac_admin/services/sys_auth_service.py

登录流程状态：UNAUTHENTICATED → VERIFYING → AUTHENTICATED，或 → REJECTED
本层只产出 {user, roles, permissions}，令牌由接口层签发
"""
import logging
from enum import Enum
from typing import Optional

from rbac_admin.core.exceptions import (
    AccountDisabled,
    AppException,
    InvalidCredentials,
    InvalidInput,
)
from rbac_admin.core.security import CredentialVerifier, JWTError, extract_token_subject
from rbac_admin.enums.sys_common import CommonStatus
from rbac_admin.models import SysUser
from rbac_admin.repositories.sys_dept_repository import DeptRepository
from rbac_admin.repositories.sys_user_repository import UserRepository
from rbac_admin.schemas.sys_auth import LoginResult, LoginUser
from rbac_admin.services.sys_permission_resolver import PermissionResolver
from rbac_admin.services.validators import is_blank

logger = logging.getLogger(__name__)


class AuthState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    VERIFYING = "verifying"
    AUTHENTICATED = "authenticated"
    REJECTED = "rejected"


class LoginAttempt:
    """单次登录尝试的状态机，AUTHENTICATED/REJECTED 为终态"""

    def __init__(self):
        self.state = AuthState.UNAUTHENTICATED
        self.result: Optional[LoginResult] = None
        self.error: Optional[AppException] = None

    def begin(self) -> None:
        if self.state != AuthState.UNAUTHENTICATED:
            raise RuntimeError(f"Login attempt already {self.state.value}")
        self.state = AuthState.VERIFYING

    def accept(self, result: LoginResult) -> None:
        self.state = AuthState.AUTHENTICATED
        self.result = result

    def reject(self, error: AppException) -> None:
        self.state = AuthState.REJECTED
        self.error = error


class AuthService:
    """认证Service层：处理用户登录、Token校验"""

    def __init__(
            self,
            user_repository: UserRepository,
            dept_repository: DeptRepository,
            permission_resolver: PermissionResolver,
            credential_verifier: CredentialVerifier):
        self.user_repository = user_repository
        self.dept_repository = dept_repository
        self.permission_resolver = permission_resolver
        self.credential_verifier = credential_verifier

    # ------------------------------
    # 核心业务：用户认证（登录）
    # ------------------------------
    async def authenticate(
            self,
            username: Optional[str],
            password: Optional[str],
            attempt: Optional[LoginAttempt] = None
    ) -> LoginResult:
        """
        认证用户：
        1. 用户名或密码为空：InvalidInput，状态保持 UNAUTHENTICATED
        2. 用户不存在 / 密码错误：InvalidCredentials（同一提示，避免枚举用户名）
        3. 用户已停用：AccountDisabled
        4. 成功：解析角色与权限，返回登录载荷
        """
        attempt = attempt or LoginAttempt()
        if is_blank(username) or is_blank(password):
            raise InvalidInput("Username and password are required")

        attempt.begin()
        try:
            async with self.user_repository.transaction() as session:
                user = await self.user_repository.get_by_username(session, username.strip())
                if user is None:
                    # 保持与密码校验相同的耗时
                    self.credential_verifier.dummy_verify()
                    raise InvalidCredentials()
                if user.status != CommonStatus.ACTIVE.value:
                    raise AccountDisabled()
                if not self.credential_verifier.verify(password, user.password):
                    raise InvalidCredentials()
                result = await self._build_login_result(session, user)
        except AppException as e:
            attempt.reject(e)
            logger.warning(f"登录失败 | 用户名：{username} | 原因：{e.detail}")
            raise

        attempt.accept(result)
        logger.info(f"登录成功 | 用户ID：{result.user.id} | 权限数：{len(result.permissions)}")
        return result

    # ------------------------------
    # Token解析获取当前用户
    # ------------------------------
    async def get_current_user(self, token: str) -> SysUser:
        """
        从Token获取当前用户：
        1. 解析Token（无效或过期统一返回401）
        2. 按用户ID查询用户，且用户必须处于启用状态
        """
        try:
            subject = extract_token_subject(token)
            user_id = int(subject) if subject is not None else None
        except (JWTError, ValueError) as e:
            logger.warning(f"Token校验失败 | 详情：{str(e)}")
            raise InvalidCredentials("Could not validate credentials") from e
        if user_id is None:
            raise InvalidCredentials("Could not validate credentials")

        async with self.user_repository.transaction() as session:
            user = await self.user_repository.get_by_id(session, user_id)
        if not user:
            raise InvalidCredentials("Could not validate credentials")
        if user.status != CommonStatus.ACTIVE.value:
            raise AccountDisabled()
        return user

    async def get_login_result(self, user_id: int) -> LoginResult:
        """重新解析当前用户的登录载荷（/auth/me）"""
        async with self.user_repository.transaction() as session:
            user = await self.user_repository.get_by_id(session, user_id)
            if not user:
                raise InvalidCredentials("Could not validate credentials")
            return await self._build_login_result(session, user)

    async def _build_login_result(self, session, user: SysUser) -> LoginResult:
        access = await self.permission_resolver.resolve(session, user.id)
        login_user = LoginUser.model_validate(user)
        if user.department_id is not None:
            names = await self.dept_repository.get_name_map(session, [user.department_id])
            login_user.department_name = names.get(user.department_id)
        return LoginResult(user=login_user, roles=access.roles, permissions=access.permissions)
