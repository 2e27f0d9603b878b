"""
认证API端点
backend/rbac_admin/api/v1/endpoints/auth.py
"""
import logging
from datetime import timedelta

from dependency_injector.wiring import inject
from fastapi import APIRouter

from rbac_admin.api.deps import AuthServiceDep, CurrentUser
from rbac_admin.core.config import settings
from rbac_admin.core.responses import ErrorResponse
from rbac_admin.core.security import create_access_token
from rbac_admin.schemas.sys_auth import LoginRequest, LoginResponse, LoginResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["认证"])


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="用户登录",
    responses={
        400: {"model": ErrorResponse, "description": "用户名或密码为空"},
        401: {"model": ErrorResponse, "description": "用户名或密码错误"},
        403: {"model": ErrorResponse, "description": "账号已停用"},
    },
)
@inject
async def login(login_in: LoginRequest, auth_service: AuthServiceDep) -> LoginResponse:
    """
    用户名密码登录，成功后签发访问令牌

    返回格式：{accessToken, tokenType, expiresIn, user, roles, permissions}
    """
    result = await auth_service.authenticate(login_in.username, login_in.password)
    expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = create_access_token(result.user.id, expires_delta=expires)
    return LoginResponse(
        **result.model_dump(),
        access_token=access_token,
        expires_in=int(expires.total_seconds()),
    )


@router.get("/me", response_model=LoginResult, summary="当前登录用户")
@inject
async def read_me(current_user: CurrentUser, auth_service: AuthServiceDep) -> LoginResult:
    """当前用户信息及实时解析的角色、权限"""
    return await auth_service.get_login_result(current_user.id)
