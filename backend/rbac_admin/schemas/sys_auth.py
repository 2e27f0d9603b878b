"""
认证相关的Pydantic Schemas
backend/rbac_admin/schemas/sys_auth.py
"""
from typing import Optional, List

from pydantic import Field

from rbac_admin.schemas.base import BaseSchema
from rbac_admin.schemas.sys_role import RoleBrief


class LoginRequest(BaseSchema):
    username: Optional[str] = ""
    password: Optional[str] = ""


class LoginUser(BaseSchema):
    id: int
    username: str
    real_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    department_id: Optional[int] = None
    department_name: Optional[str] = None


class LoginResult(BaseSchema):
    """登录成功后的权限载荷：{user, roles, permissions}"""
    user: LoginUser
    roles: List[RoleBrief] = Field(default_factory=list)
    permissions: List[str] = Field(default_factory=list)


class LoginResponse(LoginResult):
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="访问令牌有效期（秒）")
