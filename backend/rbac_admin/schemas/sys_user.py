"""
用户相关的Pydantic Schemas
backend/rbac_admin/schemas/sys_user.py
"""
from typing import Optional, List

from pydantic import Field

from rbac_admin.enums.sys_common import CommonStatus
from rbac_admin.schemas.base import BaseSchema, TimestampSchema, IDSchema
from rbac_admin.schemas.sys_role import RoleBrief


class UserCreate(BaseSchema):
    username: Optional[str] = Field(None, description="用户名", examples=["john_doe"])
    password: Optional[str] = Field(None, description="密码（明文，仅入参）")
    real_name: Optional[str] = Field(None, description="真实姓名")
    email: Optional[str] = None
    phone: Optional[str] = None
    department_id: Optional[int] = Field(None, description="所属部门ID")
    status: Optional[CommonStatus] = None
    role_ids: Optional[List[int]] = Field(None, description="角色ID列表")


class UserUpdate(UserCreate):
    """更新模型：password 为空时不修改密码"""


class UserOut(IDSchema, TimestampSchema):
    username: str
    real_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    department_id: Optional[int] = None
    department_name: Optional[str] = None
    status: str = CommonStatus.ACTIVE.value
    roles: List[RoleBrief] = Field(default_factory=list)
