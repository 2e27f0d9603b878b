"""
权限相关的Pydantic Schemas
backend/rbac_admin/schemas/sys_permission.py
"""
from typing import Optional

from pydantic import Field

from rbac_admin.enums.sys_common import CommonStatus
from rbac_admin.schemas.base import BaseSchema, TimestampSchema, IDSchema


class PermissionCreate(BaseSchema):
    code: Optional[str] = Field(None, description="权限编码", examples=["user:read"])
    name: Optional[str] = Field(None, description="权限名称")
    type: Optional[str] = Field(None, description="权限分类")
    sort_order: Optional[int] = None
    status: Optional[CommonStatus] = None
    description: Optional[str] = None
    # 绑定到菜单：该菜单的 permission_code 会被设置为本权限编码
    menu_id: Optional[int] = Field(None, description="绑定的菜单ID")


class PermissionUpdate(PermissionCreate):
    """menu_id 显式传 null 表示解除菜单绑定，不传表示不修改"""


class PermissionOut(IDSchema, TimestampSchema):
    code: str
    name: str
    type: str
    sort_order: int = 0
    status: str = CommonStatus.ACTIVE.value
    description: Optional[str] = None
    role_count: int = Field(0, description="引用该权限的角色数量")
    menu_id: Optional[int] = None
