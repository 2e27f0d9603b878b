"""
角色相关的Pydantic Schemas
backend/rbac_admin/schemas/sys_role.py
"""
from typing import Optional, List

from pydantic import Field

from rbac_admin.enums.sys_common import CommonStatus
from rbac_admin.schemas.base import BaseSchema, TimestampSchema, IDSchema


class RoleBrief(BaseSchema):
    """角色简要信息（登录结果、用户列表中使用）"""
    id: int
    name: str
    code: str


class RoleCreate(BaseSchema):
    name: Optional[str] = Field(None, description="角色名称", examples=["管理员"])
    code: Optional[str] = Field(None, description="角色编码，缺省时自动生成")
    sort_order: Optional[int] = None
    status: Optional[CommonStatus] = None
    description: Optional[str] = Field(None, description="角色描述")
    # None 表示不修改关联，[] 表示清空
    menu_ids: Optional[List[int]] = Field(None, description="菜单ID列表")
    permission_ids: Optional[List[int]] = Field(None, description="权限ID列表")


class RoleUpdate(RoleCreate):
    pass


class RoleOut(IDSchema, TimestampSchema):
    name: str
    code: str
    sort_order: int = 0
    status: str = CommonStatus.ACTIVE.value
    description: Optional[str] = None
    user_count: int = Field(0, description="拥有该角色的用户数量")
    menu_ids: List[int] = Field(default_factory=list)
    permission_ids: List[int] = Field(default_factory=list)


class RoleOption(BaseSchema):
    value: int
    label: str
    tag: str


class RolePermissionAssign(BaseSchema):
    permission_ids: List[int] = Field(default_factory=list, description="权限ID列表")


class RoleMenuAssign(BaseSchema):
    menu_ids: List[int] = Field(default_factory=list, description="菜单ID列表")
