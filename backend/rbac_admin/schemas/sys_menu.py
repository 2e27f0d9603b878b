"""
菜单相关的Pydantic Schemas
backend/rbac_admin/schemas/sys_menu.py
"""
from typing import Optional, List

from pydantic import Field

from rbac_admin.enums.sys_common import CommonStatus, MenuType
from rbac_admin.schemas.base import BaseSchema, TimestampSchema, IDSchema


class MenuCreate(BaseSchema):
    name: Optional[str] = Field(None, description="菜单名称")
    path: Optional[str] = Field(None, description="路由路径")
    icon: Optional[str] = None
    parent_id: Optional[int] = Field(None, description="父菜单ID")
    type: Optional[MenuType] = Field(None, description="菜单类型")
    permission_code: Optional[str] = Field(None, description="绑定的权限编码")
    sort_order: Optional[int] = None
    status: Optional[CommonStatus] = None


class MenuUpdate(MenuCreate):
    pass


class MenuOut(IDSchema, TimestampSchema):
    name: str
    path: Optional[str] = None
    icon: Optional[str] = None
    parent_id: Optional[int] = None
    type: str
    permission_code: Optional[str] = None
    sort_order: int = 0
    status: str = CommonStatus.ACTIVE.value


class MenuTreeNode(MenuOut):
    children: List["MenuTreeNode"] = Field(default_factory=list)
