"""
部门相关的Pydantic Schemas
backend/rbac_admin/schemas/sys_dept.py
"""
from typing import Optional, List

from pydantic import Field

from rbac_admin.enums.sys_common import CommonStatus
from rbac_admin.schemas.base import BaseSchema, TimestampSchema, IDSchema


class DeptCreate(BaseSchema):
    """部门创建模型（必填校验在服务层完成，空字符串同样视为缺失）"""
    name: Optional[str] = Field(None, description="部门名称")
    code: Optional[str] = Field(None, description="部门编码")
    parent_id: Optional[int] = Field(None, description="父部门ID")
    manager: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    sort_order: Optional[int] = Field(None, description="显示顺序")
    status: Optional[CommonStatus] = None
    description: Optional[str] = None


class DeptUpdate(DeptCreate):
    """部门更新模型：仅处理请求中出现的字段"""


class DeptOut(IDSchema, TimestampSchema):
    """部门输出模型"""
    name: str
    code: str
    parent_id: Optional[int] = None
    parent_name: Optional[str] = None
    manager: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    sort_order: int = 0
    status: str = CommonStatus.ACTIVE.value
    description: Optional[str] = None
    user_count: int = 0


class DeptTreeNode(DeptOut):
    """部门树节点模型"""
    children: List["DeptTreeNode"] = Field(default_factory=list)


class DeptOption(BaseSchema):
    """部门下拉选项（树形）"""
    value: int
    label: str
    tag: Optional[str] = None
    children: Optional[List["DeptOption"]] = None
