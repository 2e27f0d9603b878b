# 功能：统一导出所有Schema模型，对外提供一致的导入入口
# backend/rbac_admin/schemas/__init__.py
from rbac_admin.schemas.base import BaseSchema, TimestampSchema, IDSchema
from rbac_admin.schemas.responses import PageResult, Message
from rbac_admin.schemas.sys_dept import DeptCreate, DeptUpdate, DeptOut, DeptTreeNode, DeptOption
from rbac_admin.schemas.sys_role import (
    RoleBrief, RoleCreate, RoleUpdate, RoleOut, RoleOption,
    RolePermissionAssign, RoleMenuAssign
)
from rbac_admin.schemas.sys_user import UserCreate, UserUpdate, UserOut
from rbac_admin.schemas.sys_menu import MenuCreate, MenuUpdate, MenuOut, MenuTreeNode
from rbac_admin.schemas.sys_permission import PermissionCreate, PermissionUpdate, PermissionOut
from rbac_admin.schemas.sys_auth import LoginRequest, LoginUser, LoginResult, LoginResponse

__all__ = [
    # Base
    'BaseSchema', 'TimestampSchema', 'IDSchema', 'PageResult', 'Message',

    # Dept
    'DeptCreate', 'DeptUpdate', 'DeptOut', 'DeptTreeNode', 'DeptOption',

    # Role
    'RoleBrief', 'RoleCreate', 'RoleUpdate', 'RoleOut', 'RoleOption',
    'RolePermissionAssign', 'RoleMenuAssign',

    # User
    'UserCreate', 'UserUpdate', 'UserOut',

    # Menu
    'MenuCreate', 'MenuUpdate', 'MenuOut', 'MenuTreeNode',

    # Permission
    'PermissionCreate', 'PermissionUpdate', 'PermissionOut',

    # Auth
    'LoginRequest', 'LoginUser', 'LoginResult', 'LoginResponse',
]
