"""
权限枚举文件
backend/rbac_admin/enums/sys_permissions.py

接口权限码统一在此维护，scripts/init_data.py 会把每个枚举值同步为一条 sys_permission 记录
"""
from enum import Enum


class PermissionCode(Enum):
    """
    系统权限枚举类
    每个枚举值格式: (权限代码, 显示名称, 权限分类)
    """

    def __new__(cls, code: str, name: str, category: str):
        obj = object.__new__(cls)
        obj._value_ = code
        obj.display_name = name
        obj.category = category
        return obj

    # 用户管理权限
    USER_READ = ("user:read", "查看用户", "user")
    USER_WRITE = ("user:write", "编辑用户", "user")
    USER_DELETE = ("user:delete", "删除用户", "user")

    # 部门管理权限
    DEPT_READ = ("department:read", "查看部门", "department")
    DEPT_WRITE = ("department:write", "编辑部门", "department")
    DEPT_DELETE = ("department:delete", "删除部门", "department")

    # 角色管理权限
    ROLE_READ = ("role:read", "查看角色", "role")
    ROLE_WRITE = ("role:write", "编辑角色", "role")
    ROLE_DELETE = ("role:delete", "删除角色", "role")

    # 菜单管理权限
    MENU_READ = ("menu:read", "查看菜单", "menu")
    MENU_WRITE = ("menu:write", "编辑菜单", "menu")
    MENU_DELETE = ("menu:delete", "删除菜单", "menu")

    # 权限管理权限
    PERMISSION_READ = ("permission:read", "查看权限", "permission")
    PERMISSION_WRITE = ("permission:write", "编辑权限", "permission")
    PERMISSION_DELETE = ("permission:delete", "删除权限", "permission")

    @classmethod
    def get_all(cls):
        """获取所有权限枚举实例"""
        return list(cls)


# 超级管理员角色编码与全量通配权限
ADMIN_ROLE_CODE = "admin"
WILDCARD_PERMISSION = "*"
