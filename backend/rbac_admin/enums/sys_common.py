"""
通用状态枚举
backend/rbac_admin/enums/sys_common.py
"""
from enum import Enum


class CommonStatus(str, Enum):
    """实体启用状态"""
    ACTIVE = "active"
    INACTIVE = "inactive"


class MenuType(str, Enum):
    """菜单类型：目录/菜单/按钮，按钮不能作为父节点"""
    DIRECTORY = "directory"
    MENU = "menu"
    BUTTON = "button"
