"""
模型统一导出入口
作用：
1. 集中管理所有模型导入，避免散落在业务代码中的重复导入
2. 按外键依赖顺序导入，保证 Base.metadata 完整（create_all 依赖此处）
3. 统一导出所有模型，简化业务层导入（如：from rbac_admin.models import SysUser）

backend/rbac_admin/models/__init__.py
"""
from rbac_admin.models.base import Base

# 部门 → 用户 → 权限/菜单 → 角色（关联表引用前面所有表）
from rbac_admin.models.sys_dept import SysDept
from rbac_admin.models.sys_user import SysUser, sys_user_role
from rbac_admin.models.sys_permission import SysPermission
from rbac_admin.models.sys_menu import SysMenu
from rbac_admin.models.sys_role import SysRole, sys_role_menu, sys_role_permission

__all__ = [
    # 基础类
    'Base',
    # 核心模型（按导入顺序）
    'SysDept',
    'SysUser',
    'SysPermission',
    'SysMenu',
    'SysRole',
    # 中间表（按所属模型顺序）
    'sys_user_role',
    'sys_role_menu',
    'sys_role_permission',
]


def validate_models() -> None:
    """
    验证所有导出的模型类都继承自Base基类
    说明：跳过Base本身和中间表（Table对象），仅校验模型类
    """
    module_globals = globals()
    for model_name in __all__:
        if model_name == 'Base':
            continue
        model = module_globals.get(model_name)
        if model is None:
            raise RuntimeError(f"导出列表中的 {model_name} 未在模块中定义，请检查导入语句是否正确")
        if isinstance(model, type) and not issubclass(model, Base):
            raise RuntimeError(f"模型 {model_name} 未正确继承Base基类！所有业务模型必须继承Base")
