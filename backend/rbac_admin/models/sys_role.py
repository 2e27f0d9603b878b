"""
系统角色模型
backend/rbac_admin/models/sys_role.py
"""
from sqlalchemy import Column, String, Integer, ForeignKey, Table, Text

from rbac_admin.models.base import Base, int_pk_column, create_time_column, update_time_column


class SysRole(Base):
    __tablename__ = 'sys_role'
    __table_args__ = {'comment': '系统角色表'}

    id = int_pk_column()
    name = Column(String(64), nullable=False, comment='角色名称')
    code = Column(String(64), nullable=False, unique=True, comment='角色编码')
    sort_order = Column(Integer, nullable=False, default=0, comment='显示顺序')
    status = Column(String(16), nullable=False, default='active', comment='角色状态(active-正常 inactive-停用)')
    description = Column(Text, nullable=True, comment='角色描述')

    create_time = create_time_column()
    update_time = update_time_column()

    def __repr__(self):
        return f"<SysRole(id={self.id}, name={self.name}, code={self.code})>"


# 角色菜单关联表（多对多，仅用于导航菜单）
sys_role_menu = Table(
    'sys_role_menu',
    Base.metadata,
    Column('role_id', Integer, ForeignKey('sys_role.id'), primary_key=True, comment='角色ID'),
    Column('menu_id', Integer, ForeignKey('sys_menu.id'), primary_key=True, comment='菜单ID'),
    comment='角色菜单关联表'
)

# 角色权限关联表（多对多）
sys_role_permission = Table(
    'sys_role_permission',
    Base.metadata,
    Column('role_id', Integer, ForeignKey('sys_role.id'), primary_key=True, comment='角色ID'),
    Column('permission_id', Integer, ForeignKey('sys_permission.id'), primary_key=True, comment='权限ID'),
    comment='角色权限关联表'
)
