"""
系统菜单模型
backend/rbac_admin/models/sys_menu.py
"""
from sqlalchemy import Column, String, Integer, ForeignKey

from rbac_admin.models.base import Base, int_pk_column, create_time_column, update_time_column


class SysMenu(Base):
    __tablename__ = 'sys_menu'
    __table_args__ = {'comment': '系统菜单表'}

    id = int_pk_column()
    name = Column(String(64), nullable=False, comment='菜单名称')
    path = Column(String(255), nullable=True, comment='路由路径')
    icon = Column(String(64), nullable=True, comment='菜单图标')
    parent_id = Column(
        Integer,
        ForeignKey('sys_menu.id'),
        nullable=True,
        index=True,
        comment='父菜单ID（NULL表示顶级菜单）'
    )
    type = Column(String(16), nullable=False, default='menu', comment='菜单类型（directory-目录 menu-菜单 button-按钮）')
    # 同一权限编码最多绑定到一个菜单上，由服务层维护
    permission_code = Column(String(128), nullable=True, index=True, comment='绑定的权限编码')
    sort_order = Column(Integer, nullable=False, default=0, comment='排序')
    status = Column(String(16), nullable=False, default='active', comment='状态(active-正常 inactive-停用)')

    create_time = create_time_column()
    update_time = update_time_column()

    def __repr__(self):
        return f"<SysMenu(id={self.id}, name={self.name}, type={self.type})>"
