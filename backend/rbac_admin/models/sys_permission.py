"""
系统权限模型
backend/rbac_admin/models/sys_permission.py
"""
from sqlalchemy import Column, String, Integer, Text

from rbac_admin.models.base import Base, int_pk_column, create_time_column, update_time_column


class SysPermission(Base):
    __tablename__ = "sys_permission"
    __table_args__ = {'comment': '系统权限表'}

    id = int_pk_column()
    code = Column(String(128), nullable=False, unique=True, comment='权限编码')
    name = Column(String(64), nullable=False, comment='权限名称')
    type = Column(String(32), nullable=False, comment='权限分类')
    sort_order = Column(Integer, nullable=False, default=0, comment='显示顺序')
    status = Column(String(16), nullable=False, default='active', comment='权限状态(active-正常 inactive-停用)')
    description = Column(Text, nullable=True, comment='权限描述')

    create_time = create_time_column()
    update_time = update_time_column()

    def __repr__(self):
        return f"<SysPermission(id={self.id}, name={self.name}, code={self.code})>"
