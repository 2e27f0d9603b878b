"""
部门管理模型
backend/rbac_admin/models/sys_dept.py
"""
from sqlalchemy import Column, String, Integer, ForeignKey, Text

from rbac_admin.models.base import Base, int_pk_column, create_time_column, update_time_column


class SysDept(Base):
    __tablename__ = 'sys_dept'
    __table_args__ = {'comment': '部门管理表'}

    id = int_pk_column()
    name = Column(String(100), nullable=False, comment='部门名称')
    code = Column(String(100), nullable=False, unique=True, comment='部门编码')

    # 自关联外键（NULL表示顶级部门）
    parent_id = Column(
        Integer,
        ForeignKey('sys_dept.id'),
        nullable=True,
        index=True,
        comment='父部门ID'
    )

    manager = Column(String(64), nullable=True, comment='负责人')
    phone = Column(String(32), nullable=True, comment='联系电话')
    email = Column(String(128), nullable=True, comment='邮箱')
    sort_order = Column(Integer, nullable=False, default=0, comment='显示顺序')
    status = Column(String(16), nullable=False, default='active', comment='状态(active-正常 inactive-停用)')
    description = Column(Text, nullable=True, comment='描述')

    create_time = create_time_column()
    update_time = update_time_column()

    def __repr__(self):
        return f"<SysDept(id={self.id}, name={self.name}, code={self.code})>"
