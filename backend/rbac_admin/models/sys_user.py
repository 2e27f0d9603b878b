"""
系统用户模型
backend/rbac_admin/models/sys_user.py
"""
from sqlalchemy import Column, String, Integer, ForeignKey, Table

from rbac_admin.models.base import Base, int_pk_column, create_time_column, update_time_column


class SysUser(Base):
    __tablename__ = 'sys_user'
    __table_args__ = {'comment': '系统用户表'}

    id = int_pk_column()
    username = Column(String(64), nullable=False, unique=True, index=True, comment='用户名')
    password = Column(String(255), nullable=False, comment='密码摘要')
    real_name = Column(String(64), nullable=False, comment='真实姓名')
    email = Column(String(128), nullable=True, comment='用户邮箱')
    phone = Column(String(32), nullable=True, comment='联系电话')

    department_id = Column(
        Integer,
        ForeignKey('sys_dept.id'),
        nullable=True,
        index=True,
        comment='所属部门ID'
    )
    status = Column(String(16), nullable=False, default='active', comment='状态(active-正常 inactive-停用)')

    create_time = create_time_column()
    update_time = update_time_column()

    def __repr__(self):
        return f"<SysUser(id={self.id}, username={self.username}, real_name={self.real_name})>"


# 用户角色关联表（多对多）
sys_user_role = Table(
    'sys_user_role',
    Base.metadata,
    Column('user_id', Integer, ForeignKey('sys_user.id'), primary_key=True, comment='用户ID'),
    Column('role_id', Integer, ForeignKey('sys_role.id'), primary_key=True, comment='角色ID'),
    comment='用户角色关联表'
)
