"""
SQLAlchemy Declarative Base
backend/rbac_admin/models/base.py
"""
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer
from sqlalchemy.orm import declarative_base

# 创建DeclarativeBase实例
Base = declarative_base()


def int_pk_column():
    """生成自增整型主键列的辅助函数"""
    return Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        nullable=False,
        comment='主键ID'
    )


def create_time_column():
    # 时间戳由应用侧写入，避免异步会话下提交后再次加载服务端默认值
    return Column(DateTime, default=datetime.now, nullable=False, comment='创建时间')


def update_time_column():
    return Column(
        DateTime,
        default=datetime.now,
        onupdate=datetime.now,
        nullable=False,
        comment='更新时间'
    )


__all__ = ['Base', 'int_pk_column', 'create_time_column', 'update_time_column']
