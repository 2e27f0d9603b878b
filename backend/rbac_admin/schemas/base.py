"""
base类
backend/rbac_admin/schemas/base.py
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    # 对外JSON使用驼峰命名（realName/sortOrder），入参驼峰与下划线均可
    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
        use_enum_values=True,
    )


class TimestampSchema(BaseSchema):
    create_time: Optional[datetime] = None
    update_time: Optional[datetime] = None


class IDSchema(BaseSchema):
    id: int
