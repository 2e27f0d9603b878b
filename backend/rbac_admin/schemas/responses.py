"""
统一API响应模型
backend/rbac_admin/schemas/responses.py
"""
import math
from typing import TypeVar, Generic, List

from pydantic import Field

from rbac_admin.schemas.base import BaseSchema

T = TypeVar('T')

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class PageResult(BaseSchema, Generic[T]):
    """分页列表响应：{data, total, page, pageSize, totalPages}"""
    data: List[T] = Field(default_factory=list, description="当前页数据")
    total: int = Field(0, description="总记录数")
    page: int = Field(1, description="当前页码（从1开始）")
    page_size: int = Field(DEFAULT_PAGE_SIZE, description="每页条数")
    total_pages: int = Field(0, description="总页数")

    @classmethod
    def build(cls, data: List[T], total: int, page: int, page_size: int) -> "PageResult[T]":
        total_pages = math.ceil(total / page_size) if total else 0
        return cls(data=data, total=total, page=page, page_size=page_size, total_pages=total_pages)


class Message(BaseSchema):
    message: str
