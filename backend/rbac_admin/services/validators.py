"""
服务层通用入参校验
backend/rbac_admin/services/validators.py
"""
from typing import Any, Dict, Iterable, Optional, Tuple

from rbac_admin.core.exceptions import InvalidInput
from rbac_admin.schemas.responses import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def require_fields(data: Dict[str, Any], fields: Iterable[str], partial: bool = False) -> None:
    """
    必填字段校验，空白字符串同样视为缺失
    partial=True（更新场景）时只校验请求中出现的字段
    """
    missing = [
        name for name in fields
        if (not partial or name in data) and is_blank(data.get(name))
    ]
    if missing:
        raise InvalidInput(f"Required fields are missing: {', '.join(missing)}")


def strip_strings(data: Dict[str, Any], fields: Iterable[str]) -> Dict[str, Any]:
    """去掉指定字符串字段的首尾空白"""
    for name in fields:
        if isinstance(data.get(name), str):
            data[name] = data[name].strip()
    return data


def drop_nulls(data: Dict[str, Any], fields: Iterable[str]) -> Dict[str, Any]:
    """不可为空的列：显式传 null 等同于不修改"""
    for name in fields:
        if name in data and data[name] is None:
            data.pop(name)
    return data


def normalize_page(page: Optional[int], page_size: Optional[int]) -> Tuple[int, int]:
    """页码从1开始；每页条数限制在 [1, MAX_PAGE_SIZE]"""
    page = page if page and page > 0 else 1
    page_size = page_size if page_size and page_size > 0 else DEFAULT_PAGE_SIZE
    return page, min(page_size, MAX_PAGE_SIZE)
