"""
高级查询构建器模块 - 策略模式实现
backend/rbac_admin/core/query_builder.py
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List

from sqlalchemy import or_, func, select
from sqlalchemy.orm import InstrumentedAttribute
from sqlalchemy.sql import Select


# ==================== 策略基类 ====================
class BaseFilterStrategy(ABC):
    """过滤策略基类"""

    @abstractmethod
    def apply(self, query: Select, value: Any, **kwargs) -> Select:
        """应用过滤条件到查询"""

    def validate(self, value: Any) -> bool:
        """验证输入值是否有效"""
        return value is not None and value != ""


# ==================== 具体过滤策略 ====================
def escape_like(value: str) -> str:
    """转义 LIKE 通配符，按字面子串匹配"""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class EqualFilter(BaseFilterStrategy):
    """等于过滤"""

    def __init__(self, field: InstrumentedAttribute):
        self.field = field

    def apply(self, query: Select, value: Any, **kwargs) -> Select:
        return query.filter(self.field == value)


class MultiFieldKeywordFilter(BaseFilterStrategy):
    """多字段关键词搜索（任一字段包含即命中）"""

    def __init__(self, fields: List[InstrumentedAttribute]):
        self.fields = fields

    def validate(self, value: Any) -> bool:
        return isinstance(value, str) and value.strip() != ""

    def apply(self, query: Select, value: Any, **kwargs) -> Select:
        keyword = escape_like(value.strip())
        conditions = [field.ilike(f"%{keyword}%", escape="\\") for field in self.fields]
        return query.filter(or_(*conditions))


# ==================== 查询构建器 ====================
class QueryBuilder:
    """高级查询构建器"""

    def __init__(self, model_class):
        self.model_class = model_class
        self.strategies: Dict[str, BaseFilterStrategy] = {}
        self.conditions: List[Dict[str, Any]] = []

    def register_strategy(self, name: str, strategy: BaseFilterStrategy) -> 'QueryBuilder':
        """注册过滤策略"""
        self.strategies[name] = strategy
        return self

    def auto_register_field_strategies(self, fields_config: Dict[str, Dict[str, Any]]) -> 'QueryBuilder':
        """自动注册字段策略：<字段>__eq"""
        for field_name, config in fields_config.items():
            if not hasattr(self.model_class, field_name):
                continue
            field = getattr(self.model_class, field_name)

            if config.get('allow_equal', True):
                self.register_strategy(f"{field_name}__eq", EqualFilter(field))

        return self

    def filter(self, **kwargs) -> 'QueryBuilder':
        """添加过滤条件（支持链式调用），空值忽略"""
        for key, value in kwargs.items():
            if value is None or value == "":
                continue
            self.conditions.append({"key": key, "value": value})
        return self

    def build(self, base_query: Select) -> Select:
        """构建查询（未注册的条件键直接忽略）"""
        query = base_query

        for condition in self.conditions:
            strategy = self.strategies.get(condition["key"])
            if strategy and strategy.validate(condition["value"]):
                query = strategy.apply(query, condition["value"])

        return query

    def build_count(self, base_query: Select) -> Select:
        """构建总数查询（基于过滤后的子查询计数）"""
        filtered = self.build(base_query)
        return select(func.count()).select_from(filtered.order_by(None).subquery())

    def reset(self) -> 'QueryBuilder':
        """重置构建器状态"""
        self.conditions.clear()
        return self


# ==================== 分页查询构建器 ====================
class PaginatedQueryBuilder(QueryBuilder):
    """支持分页的查询构建器（页码从1开始）"""

    def __init__(self, model_class):
        super().__init__(model_class)
        self._offset = 0
        self._limit = None
        self._order_by = []

    def paginate(self, page: int = 1, page_size: int = 10) -> 'PaginatedQueryBuilder':
        """设置分页参数"""
        self._offset = (page - 1) * page_size
        self._limit = page_size
        return self

    def order_by(self, *fields) -> 'PaginatedQueryBuilder':
        """设置排序字段"""
        for field in fields:
            if isinstance(field, str):
                if hasattr(self.model_class, field):
                    self._order_by.append(getattr(self.model_class, field))
            else:
                self._order_by.append(field)
        return self

    def build_paginated(self, base_query: Select) -> Select:
        """构建分页查询"""
        query = self.build(base_query)

        if self._order_by:
            query = query.order_by(*self._order_by)

        if self._limit:
            query = query.limit(self._limit).offset(self._offset)

        return query


# ==================== 各模块查询构建器工厂 ====================
def create_dept_query_builder() -> PaginatedQueryBuilder:
    """部门：关键词匹配名称/编码"""
    from rbac_admin.models import SysDept

    builder = PaginatedQueryBuilder(SysDept)
    builder.auto_register_field_strategies({
        "status": {"allow_equal": True},
        "parent_id": {"allow_equal": True},
    })
    builder.register_strategy("keyword", MultiFieldKeywordFilter([SysDept.name, SysDept.code]))
    builder.order_by(SysDept.sort_order.asc(), SysDept.id.asc())
    return builder


def create_user_query_builder() -> PaginatedQueryBuilder:
    """用户：关键词匹配用户名/姓名/邮箱，可按部门过滤"""
    from rbac_admin.models import SysUser

    builder = PaginatedQueryBuilder(SysUser)
    builder.auto_register_field_strategies({
        "status": {"allow_equal": True},
        "department_id": {"allow_equal": True},
    })
    builder.register_strategy(
        "keyword",
        MultiFieldKeywordFilter([SysUser.username, SysUser.real_name, SysUser.email])
    )
    builder.order_by(SysUser.id.asc())
    return builder


def create_role_query_builder() -> PaginatedQueryBuilder:
    """角色：关键词匹配名称/编码"""
    from rbac_admin.models import SysRole

    builder = PaginatedQueryBuilder(SysRole)
    builder.auto_register_field_strategies({"status": {"allow_equal": True}})
    builder.register_strategy("keyword", MultiFieldKeywordFilter([SysRole.name, SysRole.code]))
    builder.order_by(SysRole.sort_order.asc(), SysRole.id.asc())
    return builder


def create_menu_query_builder() -> PaginatedQueryBuilder:
    """菜单：关键词匹配名称，可按类型过滤"""
    from rbac_admin.models import SysMenu

    builder = PaginatedQueryBuilder(SysMenu)
    builder.auto_register_field_strategies({
        "type": {"allow_equal": True},
        "status": {"allow_equal": True},
    })
    builder.register_strategy("keyword", MultiFieldKeywordFilter([SysMenu.name]))
    builder.order_by(SysMenu.sort_order.asc(), SysMenu.id.asc())
    return builder


def create_permission_query_builder() -> PaginatedQueryBuilder:
    """权限：关键词匹配名称/编码，可按分类过滤"""
    from rbac_admin.models import SysPermission

    builder = PaginatedQueryBuilder(SysPermission)
    builder.auto_register_field_strategies({
        "type": {"allow_equal": True},
        "status": {"allow_equal": True},
    })
    builder.register_strategy(
        "keyword",
        MultiFieldKeywordFilter([SysPermission.name, SysPermission.code])
    )
    builder.order_by(SysPermission.sort_order.asc(), SysPermission.id.asc())
    return builder
