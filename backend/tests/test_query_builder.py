"""
测试查询构建器
"""
from sqlalchemy import select

from rbac_admin.core.query_builder import (
    create_user_query_builder,
    create_menu_query_builder,
    EqualFilter,
    MultiFieldKeywordFilter,
    PaginatedQueryBuilder,
)
from rbac_admin.models import SysMenu, SysUser


def _sql(query) -> str:
    return str(query.compile(compile_kwargs={"literal_binds": True})).lower()


def test_query_builder_registers_field_strategies():
    builder = create_user_query_builder()

    assert isinstance(builder.strategies["status__eq"], EqualFilter)
    assert isinstance(builder.strategies["keyword"], MultiFieldKeywordFilter)
    assert isinstance(builder.strategies["department_id__eq"], EqualFilter)
    assert set(builder.strategies) == {"status__eq", "department_id__eq", "keyword"}


def test_empty_values_are_ignored():
    builder = create_user_query_builder()
    builder.filter(keyword="", status__eq=None, department_id__eq="")

    assert builder.conditions == []
    assert "where" not in _sql(builder.build(select(SysUser)))


def test_keyword_filter_matches_any_field():
    builder = create_user_query_builder().filter(keyword="  admin ")
    sql = _sql(builder.build(select(SysUser)))

    assert "sys_user.username" in sql
    assert "sys_user.real_name" in sql
    assert "sys_user.email" in sql
    assert "'%admin%'" in sql
    assert " or " in sql


def test_blank_keyword_is_skipped_by_strategy():
    builder = PaginatedQueryBuilder(SysUser)
    builder.register_strategy("keyword", MultiFieldKeywordFilter([SysUser.username]))
    builder.filter(keyword="   ")

    assert "where" not in _sql(builder.build(select(SysUser)))


def test_unknown_condition_keys_are_ignored():
    builder = create_menu_query_builder().filter(nonexistent__eq="x")
    assert "where" not in _sql(builder.build(select(SysMenu)))


def test_paginate_sets_limit_and_offset():
    builder = create_user_query_builder().filter(status__eq="active").paginate(page=3, page_size=10)
    sql = _sql(builder.build_paginated(select(SysUser)))

    assert "limit 10" in sql
    assert "offset 20" in sql
    assert "order by sys_user.id asc" in sql


def test_build_count_ignores_pagination():
    builder = create_user_query_builder().filter(status__eq="active").paginate(page=2, page_size=5)
    sql = _sql(builder.build_count(select(SysUser)))

    assert sql.startswith("select count(*)")
    assert "limit" not in sql
    assert "sys_user.status = 'active'" in sql


def test_reset_clears_conditions():
    builder = create_user_query_builder().filter(status__eq="active")
    builder.reset()
    assert builder.conditions == []


def test_keyword_wildcards_are_escaped():
    builder = create_user_query_builder().filter(keyword="50%_off\\")
    query = builder.build(select(SysUser))
    compiled = query.compile()

    assert set(compiled.params.values()) == {"%50\\%\\_off\\\\%"}
    assert "escape" in str(compiled).lower()
