"""
仓储层基类
backend/rbac_admin/repositories/base.py

所有写操作都在调用方传入的 session 内执行，服务层用 transaction() 开启一次事务，
校验、实体写入、关联同步共享同一会话，一起提交或回滚
"""
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Iterable, List, Optional, Set, Tuple, Type

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession

from rbac_admin.core.exceptions import AppException, DuplicateKey, StoreFailure
from rbac_admin.core.query_builder import PaginatedQueryBuilder

logger = logging.getLogger(__name__)


class BaseRepository:
    """通用仓储：事务上下文 + 单表CRUD"""
    model: Type[Any] = None

    def __init__(self, async_session_factory: async_sessionmaker):
        self.async_session_factory = async_session_factory

    # ------------------------------
    # 标准异步事务上下文
    # ------------------------------
    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncSession, None]:
        session: AsyncSession = self.async_session_factory()
        try:
            await session.begin()
            yield session
            await session.commit()
        except AppException:
            await session.rollback()
            raise
        except IntegrityError as e:
            await session.rollback()
            logger.warning(f"唯一约束冲突，事务已回滚 | 表：{self.model.__tablename__} | 详情：{e.orig}")
            raise DuplicateKey("Duplicate value violates a unique constraint") from e
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"数据库操作失败，事务已回滚 | 表：{self.model.__tablename__}", exc_info=True)
            raise StoreFailure() from e
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    # ------------------------------
    # 查询类方法
    # ------------------------------
    async def get_by_id(self, session: AsyncSession, entity_id: int) -> Optional[Any]:
        stmt = select(self.model).where(self.model.id == entity_id)
        result = await session.execute(stmt)
        return result.scalars().first()

    async def get_by_field(self, session: AsyncSession, field_name: str, value: Any) -> Optional[Any]:
        """按唯一字段查询（编码/用户名）"""
        stmt = select(self.model).where(getattr(self.model, field_name) == value)
        result = await session.execute(stmt)
        return result.scalars().first()

    async def get_by_ids(self, session: AsyncSession, ids: Iterable[int]) -> List[Any]:
        ids = list(ids)
        if not ids:
            return []
        stmt = select(self.model).where(self.model.id.in_(ids)).order_by(self.model.id)
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def get_existing_ids(self, session: AsyncSession, ids: Iterable[int]) -> Set[int]:
        """返回ids中真实存在的ID集合，供服务层校验引用"""
        ids = list(ids)
        if not ids:
            return set()
        stmt = select(self.model.id).where(self.model.id.in_(ids))
        result = await session.execute(stmt)
        return set(result.scalars().all())

    async def get_name_map(self, session: AsyncSession, ids: Iterable[int]) -> Dict[int, str]:
        """ID到名称的映射（列表补充父级/部门名称）"""
        ids = {i for i in ids if i is not None}
        if not ids:
            return {}
        stmt = select(self.model.id, self.model.name).where(self.model.id.in_(ids))
        result = await session.execute(stmt)
        return {row[0]: row[1] for row in result.all()}

    async def list_all(self, session: AsyncSession, *conditions) -> List[Any]:
        """全量查询，按 sort_order、id 升序"""
        stmt = select(self.model).where(*conditions).order_by(
            self.model.sort_order.asc(), self.model.id.asc()
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def list_filtered(self, session: AsyncSession, builder: PaginatedQueryBuilder) -> List[Any]:
        """按构建器过滤与排序，不分页"""
        stmt = builder.build_paginated(select(self.model))
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def list_page(
            self,
            session: AsyncSession,
            builder: PaginatedQueryBuilder,
            page: int,
            page_size: int
    ) -> Tuple[List[Any], int]:
        """分页查询，返回(当前页数据, 总数)"""
        base_query = select(self.model)
        total = (await session.execute(builder.build_count(base_query))).scalar_one()
        stmt = builder.paginate(page=page, page_size=page_size).build_paginated(base_query)
        result = await session.execute(stmt)
        return list(result.scalars().all()), total

    # ------------------------------
    # 写操作类方法（需在事务内执行）
    # ------------------------------
    async def create(self, session: AsyncSession, data: Dict[str, Any]) -> Any:
        entity = self.model(**data)
        session.add(entity)
        await session.flush()
        return entity

    async def update(self, session: AsyncSession, entity: Any, data: Dict[str, Any]) -> Any:
        for key, value in data.items():
            setattr(entity, key, value)
        await session.flush()
        return entity

    async def delete(self, session: AsyncSession, entity: Any) -> None:
        await session.delete(entity)
        await session.flush()


class TreeRepositoryMixin:
    """带 parent_id 自关联的表（部门、菜单）共用的层级查询"""

    async def list_parent_links(self, session: AsyncSession) -> Dict[int, Optional[int]]:
        """全量 id → parent_id 映射，用于后代/祖先计算"""
        stmt = select(self.model.id, self.model.parent_id)
        result = await session.execute(stmt)
        return {row[0]: row[1] for row in result.all()}

    async def has_children(self, session: AsyncSession, node_id: int) -> bool:
        stmt = select(func.count()).select_from(self.model).where(self.model.parent_id == node_id)
        result = await session.execute(stmt)
        return result.scalar_one() > 0
