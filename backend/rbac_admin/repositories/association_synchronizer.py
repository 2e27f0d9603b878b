"""
多对多关联同步器
backend/rbac_admin/repositories/association_synchronizer.py

用户-角色、角色-菜单、角色-权限三张关联表共用：整体替换一侧的全部关联
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import Table
from sqlmodel import select, delete, insert, func
from sqlmodel.ext.asyncio.session import AsyncSession

from rbac_admin.core.exceptions import InvalidInput

logger = logging.getLogger(__name__)


class AssociationSynchronizer:
    """
    关联表同步器
    - left：关联的拥有方（用户/角色）
    - right：被关联方（角色/菜单/权限）
    """

    def __init__(self, table: Table, left_key: str, right_key: str):
        self.table = table
        self.left_column = table.c[left_key]
        self.right_column = table.c[right_key]
        self.left_key = left_key
        self.right_key = right_key

    @staticmethod
    def normalize_ids(ids: Iterable[Any]) -> List[int]:
        """去重（保留首次出现顺序）并转换为整型ID"""
        normalized: List[int] = []
        seen = set()
        for raw in ids:
            if isinstance(raw, bool):
                raise InvalidInput(f"Invalid id: {raw!r}")
            try:
                value = int(raw)
            except (TypeError, ValueError) as e:
                raise InvalidInput(f"Invalid id: {raw!r}") from e
            if value not in seen:
                seen.add(value)
                normalized.append(value)
        return normalized

    async def sync(
            self,
            session: AsyncSession,
            left_id: int,
            right_ids: Optional[Iterable[Any]]
    ) -> Optional[List[int]]:
        """
        替换 left_id 的全部关联（在调用方事务内执行）
        - right_ids 为 None：不做任何修改，返回 None
        - right_ids 为空列表：清空全部关联
        """
        if right_ids is None:
            return None

        ids = self.normalize_ids(right_ids)
        await session.execute(delete(self.table).where(self.left_column == left_id))
        if ids:
            await session.execute(
                insert(self.table).values([
                    {self.left_key: left_id, self.right_key: right_id} for right_id in ids
                ])
            )
        logger.debug(f"关联已同步 | 表：{self.table.name} | {self.left_key}={left_id} | {self.right_key}={ids}")
        return ids

    async def clear_left(self, session: AsyncSession, left_id: int) -> None:
        await session.execute(delete(self.table).where(self.left_column == left_id))

    async def clear_right(self, session: AsyncSession, right_id: int) -> None:
        await session.execute(delete(self.table).where(self.right_column == right_id))

    async def list_right_ids(self, session: AsyncSession, left_id: int) -> List[int]:
        stmt = select(self.right_column).where(self.left_column == left_id).order_by(self.right_column)
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def list_right_ids_map(self, session: AsyncSession, left_ids: Iterable[int]) -> Dict[int, List[int]]:
        """批量查询：left_id → [right_id, ...]"""
        left_ids = list(left_ids)
        mapping: Dict[int, List[int]] = {left_id: [] for left_id in left_ids}
        if not left_ids:
            return mapping
        stmt = (
            select(self.left_column, self.right_column)
            .where(self.left_column.in_(left_ids))
            .order_by(self.left_column, self.right_column)
        )
        result = await session.execute(stmt)
        for left_id, right_id in result.all():
            mapping[left_id].append(right_id)
        return mapping

    async def count_by_right(self, session: AsyncSession, right_id: int) -> int:
        """被引用次数（删除保护使用）"""
        stmt = select(func.count()).select_from(self.table).where(self.right_column == right_id)
        result = await session.execute(stmt)
        return result.scalar_one()

    async def count_by_right_map(self, session: AsyncSession, right_ids: Iterable[int]) -> Dict[int, int]:
        """批量统计：right_id → 引用次数"""
        right_ids = list(right_ids)
        counts = {right_id: 0 for right_id in right_ids}
        if not right_ids:
            return counts
        stmt = (
            select(self.right_column, func.count())
            .where(self.right_column.in_(right_ids))
            .group_by(self.right_column)
        )
        result = await session.execute(stmt)
        for right_id, count in result.all():
            counts[right_id] = count
        return counts
