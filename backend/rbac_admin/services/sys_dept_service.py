"""
部门服务层
backend/rbac_admin/services/sys_dept_service.py
"""
import logging
from typing import List, Dict, Optional

from rbac_admin.core.exceptions import DuplicateKey, ResourceNotFound
from rbac_admin.core.query_builder import create_dept_query_builder
from rbac_admin.enums.sys_common import CommonStatus
from rbac_admin.models import SysDept
from rbac_admin.repositories.sys_dept_repository import DeptRepository
from rbac_admin.schemas.responses import PageResult, Message
from rbac_admin.schemas.sys_dept import DeptCreate, DeptUpdate, DeptOut, DeptTreeNode, DeptOption
from rbac_admin.services.hierarchy import DeptHierarchyManager, build_tree
from rbac_admin.services.validators import require_fields, strip_strings, drop_nulls, normalize_page

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "code")


class DeptService:
    """
    部门服务
    """

    def __init__(self, dept_repository: DeptRepository, dept_hierarchy: DeptHierarchyManager):
        self.dept_repository = dept_repository
        self.dept_hierarchy = dept_hierarchy

    # ==================== 查询 ====================
    async def list_depts(
            self,
            keyword: Optional[str] = None,
            status: Optional[str] = None,
            page: int = 1,
            page_size: int = 10
    ) -> PageResult[DeptOut]:
        """分页查询部门（关键词匹配名称/编码）"""
        page, page_size = normalize_page(page, page_size)
        builder = create_dept_query_builder().filter(keyword=keyword, status__eq=status)

        async with self.dept_repository.transaction() as session:
            depts, total = await self.dept_repository.list_page(session, builder, page, page_size)
            parent_names = await self.dept_repository.get_name_map(session, [d.parent_id for d in depts])
            member_counts = await self.dept_repository.count_members_map(session, [d.id for d in depts])

        data = [self._to_out(dept, parent_names, member_counts) for dept in depts]
        return PageResult.build(data, total, page, page_size)

    async def get_dept_tree(self) -> List[DeptTreeNode]:
        """完整部门树（含停用部门）"""
        async with self.dept_repository.transaction() as session:
            depts = await self.dept_repository.list_all(session)
            names = {dept.id: dept.name for dept in depts}
            member_counts = await self.dept_repository.count_members_map(session, names.keys())

        rows = [self._to_out(dept, names, member_counts).model_dump() for dept in depts]
        return [DeptTreeNode.model_validate(node) for node in build_tree(rows)]

    async def get_dept_options(self) -> List[DeptOption]:
        """
        获取部门下拉选项（树形结构，仅启用部门）

        返回格式：
        [
            {"value": 部门ID, "label": "部门名称", "tag": "部门编码", "children": [...]}
        ]
        """
        async with self.dept_repository.transaction() as session:
            depts = await self.dept_repository.list_enabled(session)

        rows = [
            {"id": d.id, "parent_id": d.parent_id, "sort_order": d.sort_order, "name": d.name, "code": d.code}
            for d in depts
        ]

        def to_option(node: Dict) -> DeptOption:
            children = [to_option(child) for child in node["children"]]
            return DeptOption(value=node["id"], label=node["name"], tag=node["code"], children=children or None)

        return [to_option(node) for node in build_tree(rows)]

    async def get_dept_by_id(self, dept_id: int) -> DeptOut:
        """根据ID获取部门"""
        async with self.dept_repository.transaction() as session:
            dept = await self._get_or_404(session, dept_id)
            parent_names = await self.dept_repository.get_name_map(session, [dept.parent_id])
            member_counts = await self.dept_repository.count_members_map(session, [dept.id])
        return self._to_out(dept, parent_names, member_counts)

    # ==================== 写操作 ====================
    async def create_dept(self, dept_in: DeptCreate) -> DeptOut:
        """创建部门"""
        data = strip_strings(dept_in.model_dump(), REQUIRED_FIELDS)
        require_fields(data, REQUIRED_FIELDS)
        data["sort_order"] = data.get("sort_order") or 0
        data["status"] = data.get("status") or CommonStatus.ACTIVE.value

        async with self.dept_repository.transaction() as session:
            if await self.dept_repository.get_by_code(session, data["code"]):
                raise DuplicateKey(f"Department code '{data['code']}' already exists")
            await self.dept_hierarchy.validate_parent(session, data.get("parent_id"))
            dept = await self.dept_repository.create(session, data)
            parent_names = await self.dept_repository.get_name_map(session, [dept.parent_id])

        logger.info(f"部门创建成功 | ID：{dept.id} | 编码：{dept.code}")
        return self._to_out(dept, parent_names, {})

    async def update_dept(self, dept_id: int, dept_update: DeptUpdate) -> DeptOut:
        """更新部门（仅更新请求中出现的字段）"""
        data = dept_update.model_dump(exclude_unset=True)
        strip_strings(data, REQUIRED_FIELDS)
        require_fields(data, REQUIRED_FIELDS, partial=True)
        drop_nulls(data, ("sort_order", "status"))

        async with self.dept_repository.transaction() as session:
            dept = await self._get_or_404(session, dept_id)

            if "code" in data and data["code"] != dept.code:
                existing = await self.dept_repository.get_by_code(session, data["code"])
                if existing and existing.id != dept_id:
                    raise DuplicateKey(f"Department code '{data['code']}' already exists")

            if "parent_id" in data:
                await self.dept_hierarchy.validate_parent(session, data["parent_id"], node_id=dept_id)

            dept = await self.dept_repository.update(session, dept, data)
            parent_names = await self.dept_repository.get_name_map(session, [dept.parent_id])
            member_counts = await self.dept_repository.count_members_map(session, [dept.id])

        logger.info(f"部门更新成功 | ID：{dept_id} | 字段：{sorted(data)}")
        return self._to_out(dept, parent_names, member_counts)

    async def delete_dept(self, dept_id: int) -> Message:
        """删除部门：存在子部门或用户时拒绝"""
        async with self.dept_repository.transaction() as session:
            dept = await self._get_or_404(session, dept_id)
            await self.dept_hierarchy.ensure_deletable(session, dept_id)
            await self.dept_repository.delete(session, dept)

        logger.info(f"部门删除成功 | ID：{dept_id} | 名称：{dept.name}")
        return Message(message="Department deleted successfully")

    # ==================== 辅助方法 ====================
    async def _get_or_404(self, session, dept_id: int) -> SysDept:
        dept = await self.dept_repository.get_by_id(session, dept_id)
        if not dept:
            raise ResourceNotFound(f"Department {dept_id} not found")
        return dept

    @staticmethod
    def _to_out(
            dept: SysDept,
            parent_names: Optional[Dict[int, str]] = None,
            member_counts: Optional[Dict[int, int]] = None
    ) -> DeptOut:
        out = DeptOut.model_validate(dept)
        out.parent_name = (parent_names or {}).get(dept.parent_id)
        out.user_count = (member_counts or {}).get(dept.id, 0)
        return out
