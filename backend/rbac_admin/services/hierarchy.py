"""
层级结构管理（部门树、菜单树共用）
backend/rbac_admin/services/hierarchy.py

纯函数部分只依赖 id → parent_id 关系，数据本身可能存在悬空父节点或环，
所有遍历都带 visited 集合，保证在脏数据上也能终止
"""
import logging
from collections import deque
from typing import Any, Dict, Hashable, Iterable, List, Mapping, Optional, Set

from sqlmodel.ext.asyncio.session import AsyncSession

from rbac_admin.core.exceptions import HasChildren, HasMembers, InvalidHierarchy, InvalidInput
from rbac_admin.enums.sys_common import MenuType

logger = logging.getLogger(__name__)


# ==================== 纯函数 ====================
def _on_cycle(node_id: Hashable, nodes: Mapping[Hashable, Dict[str, Any]], parent_key: str) -> bool:
    """沿父链向上走，若回到自身则该节点在环上"""
    seen: Set[Hashable] = set()
    current = nodes[node_id].get(parent_key)
    while current is not None and current in nodes and current not in seen:
        if current == node_id:
            return True
        seen.add(current)
        current = nodes[current].get(parent_key)
    return False


def build_tree(
        items: Iterable[Mapping[str, Any]],
        id_key: str = "id",
        parent_key: str = "parent_id",
        sort_key: Optional[str] = "sort_order",
) -> List[Dict[str, Any]]:
    """
    把扁平列表组装为树，每个节点附加 children 列表

    - parent 为空、指向不存在的节点、指向自身，或节点处在环上：作为根节点
    - 同级节点按 (sort_key, id) 升序；数据中没有 sort_key 时保持原始顺序
    """
    nodes: Dict[Hashable, Dict[str, Any]] = {}
    for item in items:
        node = dict(item)
        node["children"] = []
        nodes.setdefault(node[id_key], node)

    roots: List[Dict[str, Any]] = []
    for node_id, node in nodes.items():
        parent_id = node.get(parent_key)
        if (
                parent_id is None
                or parent_id == node_id
                or parent_id not in nodes
                or _on_cycle(node_id, nodes, parent_key)
        ):
            roots.append(node)
        else:
            nodes[parent_id]["children"].append(node)

    if sort_key and any(sort_key in node for node in nodes.values()):
        def order(node: Dict[str, Any]):
            return (node.get(sort_key) or 0, node[id_key])

        roots.sort(key=order)
        for node in nodes.values():
            node["children"].sort(key=order)

    return roots


def _children_map(links: Mapping[Hashable, Optional[Hashable]]) -> Dict[Hashable, List[Hashable]]:
    children: Dict[Hashable, List[Hashable]] = {}
    for child_id, parent_id in links.items():
        if parent_id is not None:
            children.setdefault(parent_id, []).append(child_id)
    return children


def descendants_of(links: Mapping[Hashable, Optional[Hashable]], node_id: Hashable) -> Set[Hashable]:
    """node_id 的全部后代（不含自身）；links 为 id → parent_id"""
    children = _children_map(links)
    result: Set[Hashable] = set()
    queue = deque(children.get(node_id, []))
    while queue:
        current = queue.popleft()
        if current in result or current == node_id:
            continue
        result.add(current)
        queue.extend(children.get(current, []))
    return result


def ancestors_of(links: Mapping[Hashable, Optional[Hashable]], node_id: Hashable) -> List[Hashable]:
    """从直接父节点到根的祖先链（遇到环或悬空父节点即停止）"""
    result: List[Hashable] = []
    seen: Set[Hashable] = {node_id}
    current = links.get(node_id)
    while current is not None and current in links and current not in seen:
        result.append(current)
        seen.add(current)
        current = links.get(current)
    return result


def flatten_tree(tree: Iterable[Dict[str, Any]], level: int = 0) -> List[Dict[str, Any]]:
    """深度优先展开树，每行附加 level（根为0），不保留 children"""
    rows: List[Dict[str, Any]] = []
    for node in tree:
        row = {key: value for key, value in node.items() if key != "children"}
        row["level"] = level
        rows.append(row)
        rows.extend(flatten_tree(node.get("children") or [], level + 1))
    return rows


# ==================== 层级校验 ====================
class HierarchyManager:
    """
    通用父子关系校验，repository 需提供 get_by_id / list_parent_links / has_children
    """

    def __init__(self, repository, entity_name: str = "Node"):
        self.repository = repository
        self.entity_name = entity_name

    async def validate_parent(
            self,
            session: AsyncSession,
            parent_id: Optional[int],
            node_id: Optional[int] = None
    ):
        """
        校验 parent_id 能否作为 node_id 的父节点（新建时 node_id 为 None）
        返回父节点实体；parent_id 为空时返回 None
        """
        if parent_id is None:
            return None
        if node_id is not None and parent_id == node_id:
            raise InvalidHierarchy(f"{self.entity_name} cannot be its own parent")

        parent = await self.repository.get_by_id(session, parent_id)
        if parent is None:
            raise InvalidInput(f"Parent {self.entity_name.lower()} {parent_id} does not exist")
        self.check_parent_candidate(parent)

        if node_id is not None:
            links = await self.repository.list_parent_links(session)
            if parent_id in descendants_of(links, node_id):
                logger.warning(f"拒绝循环引用 | {self.entity_name} {node_id} → 父节点 {parent_id}")
                raise InvalidHierarchy(
                    f"{self.entity_name} cannot be moved under one of its descendants"
                )
        return parent

    def check_parent_candidate(self, parent) -> None:
        """子类扩展：限制哪些节点可以作为父节点"""

    async def ensure_deletable(self, session: AsyncSession, node_id: int) -> None:
        if await self.repository.has_children(session, node_id):
            raise HasChildren(f"{self.entity_name} has child nodes and cannot be deleted")


class DeptHierarchyManager(HierarchyManager):
    """部门：额外要求部门下没有用户才能删除"""

    def __init__(self, repository):
        super().__init__(repository, entity_name="Department")

    async def ensure_deletable(self, session: AsyncSession, node_id: int) -> None:
        await super().ensure_deletable(session, node_id)
        if await self.repository.count_members(session, node_id) > 0:
            raise HasMembers("Department has users and cannot be deleted")


class MenuHierarchyManager(HierarchyManager):
    """菜单：按钮不能作为父节点，有子节点的菜单不能改为按钮"""

    def __init__(self, repository):
        super().__init__(repository, entity_name="Menu")

    def check_parent_candidate(self, parent) -> None:
        if parent.type == MenuType.BUTTON.value:
            raise InvalidHierarchy("A button cannot be used as a parent menu")

    async def ensure_type_allowed(self, session: AsyncSession, node_id: int, menu_type: str) -> None:
        if menu_type == MenuType.BUTTON.value and await self.repository.has_children(session, node_id):
            raise InvalidHierarchy("A menu with children cannot become a button")
