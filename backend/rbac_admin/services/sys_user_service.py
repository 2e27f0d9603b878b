"""
用户服务层
backend/rbac_admin/services/sys_user_service.py
"""
import logging
from typing import Dict, List, Optional

from rbac_admin.core.exceptions import DuplicateKey, InvalidInput, ResourceNotFound
from rbac_admin.core.query_builder import create_user_query_builder
from rbac_admin.core.security import CredentialVerifier
from rbac_admin.enums.sys_common import CommonStatus
from rbac_admin.models import SysUser
from rbac_admin.repositories.association_synchronizer import AssociationSynchronizer
from rbac_admin.repositories.sys_dept_repository import DeptRepository
from rbac_admin.repositories.sys_role_repository import RoleRepository
from rbac_admin.repositories.sys_user_repository import UserRepository
from rbac_admin.schemas.responses import PageResult, Message
from rbac_admin.schemas.sys_role import RoleBrief
from rbac_admin.schemas.sys_user import UserCreate, UserUpdate, UserOut
from rbac_admin.services.validators import is_blank, require_fields, strip_strings, drop_nulls, normalize_page

logger = logging.getLogger(__name__)


class UserService:
    """用户Service层：仅管业务逻辑"""

    def __init__(
            self,
            user_repository: UserRepository,
            dept_repository: DeptRepository,
            role_repository: RoleRepository,
            user_role_sync: AssociationSynchronizer,
            credential_verifier: CredentialVerifier):
        self.user_repository = user_repository
        self.dept_repository = dept_repository
        self.role_repository = role_repository
        self.user_role_sync = user_role_sync
        self.credential_verifier = credential_verifier

    # ------------------------------
    # 查询
    # ------------------------------
    async def list_users(
            self,
            keyword: Optional[str] = None,
            department_id: Optional[int] = None,
            status: Optional[str] = None,
            page: int = 1,
            page_size: int = 10
    ) -> PageResult[UserOut]:
        """分页查询用户（关键词匹配用户名/姓名/邮箱）"""
        page, page_size = normalize_page(page, page_size)
        builder = create_user_query_builder().filter(
            keyword=keyword,
            department_id__eq=department_id,
            status__eq=status,
        )
        async with self.user_repository.transaction() as session:
            users, total = await self.user_repository.list_page(session, builder, page, page_size)
            data = await self._to_out_list(session, users)
        return PageResult.build(data, total, page, page_size)

    async def get_user_by_id(self, user_id: int) -> UserOut:
        async with self.user_repository.transaction() as session:
            user = await self._get_or_404(session, user_id)
            return (await self._to_out_list(session, [user]))[0]

    # ------------------------------
    # 写操作
    # ------------------------------
    async def create_user(self, user_in: UserCreate) -> UserOut:
        """创建用户：用户名唯一、部门与角色必须存在，密码只保存摘要"""
        data = strip_strings(user_in.model_dump(), ("username", "real_name"))
        require_fields(data, ("username", "password", "real_name"))
        role_ids = data.pop("role_ids", None)
        data["password"] = self.credential_verifier.digest(data["password"])
        data["status"] = data.get("status") or CommonStatus.ACTIVE.value

        async with self.user_repository.transaction() as session:
            if await self.user_repository.get_by_username(session, data["username"]):
                raise DuplicateKey(f"Username '{data['username']}' already exists")
            await self._ensure_department(session, data.get("department_id"))
            role_ids = await self._validate_role_ids(session, role_ids)

            user = await self.user_repository.create(session, data)
            await self.user_role_sync.sync(session, user.id, role_ids)
            out = (await self._to_out_list(session, [user]))[0]

        logger.info(f"用户创建成功 | ID：{user.id} | 用户名：{user.username} | 角色：{role_ids}")
        return out

    async def update_user(self, user_id: int, user_update: UserUpdate) -> UserOut:
        """更新用户：密码为空时保持不变；role_ids 不传则不修改角色"""
        data = user_update.model_dump(exclude_unset=True)
        strip_strings(data, ("username", "real_name"))
        require_fields(data, ("username", "real_name"), partial=True)
        drop_nulls(data, ("username", "real_name", "status"))
        role_ids = data.pop("role_ids", None)

        password = data.pop("password", None)
        if not is_blank(password):
            data["password"] = self.credential_verifier.digest(password)

        async with self.user_repository.transaction() as session:
            user = await self._get_or_404(session, user_id)

            if "username" in data and data["username"] != user.username:
                existing = await self.user_repository.get_by_username(session, data["username"])
                if existing and existing.id != user_id:
                    raise DuplicateKey(f"Username '{data['username']}' already exists")
            if "department_id" in data:
                await self._ensure_department(session, data["department_id"])
            role_ids = await self._validate_role_ids(session, role_ids)

            user = await self.user_repository.update(session, user, data)
            await self.user_role_sync.sync(session, user_id, role_ids)
            out = (await self._to_out_list(session, [user]))[0]

        logger.info(f"用户更新成功 | ID：{user_id} | 字段：{sorted(k for k in data if k != 'password')}")
        return out

    async def delete_user(self, user_id: int) -> Message:
        """删除用户，同时移除其角色关联"""
        async with self.user_repository.transaction() as session:
            user = await self._get_or_404(session, user_id)
            await self.user_role_sync.clear_left(session, user_id)
            await self.user_repository.delete(session, user)

        logger.info(f"用户删除成功 | ID：{user_id} | 用户名：{user.username}")
        return Message(message="User deleted successfully")

    # ------------------------------
    # 辅助方法
    # ------------------------------
    async def _get_or_404(self, session, user_id: int) -> SysUser:
        user = await self.user_repository.get_by_id(session, user_id)
        if not user:
            raise ResourceNotFound(f"User {user_id} not found")
        return user

    async def _ensure_department(self, session, department_id: Optional[int]) -> None:
        if department_id is None:
            return
        if not await self.dept_repository.get_by_id(session, department_id):
            raise InvalidInput(f"Department {department_id} does not exist")

    async def _validate_role_ids(self, session, role_ids) -> Optional[List[int]]:
        """None 原样返回；否则去重并校验全部存在"""
        if role_ids is None:
            return None
        role_ids = self.user_role_sync.normalize_ids(role_ids)
        existing = await self.role_repository.get_existing_ids(session, role_ids)
        invalid_ids = [role_id for role_id in role_ids if role_id not in existing]
        if invalid_ids:
            raise InvalidInput(f"Invalid role IDs: {', '.join(map(str, invalid_ids))}")
        return role_ids

    async def _to_out_list(self, session, users: List[SysUser]) -> List[UserOut]:
        """补充部门名称与角色列表"""
        dept_names = await self.dept_repository.get_name_map(session, [u.department_id for u in users])
        role_id_map = await self.user_role_sync.list_right_ids_map(session, [u.id for u in users])
        all_role_ids = {role_id for ids in role_id_map.values() for role_id in ids}
        roles: Dict[int, RoleBrief] = {
            role.id: RoleBrief.model_validate(role)
            for role in await self.role_repository.get_by_ids(session, all_role_ids)
        }

        result = []
        for user in users:
            out = UserOut.model_validate(user)
            out.department_name = dept_names.get(user.department_id)
            out.roles = [roles[role_id] for role_id in role_id_map.get(user.id, []) if role_id in roles]
            result.append(out)
        return result
