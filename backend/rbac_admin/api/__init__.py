"""
API模块统一入口
backend/rbac_admin/api/__init__.py
"""
from fastapi import APIRouter

from rbac_admin.api.v1.endpoints import auth, depts, menus, permissions, roles, users

api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(depts.router)
api_router.include_router(roles.router)
api_router.include_router(menus.router)
api_router.include_router(permissions.router)
