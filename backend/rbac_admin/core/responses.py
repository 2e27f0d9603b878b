"""
核心响应格式配置文件
backend/rbac_admin/core/responses.py
"""
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """标准化错误响应模型：所有失败响应统一为 {"error": "..."}"""
    error: str
