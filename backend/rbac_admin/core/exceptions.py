"""
核心异常处理配置文件
backend/rbac_admin/core/exceptions.py

所有业务异常均继承 AppException，由 main.py 的异常处理器统一渲染为 {"error": detail}
"""

from fastapi import HTTPException, status


class AppException(HTTPException):
    """基础异常类"""
    def __init__(self, status_code: int, detail: str):
        super().__init__(status_code=status_code, detail=detail)


class BadRequest(AppException):
    """参数错误/业务错误（400）"""
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class InvalidInput(BadRequest):
    """必填字段缺失、引用的ID不存在等输入错误"""


class DuplicateKey(BadRequest):
    """唯一字段（编码/用户名）冲突"""


class InvalidHierarchy(BadRequest):
    """父节点非法：自身、后代或按钮类菜单"""


class HasChildren(BadRequest):
    """存在子节点，禁止删除"""


class HasMembers(BadRequest):
    """部门下存在用户，禁止删除"""


class InUse(BadRequest):
    """仍被关联引用，禁止删除"""


class ResourceNotFound(AppException):
    """资源不存在异常（404）"""
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class InvalidCredentials(AppException):
    """用户名或密码错误（401），两种情况使用同一提示"""
    def __init__(self, detail: str = "Invalid username or password"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class AccountDisabled(AppException):
    """账号已停用（403）"""
    def __init__(self, detail: str = "Account is disabled"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class PermissionDenied(AppException):
    """权限不足（403）"""
    def __init__(self, detail: str = "Not enough privileges"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class StoreFailure(AppException):
    """数据库读写失败（500）"""
    def __init__(self, detail: str = "Storage operation failed"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
