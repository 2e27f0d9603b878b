"""
密码与令牌相关核心文件
backend/rbac_admin/core/security.py
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Union, Dict
from jose import jwt, JWTError
from passlib.context import CryptContext
from fastapi.security import OAuth2PasswordBearer

from rbac_admin.core.config import settings

# ------------------------------
# 密码加密上下文
# ------------------------------
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS
)

# ------------------------------
# OAuth2配置
# ------------------------------
reusable_oauth2 = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_STR}/auth/login",
    scheme_name="OAuth2PasswordBearer"
)


# ------------------------------
# 密码加密（截断到72字节）
# ------------------------------
def get_password_hash(password: str) -> str:
    """
    加密密码：
    1. 将字符串密码编码为UTF-8字节（处理中文/特殊字符）
    2. 截断到72字节（符合bcrypt限制）
    3. 哈希处理（bcrypt自带随机盐）
    """
    password_bytes = password.encode("utf-8")[:72]
    return pwd_context.hash(password_bytes)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """验证密码，明文按加密逻辑同样编码+截断；摘要格式非法时视为不匹配"""
    plain_password_bytes = plain_password.encode("utf-8")[:72]
    try:
        return pwd_context.verify(plain_password_bytes, hashed_password)
    except ValueError:
        return False


class CredentialVerifier:
    """
    凭证校验器：服务层只依赖 digest/verify 两个操作，不关心具体哈希算法
    """

    def digest(self, plaintext: str) -> str:
        return get_password_hash(plaintext)

    def verify(self, plaintext: str, digest: str) -> bool:
        return verify_password(plaintext, digest)

    def dummy_verify(self) -> None:
        """用户不存在时执行一次空校验，使两种失败路径耗时一致"""
        pwd_context.dummy_verify()


# ------------------------------
# Token生成/解析
# ------------------------------
def create_access_token(
    subject: Union[str, Any],
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    创建访问令牌（Access Token）
    通常过期时间较短（如30分钟）
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode = {"exp": expire, "sub": str(subject), "type": "access"}
    return jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )


def decode_jwt_token(token: str) -> Dict[str, Any]:
    """
    解析JWT令牌

    Raises:
        JWTError: 如果token无效或已过期
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])


def extract_token_subject(token: str) -> Optional[str]:
    """从访问令牌中提取subject（用户ID），非访问令牌返回None"""
    payload = decode_jwt_token(token)
    if payload.get("type") != "access":
        return None
    return payload.get("sub")


__all__ = [
    "pwd_context",
    "reusable_oauth2",
    "get_password_hash",
    "verify_password",
    "CredentialVerifier",
    "create_access_token",
    "decode_jwt_token",
    "extract_token_subject",
    "JWTError",
]
