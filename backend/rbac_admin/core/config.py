# 项目核心配置文件，包含数据库、JWT、CORS、日志等全局配置，支持从.env文件加载环境变量
# backend/rbac_admin/core/config.py
#  - DATABASE_URL 可直接覆盖 POSTGRES_* 拼接出的连接串（测试环境使用 sqlite+aiosqlite）
#  - 默认密钥为 changethis 时，staging/production 环境直接拒绝启动

import secrets
import warnings
import os
from typing import Annotated, Any, Literal
from zoneinfo import ZoneInfo

from pydantic import (
    AnyUrl,
    BeforeValidator,
    Field,
    HttpUrl,
    computed_field,
    model_validator,
)
from pydantic_core import MultiHostUrl
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Self


def parse_cors(v: Any) -> list[str] | str:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",")]
    elif isinstance(v, list | str):
        return v
    raise ValueError(v)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=os.getenv("ENV_FILE_PATH", "../.env"),
        env_ignore_empty=True,
        extra="ignore",
    )
    PROJECT_NAME: str = "RBAC Admin"
    API_V1_STR: str = "/api/v1"
    SECRET_KEY: str = secrets.token_urlsafe(32)
    ALGORITHM: str = "HS256"
    # 密码加密
    BCRYPT_ROUNDS: int = 12
    # 30 minutes
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    FRONTEND_HOST: str = "http://localhost:3000"
    ENVIRONMENT: Literal["local", "test", "staging", "production"] = "local"

    # 日志落文件开关（True：控制台+文件输出；False：仅控制台输出）
    LOG_TO_FILE_FLAG: bool = Field(
        default=False,
        description="日志落文件开关，容器部署时通过.env开启"
    )
    LOG_FILE_PATH: str = Field(
        default="/app/logs/app.log",
        description="日志文件存储路径（容器内路径，需挂载到宿主机）"
    )

    BACKEND_CORS_ORIGINS: Annotated[
        list[AnyUrl] | str, BeforeValidator(parse_cors)
    ] = []

    @computed_field  # type: ignore[prop-decorator]
    @property
    def all_cors_origins(self) -> list[str]:
        return [str(origin).rstrip("/") for origin in self.BACKEND_CORS_ORIGINS] + [
            self.FRONTEND_HOST
        ]

    SENTRY_DSN: HttpUrl | None = None
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "rbac_admin"
    # 直接指定连接串（优先级高于 POSTGRES_*）
    DATABASE_URL: str | None = None

    # 数据库连接池配置
    DB_POOL_SIZE: int = Field(20, description="数据库连接池大小")
    DB_MAX_OVERFLOW: int = Field(100, description="最大溢出连接数")
    DB_POOL_RECYCLE: int = Field(3600, description="连接回收时间(秒)")
    DB_POOL_PRE_PING: bool = Field(True, description="连接有效性检查")

    DEFAULT_TIMEZONE: str = Field(
        "Asia/Shanghai",
        description="项目全局默认时区（如Asia/Shanghai、UTC等）"
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return str(MultiHostUrl.build(
            scheme="postgresql+psycopg",
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWORD,
            host=self.POSTGRES_SERVER,
            port=self.POSTGRES_PORT,
            path=self.POSTGRES_DB,
        ))

    # 初始管理员账号（scripts/init_data.py 使用）
    FIRST_SUPERUSER: str = "admin"
    FIRST_SUPERUSER_PASSWORD: str = "changethis"

    def _check_default_secret(self, var_name: str, value: str | None) -> None:
        if value == "changethis":
            message = (
                f'The value of {var_name} is "changethis", '
                "for security, please change it, at least for deployments."
            )
            if self.ENVIRONMENT in ("local", "test"):
                warnings.warn(message, stacklevel=1)
            else:
                raise ValueError(message)

    @model_validator(mode="after")
    def _enforce_non_default_secrets(self) -> Self:
        self._check_default_secret("SECRET_KEY", self.SECRET_KEY)
        self._check_default_secret("POSTGRES_PASSWORD", self.POSTGRES_PASSWORD)
        self._check_default_secret(
            "FIRST_SUPERUSER_PASSWORD", self.FIRST_SUPERUSER_PASSWORD
        )

        return self


# 全局settings对象
settings = Settings()  # type: ignore

# 导出全局时区对象
DEFAULT_TZ = ZoneInfo(settings.DEFAULT_TIMEZONE)
