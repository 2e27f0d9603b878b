"""
项目主入口文件
backend/rbac_admin/main.py
- 全局日志：控制台输出，LOG_TO_FILE_FLAG 开启时按级别追加写入 LOG_FILE_PATH 同目录下的日志文件
- 每个请求注入 request_id（响应头 X-Request-ID），日志统一携带
- 所有失败响应统一为 {"error": "..."}，请求体校验失败返回 400
"""
import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware

from rbac_admin.api import api_router
from rbac_admin.core.config import settings, DEFAULT_TZ
from rbac_admin.core.exceptions import AppException
from rbac_admin.core.responses import ErrorResponse
from rbac_admin.di.container import Container
from rbac_admin.utils.permission_checker import request_id_ctx


class RequestIDFilter(logging.Filter):
    """注入request_id，无请求上下文时显示unknown"""

    def filter(self, record):
        record.request_id = request_id_ctx.get() or "unknown"
        return True


def init_global_logger() -> logging.Logger:
    """
    初始化全局日志（根logger，所有子模块logger继承）
    - local：DEBUG，其余环境：INFO
    - LOG_TO_FILE_FLAG=True 时额外按级别写入 app-<日期>.<级别>.log
    - 日志时间使用全局时区 DEFAULT_TZ
    """
    logger = logging.getLogger()
    # 避免重复初始化
    if any(isinstance(f, RequestIDFilter) for h in logger.handlers for f in h.filters):
        return logger

    log_level = logging.DEBUG if settings.ENVIRONMENT == "local" else logging.INFO
    formatter = logging.Formatter(
        "%(asctime)s | %(request_id)s | %(name)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S %z"
    )
    formatter.converter = lambda *args: datetime.now(DEFAULT_TZ).timetuple()

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    stream_handler.setLevel(log_level)
    stream_handler.addFilter(RequestIDFilter())
    logger.addHandler(stream_handler)

    if settings.LOG_TO_FILE_FLAG:
        log_base_dir = Path(settings.LOG_FILE_PATH).parent
        log_base_dir.mkdir(parents=True, exist_ok=True)
        current_date = datetime.now(DEFAULT_TZ).strftime("%Y-%m-%d")
        for level in (logging.INFO, logging.WARNING, logging.ERROR):
            level_name = logging.getLevelName(level).lower()
            file_handler = logging.FileHandler(
                filename=str(log_base_dir / f"app-{current_date}.{level_name}.log"),
                mode="a",
                encoding="utf-8"
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            file_handler.addFilter(RequestIDFilter())
            logger.addHandler(file_handler)

    logger.setLevel(log_level)

    # 第三方库日志统一走根处理器
    for logger_name in ("passlib", "uvicorn", "uvicorn.access", "uvicorn.error"):
        third_logger = logging.getLogger(logger_name)
        third_logger.handlers.clear()
        third_logger.propagate = True
    # SQLAlchemy日志仅保留ERROR
    logging.getLogger("sqlalchemy.engine").setLevel(logging.ERROR)
    # passlib 读取新版 bcrypt 版本号时的告警
    logging.getLogger("passlib.handlers.bcrypt").setLevel(logging.ERROR)

    return logger


logger = init_global_logger()


def custom_generate_unique_id(route: APIRoute) -> str:
    """路由ID：<tag>-<函数名>，无tag时 untagged-<函数名>"""
    if not route.tags:
        return f"untagged-{route.name}"
    return f"{route.tags[0]}-{route.name}"


# Sentry初始化（仅部署环境）
if settings.SENTRY_DSN and settings.ENVIRONMENT not in ("local", "test"):
    sentry_sdk.init(
        dsn=str(settings.SENTRY_DSN),
        enable_tracing=True,
        environment=settings.ENVIRONMENT
    )


def _error(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(f"应用异常 | 路径：{request.url.path} | 状态码：{exc.status_code} | 详情：{exc.detail}")
        return _error(exc.status_code, str(exc.detail), getattr(exc, "headers", None))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # 未登录（OAuth2缺少令牌）、路由不存在等框架层异常
        logger.warning(f"HTTP异常 | 路径：{request.url.path} | 状态码：{exc.status_code} | 详情：{exc.detail}")
        return _error(exc.status_code, str(exc.detail), getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """请求参数类型/格式错误统一按 400 返回，首个错误作为提示"""
        errors = exc.errors()
        logger.warning(f"请求参数校验失败 | 路径：{request.url.path} | 错误详情：{errors}")
        if errors:
            first = errors[0]
            field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            message = f"Invalid input: {field} {first.get('msg', '')}".strip()
        else:
            message = "Invalid input"
        return _error(400, message)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"未处理异常 | 路径：{request.url.path} | 详情：{exc}", exc_info=exc)
        return _error(500, "Internal server error")


def create_app(container: Optional[Container] = None) -> FastAPI:
    """
    创建FastAPI应用
    :param container: 测试时可传入已覆盖会话工厂的容器
    """
    container = container or Container()
    container.wire()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        generate_unique_id_function=custom_generate_unique_id,
    )

    @app.middleware("http")
    async def add_request_id_middleware(request: Request, call_next):
        """生成request_id写入上下文，并在响应头返回 X-Request-ID"""
        request_id = str(uuid.uuid4())
        token = request_id_ctx.set(request_id)
        try:
            logger.debug(f"开始处理请求 | 路径：{request.url.path} | 方法：{request.method}")
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            logger.debug(f"请求处理完成 | 状态码：{response.status_code}")
            return response
        finally:
            request_id_ctx.reset(token)

    if settings.all_cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.all_cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=["X-Request-ID"],
        )

    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.API_V1_STR)
    app.state.container = container

    logger.info(
        f"{settings.PROJECT_NAME} 应用初始化完成 | 环境：{settings.ENVIRONMENT} | "
        f"API前缀：{settings.API_V1_STR} | 时区：{settings.DEFAULT_TIMEZONE} | 日志落文件：{settings.LOG_TO_FILE_FLAG}"
    )
    return app


app = create_app()
