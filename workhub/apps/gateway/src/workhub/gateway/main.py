"""FastAPI 应用主文件

app 创建 + lifespan 管理：DB 初始化/关闭 + 目录服务加载 + 路由注册。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from workhub.core.config import get_db_path, get_directory_path
from workhub.core.directory import StaticDirectory
from workhub.core.store import create_store_group

from .errors import register_error_handlers
from .middleware.logging_config import setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .middleware.trace_mw import TraceMiddleware
from .routes import departments, health, status, tasks

log = structlog.get_logger()


def load_directory() -> StaticDirectory:
    """按 WORKHUB_DIRECTORY_PATH 加载目录数据，未配置时为空目录"""
    path = get_directory_path()
    if path is None:
        log.warning("directory_not_configured")
        return StaticDirectory()
    return StaticDirectory.from_json_file(path)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时初始化 DB 和目录服务，关闭时清理连接"""
    db_path = get_db_path()
    store_group = await create_store_group(db_path)
    app.state.store_group = store_group
    app.state.directory = load_directory()
    log.info("gateway_started", db_path=db_path)

    yield

    # 关闭：清理数据库连接
    if hasattr(app.state, "store_group") and app.state.store_group:
        await app.state.store_group.conn.close()


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="WorkHub Gateway",
        version="0.1.0",
        description="WorkHub 任务生命周期引擎 API",
        lifespan=lifespan,
    )

    # 注册中间件（顺序：先 Trace 后 Logging，Logging 在最外层）
    app.add_middleware(TraceMiddleware)
    app.add_middleware(LoggingMiddleware)

    setup_logging()
    register_error_handlers(app)

    app.include_router(tasks.router, tags=["tasks"])
    app.include_router(status.router, tags=["tasks"])
    app.include_router(departments.router, tags=["departments"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
