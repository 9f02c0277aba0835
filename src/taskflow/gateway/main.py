"""FastAPI 应用主文件

app 创建 + lifespan 管理：DB 初始化/关闭 + 配置加载 + 路由注册。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from taskflow.core.config import APP_NAME, APP_VERSION, get_api_prefix, get_db_path
from taskflow.core.store import create_store_group

from .config import load_gateway_config
from .errors import register_error_handlers
from .middleware.logging_config import setup_logfire, setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .middleware.trace_mw import TraceMiddleware
from .routes import health, hello, projects, tasks, users
from .services.locks import AggregateLocks

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时初始化 DB，关闭时清理连接"""
    db_path = get_db_path()
    app.state.store_group = await create_store_group(db_path)
    app.state.aggregate_locks = AggregateLocks()
    app.state.gateway_config = load_gateway_config()
    log.info(
        "gateway_started",
        db_path=db_path,
        profile=app.state.gateway_config.profile,
    )

    yield

    if getattr(app.state, "store_group", None):
        await app.state.store_group.conn.close()
    log.info("gateway_stopped")


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title=APP_NAME,
        version=APP_VERSION,
        description="TaskFlow 用户 / 项目 / 任务领域服务 API",
        lifespan=lifespan,
    )

    # 注册中间件（顺序：先 Trace 后 Logging）
    app.add_middleware(TraceMiddleware)
    app.add_middleware(LoggingMiddleware)

    setup_logging()
    setup_logfire()

    register_error_handlers(app)

    api_prefix = get_api_prefix()
    app.include_router(hello.router, prefix=api_prefix, tags=["hello"])
    app.include_router(users.router, prefix=api_prefix, tags=["users"])
    app.include_router(projects.router, prefix=api_prefix, tags=["projects"])
    app.include_router(tasks.router, prefix=api_prefix, tags=["tasks"])
    app.include_router(health.router)

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
