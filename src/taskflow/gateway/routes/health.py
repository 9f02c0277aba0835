"""健康检查路由（不带 API 前缀）

GET /health: 存活检查，进程在即返回 200。
GET /ready: 就绪检查，SQLite 可达、WAL 已启用且三张业务表齐全才返回 200，否则 503。
"""

import structlog
from fastapi import APIRouter, Request
from starlette.responses import JSONResponse
from taskflow.core.config import APP_VERSION
from taskflow.core.store import missing_tables, verify_wal_mode

log = structlog.get_logger()

router = APIRouter(tags=["health"])


@router.get("/health")
async def health():
    return {"status": "ok", "version": APP_VERSION}


@router.get("/ready")
async def ready(request: Request):
    checks: dict[str, str] = {}
    try:
        conn = request.app.state.store_group.conn
        missing = await missing_tables(conn)
        wal_enabled = await verify_wal_mode(conn)
    except Exception as e:
        log.warning("readiness_check_failed", check="sqlite", error=str(e))
        checks["sqlite"] = "unavailable"
        checks["schema"] = "unknown"
        checks["wal"] = "unknown"
    else:
        checks["sqlite"] = "ok"
        checks["schema"] = "ok" if not missing else "missing: " + ", ".join(missing)
        checks["wal"] = "ok" if wal_enabled else "disabled"

    is_ready = all(value == "ok" for value in checks.values())
    config = getattr(request.app.state, "gateway_config", None)
    return JSONResponse(
        status_code=200 if is_ready else 503,
        content={
            "status": "ready" if is_ready else "not_ready",
            "profile": config.profile if config else "dev",
            "checks": checks,
        },
    )
