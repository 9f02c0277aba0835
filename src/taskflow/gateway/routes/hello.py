"""问候路由

GET {prefix}/hello: 基础问候
GET {prefix}/hello/personalized?name=: 个性化问候（空白名称退化为基础问候）
GET {prefix}/hello/info: 应用信息
GET {prefix}/hello/health: 应用状态
"""

from datetime import UTC, datetime

import structlog
from fastapi import APIRouter, Depends, Query

from ..config import GatewayConfig
from ..deps import get_gateway_config, get_hello_service
from ..services.hello_service import HelloService

log = structlog.get_logger()

router = APIRouter(prefix="/hello")


@router.get("")
async def say_hello(service: HelloService = Depends(get_hello_service)):
    return {
        "message": service.get_greeting(),
        "timestamp": datetime.now(UTC).isoformat(),
        "status": "success",
    }


@router.get("/personalized")
async def say_hello_personalized(
    name: str | None = Query(default=None, description="问候对象，缺省时使用配置的默认名称"),
    service: HelloService = Depends(get_hello_service),
    config: GatewayConfig = Depends(get_gateway_config),
):
    """个性化问候；未传 name 时使用 TASKFLOW_DEFAULT_GREETING_NAME"""
    effective_name = config.default_greeting_name if name is None else name
    message = service.get_personalized_greeting(effective_name)
    log.info("personalized_greeting", name=effective_name)
    return {
        "message": message,
        "name": effective_name,
        "timestamp": datetime.now(UTC).isoformat(),
        "status": "success",
    }


@router.get("/info")
async def application_info(service: HelloService = Depends(get_hello_service)):
    return {"info": service.get_application_info()}


@router.get("/health")
async def hello_health(service: HelloService = Depends(get_hello_service)):
    return service.health()
