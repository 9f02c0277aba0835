"""依赖注入模块 -- 通过 FastAPI Depends 注入 Store、配置与业务服务

Store 实例与聚合锁通过 app.state 管理，在 lifespan 中初始化/清理。
"""

from fastapi import Depends, Request
from taskflow.core.store import StoreGroup

from .config import GatewayConfig
from .services.hello_service import HelloService
from .services.locks import AggregateLocks
from .services.project_service import ProjectService
from .services.task_service import TaskService
from .services.user_service import UserService


def get_store_group(request: Request) -> StoreGroup:
    """从 app.state 获取 StoreGroup 实例"""
    return request.app.state.store_group


def get_aggregate_locks(request: Request) -> AggregateLocks:
    """从 app.state 获取聚合锁注册表"""
    return request.app.state.aggregate_locks


def get_gateway_config(request: Request) -> GatewayConfig:
    """从 app.state 获取 GatewayConfig 实例"""
    return request.app.state.gateway_config


def get_user_service(
    store_group: StoreGroup = Depends(get_store_group),
    locks: AggregateLocks = Depends(get_aggregate_locks),
) -> UserService:
    return UserService(store_group, locks)


def get_project_service(
    store_group: StoreGroup = Depends(get_store_group),
    locks: AggregateLocks = Depends(get_aggregate_locks),
) -> ProjectService:
    return ProjectService(store_group, locks)


def get_task_service(
    store_group: StoreGroup = Depends(get_store_group),
    locks: AggregateLocks = Depends(get_aggregate_locks),
) -> TaskService:
    return TaskService(store_group, locks)


def get_hello_service() -> HelloService:
    return HelloService()
