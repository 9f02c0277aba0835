"""TraceMiddleware -- 资源级追踪

从路径中识别 /users/{id}、/projects/{id}、/tasks/{id}，
把资源类型与 id 绑定到 structlog context，贯穿该请求内的领域日志。
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

_RESOURCE_SEGMENTS = {"users": "user", "projects": "project", "tasks": "task"}


def extract_resource(path: str) -> tuple[str, int] | None:
    """返回路径中最后一个「集合/数字 id」对，如 ("task", 7)"""
    parts = [p for p in path.split("/") if p]
    found: tuple[str, int] | None = None
    for i, part in enumerate(parts[:-1]):
        kind = _RESOURCE_SEGMENTS.get(part)
        if kind and parts[i + 1].isdigit():
            found = (kind, int(parts[i + 1]))
    return found


class TraceMiddleware(BaseHTTPMiddleware):
    """资源级追踪中间件 -- 为实体操作绑定 resource / resource_id"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        resource = extract_resource(request.url.path)
        if resource:
            kind, resource_id = resource
            structlog.contextvars.bind_contextvars(
                resource=kind,
                resource_id=resource_id,
            )

        return await call_next(request)
