"""可观测性测试

1. HTTP 请求含 X-Request-ID 响应头
2. 资源路径提取
3. structlog 配置
"""

import logging

import pytest
import structlog
from httpx import AsyncClient
from taskflow.gateway.middleware.logging_config import setup_logfire, setup_logging
from taskflow.gateway.middleware.logging_mw import resolve_request_id
from taskflow.gateway.middleware.trace_mw import extract_resource


class TestRequestId:
    """LoggingMiddleware"""

    async def test_request_id_in_response_header(self, client: AsyncClient):
        resp = await client.get("/health")
        assert "x-request-id" in resp.headers
        # ULID 格式：26 字符
        assert len(resp.headers["x-request-id"]) == 26

    async def test_request_ids_are_unique(self, client: AsyncClient):
        ids = set()
        for _ in range(3):
            resp = await client.get("/api/v1/hello")
            ids.add(resp.headers["x-request-id"])
        assert len(ids) == 3

    async def test_error_responses_carry_request_id(self, client: AsyncClient):
        resp = await client.get("/api/v1/users/12345")
        assert resp.status_code == 404
        assert len(resp.headers["x-request-id"]) == 26

    async def test_inbound_ulid_is_echoed(self, client: AsyncClient):
        inbound = "01HZX3J8K9M2N4P6Q8R0S2T4V6"
        resp = await client.get("/health", headers={"X-Request-ID": inbound})
        assert resp.headers["x-request-id"] == inbound

    def test_malformed_inbound_id_is_replaced(self):
        rid = resolve_request_id("not-a-ulid")
        assert rid != "not-a-ulid"
        assert len(rid) == 26


class TestResourceExtraction:
    """TraceMiddleware 路径解析"""

    @pytest.mark.parametrize(
        "path,expected",
        [
            ("/api/v1/users/3", ("user", 3)),
            ("/api/v1/projects/12/complete", ("project", 12)),
            ("/api/v1/projects/12/tasks", ("project", 12)),
            ("/api/v1/tasks/7/assignee", ("task", 7)),
            ("/api/v1/tasks/search", None),
            ("/api/v1/users/by-username/alice", None),
            ("/health", None),
        ],
    )
    def test_extract_resource(self, path, expected):
        assert extract_resource(path) == expected


class TestLoggingSetup:
    """structlog 配置"""

    def test_json_mode(self, monkeypatch):
        monkeypatch.setenv("TASKFLOW_LOG_FORMAT", "json")
        monkeypatch.setenv("TASKFLOW_LOG_LEVEL", "warning")
        setup_logging()
        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)

    def test_unknown_level_falls_back_to_info(self, monkeypatch):
        monkeypatch.setenv("TASKFLOW_LOG_LEVEL", "chatty")
        setup_logging()
        assert logging.getLogger().level == logging.INFO

    def test_logfire_disabled_by_default(self, monkeypatch):
        monkeypatch.delenv("LOGFIRE_SEND_TO_LOGFIRE", raising=False)
        setup_logfire()

    def test_explicit_arguments_override_env(self, monkeypatch):
        monkeypatch.setenv("TASKFLOW_LOG_LEVEL", "debug")
        setup_logging(log_format="dev", log_level="error")
        assert logging.getLogger().level == logging.ERROR

    def test_access_log_is_quieted(self, monkeypatch):
        monkeypatch.setenv("TASKFLOW_LOG_LEVEL", "info")
        setup_logging()
        assert logging.getLogger("uvicorn.access").level == logging.WARNING
