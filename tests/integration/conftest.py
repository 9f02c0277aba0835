"""集成测试 fixture -- 完整 app，客户端 base_url 已带 API 前缀"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from taskflow.core.store import create_store_group
from taskflow.gateway.config import load_gateway_config
from taskflow.gateway.main import create_app
from taskflow.gateway.services.locks import AggregateLocks


@pytest_asyncio.fixture
async def integration_app(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    db_path = tmp_path / "integration.db"
    monkeypatch.setenv("TASKFLOW_DB_PATH", str(db_path))
    monkeypatch.setenv("LOGFIRE_SEND_TO_LOGFIRE", "false")
    monkeypatch.delenv("TASKFLOW_API_PREFIX", raising=False)

    app = create_app()
    app.state.store_group = await create_store_group(str(db_path))
    app.state.aggregate_locks = AggregateLocks()
    app.state.gateway_config = load_gateway_config()
    yield app
    await app.state.store_group.conn.close()


@pytest_asyncio.fixture
async def client(integration_app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=integration_app)
    async with AsyncClient(transport=transport, base_url="http://test/api/v1/") as ac:
        yield ac
