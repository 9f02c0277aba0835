"""gateway 测试配置 -- FastAPI app + httpx AsyncClient"""

import os
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from taskflow.core.store import create_store_group

API = "/api/v1"

_ENV_KEYS = ["TASKFLOW_DB_PATH", "LOGFIRE_SEND_TO_LOGFIRE", "TASKFLOW_API_PREFIX"]


@pytest_asyncio.fixture
async def test_app(tmp_path: Path):
    """创建测试用 FastAPI app，手动初始化 app.state（绕过 lifespan）"""
    os.environ["TASKFLOW_DB_PATH"] = str(tmp_path / "sqlite" / "test.db")
    os.environ["LOGFIRE_SEND_TO_LOGFIRE"] = "false"
    os.environ.pop("TASKFLOW_API_PREFIX", None)

    from taskflow.gateway.config import load_gateway_config
    from taskflow.gateway.main import create_app
    from taskflow.gateway.services.locks import AggregateLocks

    app = create_app()

    store_group = await create_store_group(str(tmp_path / "sqlite" / "test.db"))
    app.state.store_group = store_group
    app.state.aggregate_locks = AggregateLocks()
    app.state.gateway_config = load_gateway_config()

    yield app

    await store_group.conn.close()
    for key in _ENV_KEYS:
        os.environ.pop(key, None)


@pytest_asyncio.fixture
async def client(test_app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
    ) as ac:
        yield ac


class ApiHelper:
    """常用请求的快捷封装，失败时直接断言"""

    def __init__(self, client: AsyncClient) -> None:
        self.client = client

    async def create_user(self, username: str = "alice123", **overrides) -> dict:
        body = {
            "username": username,
            "email": f"{username}@x.com",
            "password": "secret1",
            **overrides,
        }
        resp = await self.client.post(f"{API}/users", json=body)
        assert resp.status_code == 201, resp.text
        return resp.json()

    async def create_project(self, owner_id: int, name: str = "Website") -> dict:
        resp = await self.client.post(
            f"{API}/projects",
            json={"owner_id": owner_id, "name": name, "description": "site"},
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    async def create_task(self, project_id: int, title: str = "Write outline", **extra) -> dict:
        resp = await self.client.post(
            f"{API}/projects/{project_id}/tasks", json={"title": title, **extra}
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    async def post(self, path: str, **kwargs):
        return await self.client.post(f"{API}{path}", **kwargs)

    async def put(self, path: str, **kwargs):
        return await self.client.put(f"{API}{path}", **kwargs)

    async def get(self, path: str, **kwargs):
        return await self.client.get(f"{API}{path}", **kwargs)

    async def delete(self, path: str, **kwargs):
        return await self.client.delete(f"{API}{path}", **kwargs)


@pytest_asyncio.fixture
async def api(client: AsyncClient) -> ApiHelper:
    return ApiHelper(client)
