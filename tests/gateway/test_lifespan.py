"""FastAPI lifespan 测试

1. 启动时初始化 StoreGroup / 锁 / 配置
2. 关闭时清理连接
"""

from pathlib import Path

from taskflow.gateway.main import create_app


class TestLifespan:
    """lifespan 上下文"""

    async def test_startup_and_shutdown(self, tmp_path: Path, monkeypatch):
        db_path = tmp_path / "life" / "taskflow.db"
        monkeypatch.setenv("TASKFLOW_DB_PATH", str(db_path))
        monkeypatch.setenv("TASKFLOW_PROFILE", "prod")

        app = create_app()
        async with app.router.lifespan_context(app):
            assert db_path.exists()
            assert app.state.gateway_config.profile == "prod"
            assert len(app.state.aggregate_locks) == 0
            cursor = await app.state.store_group.conn.execute("SELECT COUNT(*) FROM users")
            assert (await cursor.fetchone())[0] == 0

    async def test_custom_api_prefix(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("TASKFLOW_API_PREFIX", "/v2")
        app = create_app()
        paths = {route.path for route in app.routes}
        assert "/v2/hello" in paths
        assert "/v2/users" in paths
        assert "/health" in paths
