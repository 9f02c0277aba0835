"""全局 pytest 配置 -- 已建表的临时 SQLite 连接"""

from collections.abc import AsyncGenerator
from pathlib import Path

import aiosqlite
import pytest_asyncio
from taskflow.core.store.sqlite_init import init_db


@pytest_asyncio.fixture
async def db_conn(tmp_path: Path) -> AsyncGenerator[aiosqlite.Connection, None]:
    """与 create_store_group 相同的连接设置：Row 工厂 + 初始化 schema"""
    conn = await aiosqlite.connect(str(tmp_path / "schema.db"))
    conn.row_factory = aiosqlite.Row
    await init_db(conn)
    yield conn
    await conn.close()
