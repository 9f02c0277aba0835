"""core 测试配置 -- 领域对象工厂 + StoreGroup fixture"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from taskflow.core.models import Project, Task, User
from taskflow.core.store import StoreGroup, create_store_group


@pytest.fixture
def alice() -> User:
    return User.create("alice123", "alice@x.com", "secret1", "Alice", "Liddell")


@pytest.fixture
def project(alice: User) -> Project:
    return Project.create("Website", "Company site", alice)


@pytest.fixture
def task(project: Project) -> Task:
    return Task.create("Write outline", "first draft", project)


@pytest_asyncio.fixture
async def store_group(tmp_path: Path) -> AsyncGenerator[StoreGroup, None]:
    """已初始化的 StoreGroup（独立临时数据库）"""
    group = await create_store_group(str(tmp_path / "core_test.db"))
    yield group
    await group.conn.close()
