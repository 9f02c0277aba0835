"""业务服务测试 -- 聚合锁与并发变更串行化"""

import asyncio
from pathlib import Path

import pytest
import pytest_asyncio
from taskflow.core.exceptions import InvariantViolationError
from taskflow.core.models import ProjectStatus, TaskStatus, UserStatus
from taskflow.core.store import create_store_group
from taskflow.gateway.services.locks import AggregateLocks
from taskflow.gateway.services.project_service import ProjectService
from taskflow.gateway.services.task_service import TaskService
from taskflow.gateway.services.user_service import UserService


@pytest_asyncio.fixture
async def services(tmp_path: Path):
    store_group = await create_store_group(str(tmp_path / "svc.db"))
    locks = AggregateLocks()
    yield (
        UserService(store_group, locks),
        ProjectService(store_group, locks),
        TaskService(store_group, locks),
        locks,
    )
    await store_group.conn.close()


class TestAggregateLocks:
    """锁注册表"""

    async def test_same_key_same_lock(self):
        locks = AggregateLocks()
        first = await locks.get_lock("project", 1)
        assert await locks.get_lock("project", 1) is first
        assert await locks.get_lock("user", 1) is not first
        assert len(locks) == 2

    async def test_hold_serializes(self):
        locks = AggregateLocks()
        order: list[str] = []

        async def worker(name: str):
            async with locks.hold("project", 1):
                order.append(f"{name}-in")
                await asyncio.sleep(0.01)
                order.append(f"{name}-out")

        await asyncio.gather(worker("a"), worker("b"))
        assert order in (
            ["a-in", "a-out", "b-in", "b-out"],
            ["b-in", "b-out", "a-in", "a-out"],
        )


class TestServiceFlows:
    """服务层组合操作"""

    async def test_task_lifecycle_updates_project(self, services):
        users, projects, tasks, _ = services
        owner = await users.create_user("alice123", "alice@x.com", "secret1")
        project = await projects.create_project(owner.id, "Website", None)
        task = await tasks.create_task(project.id, "Write outline", None)

        await tasks.start_task(task.id)
        completed = await tasks.complete_task(task.id)
        assert completed.status == TaskStatus.COMPLETED

        done = await projects.complete_project(project.id)
        assert done.status == ProjectStatus.COMPLETED
        assert done.progress == 100.0

    async def test_concurrent_start_only_one_wins(self, services):
        users, projects, tasks, _ = services
        owner = await users.create_user("alice123", "alice@x.com", "secret1")
        project = await projects.create_project(owner.id, "Website", None)
        task = await tasks.create_task(project.id, "Write outline", None)

        results = await asyncio.gather(
            tasks.start_task(task.id),
            tasks.start_task(task.id),
            return_exceptions=True,
        )
        failures = [r for r in results if isinstance(r, Exception)]
        assert len(failures) == 1
        assert (await tasks.get_task(task.id)).status == TaskStatus.IN_PROGRESS

    async def test_deactivate_sees_persisted_projects(self, services):
        users, projects, _, _ = services
        owner = await users.create_user("alice123", "alice@x.com", "secret1")
        await projects.create_project(owner.id, "Website", None)

        with pytest.raises(InvariantViolationError):
            await users.deactivate_user(owner.id)
        assert (await users.get_user(owner.id)).status == UserStatus.ACTIVE

    async def test_failed_mutation_leaves_store_unchanged(self, services):
        users, projects, tasks, _ = services
        owner = await users.create_user("alice123", "alice@x.com", "secret1")
        project = await projects.create_project(owner.id, "Website", None)
        await tasks.create_task(project.id, "Write outline", None)

        with pytest.raises(InvariantViolationError):
            await projects.complete_project(project.id)
        reloaded = await projects.get_project(project.id)
        assert reloaded.status == ProjectStatus.ACTIVE
        assert reloaded.updated_at == project.updated_at
