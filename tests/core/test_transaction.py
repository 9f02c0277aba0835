"""事务一致性测试 -- 聚合整体提交或整体回滚"""

import pytest
from taskflow.core.models import Project, Task, User
from taskflow.core.store import (
    StoreGroup,
    atomic,
    persist_task_removal,
    save_project_aggregate,
    save_user,
)


class TestAggregateAtomicity:
    """save_project_aggregate 原子性"""

    async def test_commit_project_and_tasks(self, store_group: StoreGroup, alice: User):
        await save_user(store_group.conn, store_group.user_store, alice)
        project = Project.create("Website", None, alice)
        Task.create("First task", None, project)
        Task.create("Second task", None, project)

        await save_project_aggregate(
            store_group.conn, store_group.project_store, store_group.task_store, project
        )

        assert await store_group.task_store.count_tasks(project_id=project.id) == 2

    async def test_rollback_restores_identity(
        self, store_group: StoreGroup, alice: User, monkeypatch: pytest.MonkeyPatch
    ):
        await save_user(store_group.conn, store_group.user_store, alice)
        project = Project.create("Website", None, alice)
        first = Task.create("First task", None, project)
        second = Task.create("Second task", None, project)

        original_save = store_group.task_store.save_task
        calls = 0

        async def flaky_save(task):
            nonlocal calls
            calls += 1
            if calls == 2:
                raise RuntimeError("disk full")
            await original_save(task)

        monkeypatch.setattr(store_group.task_store, "save_task", flaky_save)

        with pytest.raises(RuntimeError, match="disk full"):
            await save_project_aggregate(
                store_group.conn, store_group.project_store, store_group.task_store, project
            )

        assert project.id is None
        assert first.id is None
        assert second.id is None
        assert await store_group.project_store.count_projects() == 0
        assert await store_group.task_store.count_tasks() == 0

    async def test_atomic_rollback_on_domain_failure(self, store_group: StoreGroup, alice: User):
        await save_user(store_group.conn, store_group.user_store, alice)
        before = alice.updated_at

        with pytest.raises(ValueError):
            async with atomic(store_group.conn, [alice]):
                alice.update_profile("Changed", None)
                await store_group.user_store.save_user(alice)
                raise ValueError("abort")

        assert alice.updated_at == before
        loaded = await store_group.user_store.get_user(alice.id)
        assert loaded.first_name == "Alice"


class TestTaskRemoval:
    """从项目移除任务后的持久化"""

    async def test_orphan_task_is_deleted(self, store_group: StoreGroup, alice: User):
        await save_user(store_group.conn, store_group.user_store, alice)
        project = Project.create("Website", None, alice)
        keep = Task.create("Keep me", None, project)
        drop = Task.create("Drop me", None, project)
        await save_project_aggregate(
            store_group.conn, store_group.project_store, store_group.task_store, project
        )

        project.remove_task(drop)
        assert drop.project is None
        await persist_task_removal(
            store_group.conn,
            store_group.project_store,
            store_group.task_store,
            project,
            drop.id,
        )

        loaded = await store_group.project_store.get_project(project.id)
        assert [t.id for t in loaded.tasks] == [keep.id]
        assert await store_group.task_store.get_task(drop.id) is None
