"""TaskService -- 任务创建、状态流转、指派与查询

任务属于项目聚合：所有任务变更都持有所属项目的锁，
在完整加载的项目聚合中定位任务，执行一次领域变更后单事务保存。
"""

from collections.abc import Callable
from datetime import datetime

import structlog
from taskflow.core.exceptions import EntityNotFoundError
from taskflow.core.models import Project, Task, TaskPriority, TaskStatus, User
from taskflow.core.store import StoreGroup, atomic, persist_task_removal

from .locks import AggregateLocks

log = structlog.get_logger()


class TaskService:
    """任务业务服务"""

    def __init__(self, store_group: StoreGroup, locks: AggregateLocks) -> None:
        self._stores = store_group
        self._locks = locks

    async def create_task(
        self,
        project_id: int,
        title: str | None,
        description: str | None,
        assigned_to_id: int | None = None,
        priority: TaskPriority = TaskPriority.MEDIUM,
        due_date: datetime | None = None,
    ) -> Task:
        """在项目中创建任务

        Raises:
            EntityNotFoundError: 项目或指派人不存在
            InvalidArgumentError: 标题 / 截止时间不合法
            InvariantViolationError: 项目不接受新任务
        """
        async with self._locks.hold("project", project_id):
            project = await self._load_project(project_id)
            assignee = await self._load_user(assigned_to_id) if assigned_to_id is not None else None
            task = Task.create(
                title,
                description,
                project,
                assignee,
                priority=priority,
                due_date=due_date,
            )
            await self._save(task)
        log.info(
            "task_created",
            task_id=task.id,
            project_id=project_id,
            priority=str(task.priority),
        )
        return task

    async def get_task(self, task_id: int) -> Task:
        task = await self._stores.task_store.get_task(task_id)
        if task is None:
            raise EntityNotFoundError("Task", task_id)
        return task

    async def list_tasks(
        self,
        project_id: int | None = None,
        assigned_to: int | None = None,
        status: TaskStatus | None = None,
        priority: TaskPriority | None = None,
    ) -> list[Task]:
        return await self._stores.task_store.list_tasks(project_id, assigned_to, status, priority)

    async def list_due(
        self,
        before: datetime | None = None,
        after: datetime | None = None,
    ) -> list[Task]:
        """按截止时间查询：同时给出两端时为闭区间，否则为严格单边"""
        store = self._stores.task_store
        if before is not None and after is not None:
            return await store.list_due_between(after, before)
        if before is not None:
            return await store.list_due_before(before)
        if after is not None:
            return await store.list_due_after(after)
        return []

    async def list_overdue(self) -> list[Task]:
        tasks = await self._stores.task_store.list_tasks()
        return [t for t in tasks if t.is_overdue()]

    async def search_tasks(
        self, title: str | None = None, description: str | None = None
    ) -> list[Task]:
        return await self._stores.task_store.search_tasks(title, description)

    async def update_task(
        self, task_id: int, title: str | None, description: str | None
    ) -> Task:
        return await self._mutate(
            task_id, lambda t: t.update_task(title, description), "task_updated"
        )

    async def start_task(self, task_id: int) -> Task:
        return await self._mutate(task_id, Task.start, "task_started")

    async def complete_task(self, task_id: int) -> Task:
        return await self._mutate(task_id, Task.complete, "task_completed")

    async def cancel_task(self, task_id: int) -> Task:
        return await self._mutate(task_id, Task.cancel, "task_cancelled")

    async def reopen_task(self, task_id: int) -> Task:
        return await self._mutate(task_id, Task.reopen, "task_reopened")

    async def assign_task(self, task_id: int, user_id: int) -> Task:
        user = await self._load_user(user_id)
        return await self._mutate(
            task_id, lambda t: t.assign_to(user), "task_assigned", user_id=user_id
        )

    async def unassign_task(self, task_id: int) -> Task:
        return await self._mutate(task_id, Task.unassign, "task_unassigned")

    async def change_priority(self, task_id: int, priority: TaskPriority) -> Task:
        return await self._mutate(
            task_id,
            lambda t: t.change_priority(priority),
            "task_priority_changed",
            priority=str(priority),
        )

    async def update_due_date(self, task_id: int, due_date: datetime | None) -> Task:
        return await self._mutate(
            task_id, lambda t: t.update_due_date(due_date), "task_due_date_changed"
        )

    async def remove_task(self, task_id: int) -> None:
        """从项目中移除任务；游离任务不落盘，记录随之删除"""
        project_id = await self._project_id_of(task_id)
        async with self._locks.hold("project", project_id):
            project = await self._load_project(project_id)
            task = self._find_in(project, task_id)
            project.remove_task(task)
            await persist_task_removal(
                self._stores.conn,
                self._stores.project_store,
                self._stores.task_store,
                project,
                task_id,
            )
        log.info("task_removed", task_id=task_id, project_id=project_id)

    async def _mutate(
        self,
        task_id: int,
        mutation: Callable[[Task], None],
        event: str,
        **context,
    ) -> Task:
        project_id = await self._project_id_of(task_id)
        async with self._locks.hold("project", project_id):
            project = await self._load_project(project_id)
            task = self._find_in(project, task_id)
            mutation(task)
            await self._save(task)
        log.info(event, task_id=task_id, project_id=project_id, status=str(task.status), **context)
        return task

    async def _save(self, task: Task) -> None:
        async with atomic(self._stores.conn, [task]):
            await self._stores.task_store.save_task(task)

    async def _project_id_of(self, task_id: int) -> int:
        project_id = await self._stores.task_store.get_project_id(task_id)
        if project_id is None:
            raise EntityNotFoundError("Task", task_id)
        return project_id

    async def _load_project(self, project_id: int) -> Project:
        project = await self._stores.project_store.get_project(project_id)
        if project is None:
            raise EntityNotFoundError("Project", project_id)
        return project

    async def _load_user(self, user_id: int) -> User:
        user = await self._stores.user_store.get_user(user_id)
        if user is None:
            raise EntityNotFoundError("User", user_id)
        return user

    @staticmethod
    def _find_in(project: Project, task_id: int) -> Task:
        for task in project.tasks:
            if task.id == task_id:
                return task
        raise EntityNotFoundError("Task", task_id)
