"""ProjectService -- 项目创建、生命周期与统计

项目与其任务构成一个聚合；状态变更前总是加载完整聚合，
使「无未完成任务」检查读取到一致的任务集合。
"""

import structlog
from taskflow.core.exceptions import EntityNotFoundError
from taskflow.core.models import Project, ProjectStatus
from taskflow.core.store import StoreGroup, atomic, save_project_aggregate

from .locks import AggregateLocks

log = structlog.get_logger()


class ProjectService:
    """项目业务服务"""

    def __init__(self, store_group: StoreGroup, locks: AggregateLocks) -> None:
        self._stores = store_group
        self._locks = locks

    async def create_project(
        self, owner_id: int, name: str | None, description: str | None
    ) -> Project:
        """为指定所有者创建项目

        持有所有者的用户锁，避免与停用操作交错。

        Raises:
            EntityNotFoundError: 所有者不存在
            InvalidArgumentError: 名称不合法
            InvariantViolationError: 所有者不能创建项目（非 ACTIVE）
        """
        async with self._locks.hold("user", owner_id):
            owner = await self._stores.user_store.get_user(owner_id)
            if owner is None:
                raise EntityNotFoundError("User", owner_id)
            project = Project.create(name, description, owner)
            await save_project_aggregate(
                self._stores.conn,
                self._stores.project_store,
                self._stores.task_store,
                project,
            )
        log.info("project_created", project_id=project.id, owner_id=owner_id)
        return project

    async def get_project(self, project_id: int) -> Project:
        project = await self._stores.project_store.get_project(project_id)
        if project is None:
            raise EntityNotFoundError("Project", project_id)
        return project

    async def list_projects(
        self,
        owner_id: int | None = None,
        status: ProjectStatus | None = None,
    ) -> list[Project]:
        return await self._stores.project_store.list_projects(owner_id, status)

    async def search_projects(
        self, name: str | None = None, description: str | None = None
    ) -> list[Project]:
        return await self._stores.project_store.search_projects(name, description)

    async def update_project(
        self, project_id: int, name: str | None, description: str | None
    ) -> Project:
        async with self._locks.hold("project", project_id):
            project = await self.get_project(project_id)
            project.update_project(name, description)
            await self._save(project)
        log.info("project_updated", project_id=project_id)
        return project

    async def complete_project(self, project_id: int) -> Project:
        """完成项目；存在 TODO / IN_PROGRESS 任务时拒绝"""
        async with self._locks.hold("project", project_id):
            project = await self.get_project(project_id)
            project.complete()
            await self._save(project)
        log.info(
            "project_completed",
            project_id=project_id,
            total_tasks=project.total_tasks,
            progress=project.progress,
        )
        return project

    async def archive_project(self, project_id: int) -> Project:
        async with self._locks.hold("project", project_id):
            project = await self.get_project(project_id)
            project.archive()
            await self._save(project)
        log.info("project_archived", project_id=project_id)
        return project

    async def reactivate_project(self, project_id: int) -> Project:
        async with self._locks.hold("project", project_id):
            project = await self.get_project(project_id)
            project.reactivate()
            await self._save(project)
        log.info("project_reactivated", project_id=project_id)
        return project

    async def delete_project(self, project_id: int) -> None:
        """删除项目及其全部任务"""
        async with self._locks.hold("project", project_id):
            async with atomic(self._stores.conn):
                deleted = await self._stores.project_store.delete_project(project_id)
            if not deleted:
                raise EntityNotFoundError("Project", project_id)
        log.info("project_deleted", project_id=project_id)

    async def _save(self, project: Project) -> None:
        async with atomic(self._stores.conn, [project]):
            await self._stores.project_store.save_project(project)
