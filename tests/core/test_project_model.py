"""Project 实体测试 -- 构造、状态机、任务集合与进度统计"""

import pytest
from taskflow.core.exceptions import (
    InvalidArgumentError,
    InvalidStateError,
    InvariantViolationError,
)
from taskflow.core.models import Project, ProjectStatus, Task, TaskStatus, User


class TestProjectCreation:
    """领域构造"""

    def test_create_registers_with_owner(self, alice: User):
        project = Project.create("  Website  ", "desc", alice)
        assert project.name == "Website"
        assert project.status == ProjectStatus.ACTIVE
        assert project.owner is alice
        assert project in alice.projects
        assert project.tasks == []

    @pytest.mark.parametrize("name", [None, "", "  ", "ab", "x" * 101])
    def test_invalid_name(self, alice: User, name):
        with pytest.raises(InvalidArgumentError):
            Project.create(name, None, alice)

    def test_null_owner(self):
        with pytest.raises(InvalidArgumentError, match="owner cannot be null"):
            Project.create("Website", None, None)

    def test_inactive_owner(self, alice: User):
        alice.deactivate()
        with pytest.raises(InvariantViolationError):
            Project.create("Website", None, alice)
        assert alice.projects == []


class TestProjectLifecycle:
    """完成 / 归档 / 重新激活"""

    def test_empty_project_can_complete(self, project: Project):
        project.complete()
        assert project.status == ProjectStatus.COMPLETED
        assert project.progress == 0.0

    def test_complete_twice_rejected(self, project: Project):
        project.complete()
        with pytest.raises(InvalidStateError, match="already completed"):
            project.complete()

    def test_archive_requires_completed(self, project: Project):
        with pytest.raises(InvalidStateError, match="Can only archive completed"):
            project.archive()
        project.complete()
        project.archive()
        assert project.status == ProjectStatus.ARCHIVED
        with pytest.raises(InvalidStateError, match="already archived"):
            project.archive()

    def test_complete_archived_rejected(self, project: Project):
        project.complete()
        project.archive()
        with pytest.raises(InvalidStateError):
            project.complete()

    def test_reactivate_archived(self, project: Project):
        project.complete()
        project.archive()
        project.reactivate()
        assert project.status == ProjectStatus.ACTIVE

    @pytest.mark.parametrize("completed", [False, True])
    def test_reactivate_requires_archived(self, project: Project, completed: bool):
        if completed:
            project.complete()
        with pytest.raises(InvalidStateError):
            project.reactivate()

    def test_update_project(self, project: Project):
        project.update_project("Intranet", None)
        assert project.name == "Intranet"
        assert project.description is None

    def test_update_completed_rejected(self, project: Project):
        project.complete()
        with pytest.raises(InvalidStateError):
            project.update_project("Intranet", None)
        assert project.name == "Website"
        assert not project.can_be_edited()


class TestProjectTasks:
    """任务集合"""

    def test_add_task_idempotent(self, project: Project, task: Task):
        project.add_task(task)
        assert project.total_tasks == 1
        assert task.project is project

    def test_add_null_task(self, project: Project):
        with pytest.raises(InvalidArgumentError):
            project.add_task(None)

    def test_add_to_completed_rejected(self, project: Project):
        project.complete()
        assert not project.can_accept_tasks()
        with pytest.raises(InvariantViolationError):
            Task.create("Late task", None, project)
        assert project.total_tasks == 0

    def test_remove_task_clears_back_reference(self, project: Project, task: Task):
        project.remove_task(task)
        assert project.tasks == []
        assert task.project is None
        assert task.project_id is None

    def test_remove_foreign_task_is_noop(self, alice: User, project: Project):
        other = Project.create("Other", None, alice)
        foreign = Task.create("Foreign task", None, other)
        project.remove_task(foreign)
        assert foreign.project is other

    def test_tasks_is_a_copy(self, project: Project, task: Task):
        project.tasks.clear()
        assert project.total_tasks == 1


class TestProjectProgress:
    """统计与完成前置条件"""

    def test_counts(self, project: Project):
        done = Task.create("Done task", None, project)
        done.start()
        done.complete()
        Task.create("Todo task", None, project)
        cancelled = Task.create("Dropped task", None, project)
        cancelled.cancel()

        assert project.total_tasks == 3
        assert project.completed_tasks == 1
        assert project.pending_tasks == 1
        assert project.progress == pytest.approx(100 / 3)

    def test_cancelled_tasks_do_not_block_completion(self, project: Project, task: Task):
        task.cancel()
        project.complete()
        assert project.status == ProjectStatus.COMPLETED

    def test_in_progress_blocks_completion(self, project: Project, task: Task):
        task.start()
        with pytest.raises(InvariantViolationError) as exc_info:
            project.complete()
        assert exc_info.value.details["pending_tasks"] == 1
        assert project.status == ProjectStatus.ACTIVE
        assert task.status == TaskStatus.IN_PROGRESS
