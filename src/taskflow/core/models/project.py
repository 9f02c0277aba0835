"""Project 聚合根 -- 状态机 + 任务集合

项目独占其任务列表，根据任务完成情况约束自身的状态流转：
存在 TODO / IN_PROGRESS 任务时不能完成。
"""

from typing import TYPE_CHECKING

from pydantic import Field, PrivateAttr

from ..exceptions import InvalidArgumentError, InvalidStateError, InvariantViolationError
from .base import Entity
from .enums import TASK_PENDING_STATES, ProjectStatus, TaskStatus, validate_project_transition

if TYPE_CHECKING:
    from .task import Task
    from .user import User

PROJECT_NAME_MIN_LENGTH = 3
PROJECT_NAME_MAX_LENGTH = 100


def validate_project_name(name: str | None) -> str:
    if name is None or not name.strip():
        raise InvalidArgumentError("Project name cannot be null or empty")
    trimmed = name.strip()
    if not PROJECT_NAME_MIN_LENGTH <= len(trimmed) <= PROJECT_NAME_MAX_LENGTH:
        raise InvalidArgumentError(
            f"Project name must be between {PROJECT_NAME_MIN_LENGTH} and "
            f"{PROJECT_NAME_MAX_LENGTH} characters"
        )
    return trimmed


class Project(Entity):
    """项目实体

    所有者在构造时确定且必须处于可创建项目的状态（ACTIVE）。
    """

    name: str = Field(description="项目名称，3-100 字符")
    description: str | None = Field(default=None, description="项目描述")
    status: ProjectStatus = Field(default=ProjectStatus.ACTIVE, description="当前状态")

    _owner: "User | None" = PrivateAttr(default=None)
    _tasks: list["Task"] = PrivateAttr(default_factory=list)

    @classmethod
    def create(cls, name: str | None, description: str | None, owner: "User | None") -> "Project":
        """领域构造：校验名称与所有者，并登记到所有者的项目列表"""
        validated_name = validate_project_name(name)
        if owner is None:
            raise InvalidArgumentError("Project owner cannot be null")
        if not owner.can_create_projects():
            raise InvariantViolationError(
                "User cannot create projects",
                {"owner_status": str(owner.status)},
            )
        project = cls(name=validated_name, description=description, status=ProjectStatus.ACTIVE)
        project._owner = owner
        owner._register_project(project)
        return project

    @property
    def owner(self) -> "User | None":
        return self._owner

    @property
    def owner_id(self) -> int | None:
        return self._owner.id if self._owner is not None else None

    @property
    def tasks(self) -> list["Task"]:
        """任务列表（副本，外部修改不影响聚合）"""
        return list(self._tasks)

    def update_project(self, name: str | None, description: str | None) -> None:
        if self.status != ProjectStatus.ACTIVE:
            raise InvalidStateError("Cannot update inactive or completed project", self.status)
        self.name = validate_project_name(name)
        self.description = description

    def complete(self) -> None:
        """完成项目：所有任务必须已完成或已取消（空项目可直接完成）"""
        if self.status == ProjectStatus.COMPLETED:
            raise InvalidStateError("Project is already completed", self.status)
        if self.status == ProjectStatus.ARCHIVED:
            raise InvalidStateError("Cannot complete an archived project", self.status)
        if not validate_project_transition(self.status, ProjectStatus.COMPLETED):
            raise InvalidStateError("Can only complete active projects", self.status)
        pending = self.pending_tasks
        if pending:
            raise InvariantViolationError(
                "Cannot complete project with incomplete tasks",
                {"pending_tasks": pending},
            )
        self.status = ProjectStatus.COMPLETED

    def archive(self) -> None:
        if self.status == ProjectStatus.ARCHIVED:
            raise InvalidStateError("Project is already archived", self.status)
        if not validate_project_transition(self.status, ProjectStatus.ARCHIVED):
            raise InvalidStateError("Can only archive completed projects", self.status)
        self.status = ProjectStatus.ARCHIVED

    def reactivate(self) -> None:
        """ARCHIVED -> ACTIVE（跳过 COMPLETED）"""
        if not validate_project_transition(self.status, ProjectStatus.ACTIVE):
            raise InvalidStateError("Can only reactivate archived projects", self.status)
        self.status = ProjectStatus.ACTIVE

    def add_task(self, task: "Task | None") -> None:
        """加入任务并设置任务的项目反向引用；已存在时不做任何事"""
        if self.status != ProjectStatus.ACTIVE:
            raise InvalidStateError(
                "Cannot add tasks to inactive or completed projects", self.status
            )
        if task is None:
            raise InvalidArgumentError("Task cannot be null")
        if task in self._tasks:
            return
        self._tasks.append(task)
        task._set_project(self)

    def remove_task(self, task: "Task | None") -> None:
        """移除任务并清空其项目反向引用

        被移除的任务处于无所属项目的游离状态，直到被重新加入或丢弃。
        """
        if task is None:
            raise InvalidArgumentError("Task cannot be null")
        if task in self._tasks:
            self._tasks.remove(task)
            task._set_project(None)

    @property
    def total_tasks(self) -> int:
        return len(self._tasks)

    @property
    def completed_tasks(self) -> int:
        return sum(1 for t in self._tasks if t.status == TaskStatus.COMPLETED)

    @property
    def pending_tasks(self) -> int:
        return sum(1 for t in self._tasks if t.status in TASK_PENDING_STATES)

    @property
    def progress(self) -> float:
        """已完成任务占比（0-100），无任务时为 0"""
        if not self._tasks:
            return 0.0
        return self.completed_tasks / len(self._tasks) * 100

    def can_be_edited(self) -> bool:
        return self.status == ProjectStatus.ACTIVE

    def can_accept_tasks(self) -> bool:
        return self.status == ProjectStatus.ACTIVE
