"""Task 实体 -- 状态 / 优先级状态机

任务属于且仅属于一个项目（构造时确定，项目必须可接受任务），
可选指派给一个用户。
"""

from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import Field, PrivateAttr

from ..exceptions import InvalidArgumentError, InvalidStateError, InvariantViolationError
from .base import Entity, ensure_aware, utcnow
from .enums import TASK_CLOSED_STATES, TaskPriority, TaskStatus, validate_task_transition
from .value_objects import normalize_task_title

if TYPE_CHECKING:
    from .project import Project
    from .user import User

_SECONDS_PER_DAY = 86400


def _check_due_date(due_date: datetime | None) -> datetime | None:
    if due_date is None:
        return None
    due_date = ensure_aware(due_date)
    if due_date < utcnow():
        raise InvalidArgumentError("Due date cannot be in the past")
    return due_date


class Task(Entity):
    """任务实体"""

    title: str = Field(description="标题，去空白后 3-200 字符")
    description: str | None = Field(default=None)
    status: TaskStatus = Field(default=TaskStatus.TODO, description="当前状态")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="优先级")
    due_date: datetime | None = Field(default=None, description="截止时间")

    _project: "Project | None" = PrivateAttr(default=None)
    # 仅加载任务本身时（未加载项目对象）保存的项目 id
    _project_id: int | None = PrivateAttr(default=None)
    _assigned_to: "User | None" = PrivateAttr(default=None)

    @classmethod
    def create(
        cls,
        title: str | None,
        description: str | None,
        project: "Project | None",
        assigned_to: "User | None" = None,
        *,
        priority: TaskPriority | None = TaskPriority.MEDIUM,
        due_date: datetime | None = None,
    ) -> "Task":
        """领域构造：校验标题与目标项目，然后加入项目

        目标项目不接受任务时抛出 InvariantViolationError，项目任务列表保持不变。
        """
        validated_title = normalize_task_title(title)
        if project is None:
            raise InvalidArgumentError("Task project cannot be null")
        if not project.can_accept_tasks():
            raise InvariantViolationError(
                "Project cannot accept new tasks",
                {"project_status": str(project.status)},
            )
        if priority is None:
            raise InvalidArgumentError("Priority cannot be null")
        checked_due = _check_due_date(due_date)

        task = cls(
            title=validated_title,
            description=description,
            status=TaskStatus.TODO,
            priority=priority,
            due_date=checked_due,
        )
        task._assigned_to = assigned_to
        project.add_task(task)
        return task

    @property
    def project(self) -> "Project | None":
        """所属项目；从项目中移除后为 None"""
        return self._project

    @property
    def project_id(self) -> int | None:
        if self._project is not None:
            return self._project.id
        return self._project_id

    @property
    def assigned_to(self) -> "User | None":
        return self._assigned_to

    @property
    def assigned_to_id(self) -> int | None:
        return self._assigned_to.id if self._assigned_to is not None else None

    def update_task(self, title: str | None, description: str | None) -> None:
        if self.status in TASK_CLOSED_STATES:
            raise InvalidStateError("Cannot update completed or cancelled task", self.status)
        self.title = normalize_task_title(title)
        self.description = description

    def start(self) -> None:
        if not validate_task_transition(self.status, TaskStatus.IN_PROGRESS):
            raise InvalidStateError("Can only start tasks that are in TODO status", self.status)
        self.status = TaskStatus.IN_PROGRESS

    def complete(self) -> None:
        if not validate_task_transition(self.status, TaskStatus.COMPLETED):
            raise InvalidStateError("Can only complete tasks that are in progress", self.status)
        self.status = TaskStatus.COMPLETED

    def cancel(self) -> None:
        """取消任务：除 COMPLETED 外的任意状态；重复取消允许"""
        if not validate_task_transition(self.status, TaskStatus.CANCELLED):
            raise InvalidStateError("Cannot cancel a completed task", self.status)
        self.status = TaskStatus.CANCELLED

    def reopen(self) -> None:
        if not validate_task_transition(self.status, TaskStatus.TODO):
            raise InvalidStateError("Can only reopen cancelled tasks", self.status)
        self.status = TaskStatus.TODO

    def assign_to(self, user: "User | None") -> None:
        if self.status in TASK_CLOSED_STATES:
            raise InvalidStateError("Cannot assign completed or cancelled task", self.status)
        self._assigned_to = user

    def unassign(self) -> None:
        self._assigned_to = None

    def change_priority(self, priority: TaskPriority | None) -> None:
        if priority is None:
            raise InvalidArgumentError("Priority cannot be null")
        self.priority = priority

    def update_due_date(self, due_date: datetime | None) -> None:
        """设置截止时间；None 表示清除，过去的时间被拒绝"""
        self.due_date = _check_due_date(due_date)

    def is_overdue(self) -> bool:
        return (
            self.due_date is not None
            and ensure_aware(self.due_date) < utcnow()
            and self.status not in TASK_CLOSED_STATES
        )

    def can_be_edited(self) -> bool:
        return self.status not in TASK_CLOSED_STATES

    def can_be_assigned(self) -> bool:
        return self.status not in TASK_CLOSED_STATES

    @property
    def days_since_creation(self) -> int:
        if self.created_at is None:
            return 0
        return int((utcnow() - ensure_aware(self.created_at)).total_seconds() // _SECONDS_PER_DAY)

    @property
    def days_until_due(self) -> int:
        """距截止的整天数（向零取整）；无截止时间时为 -1"""
        if self.due_date is None:
            return -1
        delta = ensure_aware(self.due_date) - utcnow()
        return int(delta.total_seconds() / _SECONDS_PER_DAY)

    def _set_project(self, project: "Project | None") -> None:
        self._project = project
        self._project_id = project.id if project is not None else None
