"""存储层专用接口 -- 标识分配、时间戳刷新与关系重建

只有 store 包调用这里的函数。重建实体走 model_construct，
跳过领域构造校验（已持久化的数据按原样还原）。
"""

from datetime import datetime
from typing import Any

from pydantic import SecretStr

from .base import Entity
from .enums import ProjectStatus, TaskPriority, TaskStatus, UserStatus
from .project import Project
from .task import Task
from .user import User


def mark_persisted(entity: Entity, entity_id: int, created_at: datetime) -> None:
    """首次插入成功后分配 id 与 created_at"""
    entity.id = entity_id
    entity.created_at = created_at
    entity.updated_at = created_at


def touch(entity: Entity, updated_at: datetime) -> None:
    """每次持久化变更后刷新 updated_at"""
    entity.updated_at = updated_at


def restore_user(**fields: Any) -> User:
    fields["status"] = UserStatus(fields["status"])
    if not isinstance(fields["password"], SecretStr):
        fields["password"] = SecretStr(fields["password"])
    return User.model_construct(**fields)


def restore_project(owner: User | None = None, **fields: Any) -> Project:
    fields["status"] = ProjectStatus(fields["status"])
    project = Project.model_construct(**fields)
    if owner is not None:
        attach_project(owner, project)
    return project


def restore_task(
    project: Project | None = None,
    assigned_to: User | None = None,
    project_id: int | None = None,
    **fields: Any,
) -> Task:
    fields["status"] = TaskStatus(fields["status"])
    fields["priority"] = TaskPriority(fields["priority"])
    task = Task.model_construct(**fields)
    if project is not None:
        attach_task(project, task)
    else:
        task._project_id = project_id
    task._assigned_to = assigned_to
    return task


def attach_project(owner: User, project: Project) -> None:
    """建立 User <-> Project 关系（不做所有者状态检查）"""
    project._owner = owner
    owner._register_project(project)


def attach_task(project: Project, task: Task) -> None:
    """建立 Project <-> Task 关系（不做项目状态检查）"""
    if task not in project._tasks:
        project._tasks.append(task)
    task._set_project(project)
