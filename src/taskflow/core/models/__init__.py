"""TaskFlow Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .base import Entity
from .enums import (
    PROJECT_TRANSITIONS,
    TASK_CLOSED_STATES,
    TASK_PENDING_STATES,
    TASK_TRANSITIONS,
    USER_TRANSITIONS,
    ProjectStatus,
    TaskPriority,
    TaskStatus,
    UserStatus,
    validate_project_transition,
    validate_task_transition,
    validate_user_transition,
)
from .project import Project
from .task import Task
from .user import User
from .value_objects import Email, Password, TaskTitle

__all__ = [
    # 枚举
    "UserStatus",
    "ProjectStatus",
    "TaskStatus",
    "TaskPriority",
    # 状态机
    "USER_TRANSITIONS",
    "PROJECT_TRANSITIONS",
    "TASK_TRANSITIONS",
    "TASK_CLOSED_STATES",
    "TASK_PENDING_STATES",
    "validate_user_transition",
    "validate_project_transition",
    "validate_task_transition",
    # 值对象
    "Email",
    "Password",
    "TaskTitle",
    # 实体
    "Entity",
    "User",
    "Project",
    "Task",
]
