"""枚举定义 -- 用户 / 项目 / 任务状态机

包含 UserStatus、ProjectStatus、TaskStatus、TaskPriority 枚举，
以及各状态机的合法流转映射和 validate_*_transition 辅助函数。
实体方法中的守卫条件是规则的唯一执行点，这里的映射表用于文档化和测试。
"""

from enum import StrEnum


class UserStatus(StrEnum):
    """用户状态"""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    # 预留状态：目前没有任何流转可以进入
    SUSPENDED = "SUSPENDED"


class ProjectStatus(StrEnum):
    """项目状态"""

    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    ARCHIVED = "ARCHIVED"


class TaskStatus(StrEnum):
    """任务状态"""

    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class TaskPriority(StrEnum):
    """任务优先级"""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


USER_TRANSITIONS: dict[UserStatus, set[UserStatus]] = {
    UserStatus.ACTIVE: {UserStatus.INACTIVE},
    UserStatus.INACTIVE: {UserStatus.ACTIVE},
    UserStatus.SUSPENDED: {UserStatus.ACTIVE, UserStatus.INACTIVE},
}

PROJECT_TRANSITIONS: dict[ProjectStatus, set[ProjectStatus]] = {
    ProjectStatus.ACTIVE: {ProjectStatus.COMPLETED},
    ProjectStatus.COMPLETED: {ProjectStatus.ARCHIVED},
    # reactivate 跳过 COMPLETED 直接回到 ACTIVE
    ProjectStatus.ARCHIVED: {ProjectStatus.ACTIVE},
}

TASK_TRANSITIONS: dict[TaskStatus, set[TaskStatus]] = {
    TaskStatus.TODO: {TaskStatus.IN_PROGRESS, TaskStatus.CANCELLED},
    TaskStatus.IN_PROGRESS: {TaskStatus.COMPLETED, TaskStatus.CANCELLED},
    TaskStatus.COMPLETED: set(),
    # 重复取消是允许的同态流转
    TaskStatus.CANCELLED: {TaskStatus.TODO, TaskStatus.CANCELLED},
}

# 已关闭任务：不可编辑、不可指派
TASK_CLOSED_STATES: frozenset[TaskStatus] = frozenset(
    {TaskStatus.COMPLETED, TaskStatus.CANCELLED}
)

# 未完成任务：阻止项目完成
TASK_PENDING_STATES: frozenset[TaskStatus] = frozenset(
    {TaskStatus.TODO, TaskStatus.IN_PROGRESS}
)


def validate_user_transition(from_status: UserStatus, to_status: UserStatus) -> bool:
    """验证用户状态流转是否合法"""
    return to_status in USER_TRANSITIONS.get(from_status, set())


def validate_project_transition(
    from_status: ProjectStatus, to_status: ProjectStatus
) -> bool:
    """验证项目状态流转是否合法"""
    return to_status in PROJECT_TRANSITIONS.get(from_status, set())


def validate_task_transition(from_status: TaskStatus, to_status: TaskStatus) -> bool:
    """验证任务状态流转是否合法

    Args:
        from_status: 当前状态
        to_status: 目标状态

    Returns:
        True 如果流转合法，否则 False
    """
    return to_status in TASK_TRANSITIONS.get(from_status, set())
