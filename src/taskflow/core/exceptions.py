"""领域异常体系

三类领域失败（参数非法 / 状态不允许 / 跨实体不变量被破坏），
外加存储边界使用的 NotFound / Duplicate。
所有规则检查都在任何字段赋值之前完成，异常抛出时实体保持原状。
"""


class DomainError(Exception):
    """领域层基础异常"""

    code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Args:
            message: 错误描述（指明被违反的具体规则）
            details: 附加上下文，用于日志和 API 响应
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidArgumentError(DomainError, ValueError):
    """输入为空、越界或格式非法"""

    code = "INVALID_ARGUMENT"


class BadCredentialsError(InvalidArgumentError):
    """当前密码不匹配"""

    code = "BAD_CREDENTIALS"

    def __init__(self, message: str = "Current password is incorrect") -> None:
        super().__init__(message)


class UnchangedPasswordError(InvalidArgumentError):
    """新密码与当前密码相同（无变化的修改被拒绝）"""

    code = "PASSWORD_UNCHANGED"

    def __init__(
        self,
        message: str = "New password must be different from current password",
    ) -> None:
        super().__init__(message)


class InvalidStateError(DomainError):
    """当前状态不允许该操作"""

    code = "INVALID_STATE"

    def __init__(self, message: str, current_status: str | None = None) -> None:
        details = {"current_status": current_status} if current_status else {}
        super().__init__(message, details)
        self.current_status = current_status


class InvariantViolationError(DomainError):
    """操作本身合法，但会破坏跨实体规则"""

    code = "INVARIANT_VIOLATION"


class EntityNotFoundError(DomainError):
    """按 id / 唯一键查询不到实体"""

    code = "NOT_FOUND"

    def __init__(self, entity: str, key: object) -> None:
        super().__init__(
            f"{entity} with id {key} does not exist",
            {"entity": entity, "key": str(key)},
        )
        self.entity = entity
        self.key = key


class DuplicateEntityError(DomainError):
    """唯一约束冲突（username / email）"""

    code = "DUPLICATE"

    def __init__(self, entity: str, field: str, value: str) -> None:
        super().__init__(
            f"{entity} with {field} '{value}' already exists",
            {"entity": entity, "field": field},
        )
        self.entity = entity
        self.field = field
