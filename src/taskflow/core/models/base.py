"""实体基类 -- 标识与时间戳

id / created_at / updated_at 由存储层分配和刷新（见 hydration 模块），
领域逻辑从不写入这些字段。
"""

from datetime import UTC, datetime

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    """当前 UTC 时间"""
    return datetime.now(UTC)


def ensure_aware(value: datetime) -> datetime:
    """无时区的时间按 UTC 解释"""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class Entity(BaseModel):
    """带标识的领域实体

    相等性：同一对象，或双方都已持久化且 id 相同。
    未持久化的两个实体永不相等。
    """

    id: int | None = Field(default=None, description="存储层分配的标识，持久化前为 None")
    created_at: datetime | None = Field(default=None, description="插入时间（存储层设置）")
    updated_at: datetime | None = Field(default=None, description="最后更新时间（存储层刷新）")

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if type(other) is not type(self):
            return False
        return self.id is not None and self.id == other.id

    def __hash__(self) -> int:
        if self.id is None:
            return id(self)
        return hash((type(self).__name__, self.id))
