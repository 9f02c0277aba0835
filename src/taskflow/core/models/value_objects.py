"""Value Objects -- Email / Password / TaskTitle

不可变、自校验的标量类型：构造是唯一的变更点，
工厂方法要么返回合法实例，要么抛出 InvalidArgumentError 指明被违反的规则。
相等性与哈希只基于规范化后的值。
"""

import re

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from ..exceptions import InvalidArgumentError

_EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")

PASSWORD_SYMBOLS = "@$!%*?&"
_STRONG_PASSWORD_PATTERN = re.compile(
    r"(?=.*[a-z])(?=.*[A-Z])(?=.*[0-9])(?=.*[@$!%*?&])[A-Za-z0-9@$!%*?&]{8,}"
)
STRONG_PASSWORD_MIN_LENGTH = 8
WEAK_PASSWORD_MIN_LENGTH = 6

TASK_TITLE_MIN_LENGTH = 3
TASK_TITLE_MAX_LENGTH = 200


def normalize_email(raw: str | None) -> str:
    """去空白 + 小写 + 格式校验"""
    if raw is None or not raw.strip():
        raise InvalidArgumentError("Email cannot be null or empty")
    normalized = raw.strip().lower()
    if not _EMAIL_PATTERN.fullmatch(normalized):
        raise InvalidArgumentError(f"Invalid email format: {raw}")
    return normalized


def validate_strong_password(raw: str | None) -> str:
    """严格密码策略：>= 8 位，且包含小写、大写、数字、特殊符号各至少一个"""
    if not raw:
        raise InvalidArgumentError("Password cannot be null or empty")
    if len(raw) < STRONG_PASSWORD_MIN_LENGTH:
        raise InvalidArgumentError(
            f"Password must be at least {STRONG_PASSWORD_MIN_LENGTH} characters long"
        )
    if not _STRONG_PASSWORD_PATTERN.fullmatch(raw):
        raise InvalidArgumentError(
            "Password must contain at least one lowercase letter, one uppercase letter, "
            f"one digit, and one special character ({PASSWORD_SYMBOLS})"
        )
    return raw


def validate_weak_password(raw: str | None) -> str:
    """宽松密码策略：仅要求 >= 6 位"""
    if not raw:
        raise InvalidArgumentError("Password cannot be null or empty")
    if len(raw) < WEAK_PASSWORD_MIN_LENGTH:
        raise InvalidArgumentError(
            f"Password must be at least {WEAK_PASSWORD_MIN_LENGTH} characters long"
        )
    return raw


def normalize_task_title(raw: str | None) -> str:
    """去空白后校验长度 3..200"""
    if raw is None or not raw.strip():
        raise InvalidArgumentError("Task title cannot be null or empty")
    trimmed = raw.strip()
    if len(trimmed) < TASK_TITLE_MIN_LENGTH:
        raise InvalidArgumentError(
            f"Task title must be at least {TASK_TITLE_MIN_LENGTH} characters long"
        )
    if len(trimmed) > TASK_TITLE_MAX_LENGTH:
        raise InvalidArgumentError(
            f"Task title must be at most {TASK_TITLE_MAX_LENGTH} characters long"
        )
    return trimmed


class Email(BaseModel):
    """邮箱地址 -- 规范化为小写"""

    model_config = ConfigDict(frozen=True)

    value: str = Field(description="规范化后的邮箱地址")

    @field_validator("value")
    @classmethod
    def _normalize(cls, v: str) -> str:
        return normalize_email(v)

    @classmethod
    def of(cls, email: str | None) -> "Email":
        return cls(value=normalize_email(email))

    @property
    def domain(self) -> str:
        return self.value[self.value.index("@") + 1 :]

    @property
    def local_part(self) -> str:
        return self.value[: self.value.index("@")]

    def is_from_domain(self, domain: str) -> bool:
        return self.domain.lower() == domain.lower()

    def __str__(self) -> str:
        return self.value


class Password(BaseModel):
    """密码 -- 严格（of）与宽松（of_weak）两种构造策略

    原文以 SecretStr 保存，避免出现在 repr 和日志中。
    直接构造时至少满足宽松策略。
    """

    model_config = ConfigDict(frozen=True)

    value: SecretStr = Field(description="原始密码")

    @field_validator("value")
    @classmethod
    def _check_floor(cls, v: SecretStr) -> SecretStr:
        validate_weak_password(v.get_secret_value())
        return v

    @classmethod
    def of(cls, password: str | None) -> "Password":
        return cls(value=SecretStr(validate_strong_password(password)))

    @classmethod
    def of_weak(cls, password: str | None) -> "Password":
        return cls(value=SecretStr(validate_weak_password(password)))

    def matches(self, other: "Password") -> bool:
        return self.value.get_secret_value() == other.value.get_secret_value()

    def is_strong(self) -> bool:
        """是否满足严格策略（与构造方式无关）"""
        return _STRONG_PASSWORD_PATTERN.fullmatch(self.value.get_secret_value()) is not None

    @property
    def strength(self) -> int:
        """密码强度评分 0-100"""
        raw = self.value.get_secret_value()
        score = 0
        if len(raw) >= 8:
            score += 20
        if len(raw) >= 12:
            score += 10
        if re.search(r"[a-z]", raw):
            score += 20
        if re.search(r"[A-Z]", raw):
            score += 20
        if re.search(r"[0-9]", raw):
            score += 15
        if re.search(r"[@$!%*?&]", raw):
            score += 15
        return min(score, 100)

    def __str__(self) -> str:
        return f"Password{{strength={self.strength}%, strong={self.is_strong()}}}"


class TaskTitle(BaseModel):
    """任务标题 -- 去空白后 3..200 字符"""

    model_config = ConfigDict(frozen=True)

    value: str = Field(description="去空白后的标题")

    @field_validator("value")
    @classmethod
    def _normalize(cls, v: str) -> str:
        return normalize_task_title(v)

    @classmethod
    def of(cls, title: str | None) -> "TaskTitle":
        return cls(value=normalize_task_title(title))

    @property
    def length(self) -> int:
        return len(self.value)

    def is_empty(self) -> bool:
        return not self.value.strip()

    def truncated(self, max_length: int) -> str:
        """超过 max_length 时截断并以 "..." 结尾"""
        if len(self.value) <= max_length:
            return self.value
        if max_length < 3:
            raise InvalidArgumentError("Truncation length must be at least 3")
        return self.value[: max_length - 3] + "..."

    def upper(self) -> str:
        return self.value.upper()

    def lower(self) -> str:
        return self.value.lower()

    def contains(self, word: str) -> bool:
        """大小写不敏感的子串匹配"""
        if word is None:
            raise InvalidArgumentError("Search word cannot be null")
        return word.lower() in self.value.lower()

    def __str__(self) -> str:
        return self.value
