"""User 聚合根 -- 身份 + 状态机

用户拥有零到多个项目；项目列表是只读的反向引用，
仅用于停用前的「无活跃项目」检查。
"""

from typing import TYPE_CHECKING

from pydantic import Field, PrivateAttr, SecretStr

from ..exceptions import (
    BadCredentialsError,
    InvalidArgumentError,
    InvalidStateError,
    InvariantViolationError,
    UnchangedPasswordError,
)
from .base import Entity
from .enums import ProjectStatus, UserStatus, validate_user_transition
from .value_objects import normalize_email, validate_weak_password

if TYPE_CHECKING:
    from .project import Project

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50


def validate_username(username: str | None) -> str:
    if username is None or not username.strip():
        raise InvalidArgumentError("Username cannot be null or empty")
    trimmed = username.strip()
    if not USERNAME_MIN_LENGTH <= len(trimmed) <= USERNAME_MAX_LENGTH:
        raise InvalidArgumentError(
            f"Username must be between {USERNAME_MIN_LENGTH} and "
            f"{USERNAME_MAX_LENGTH} characters"
        )
    return trimmed


class User(Entity):
    """用户实体

    密码使用实体自身的宽松规则（>= 6 位），与 Password 值对象的严格策略相互独立。
    """

    username: str = Field(description="用户名，3-50 字符，唯一")
    email: str = Field(description="规范化邮箱，唯一")
    password: SecretStr = Field(description="密码原文")
    first_name: str | None = Field(default=None)
    last_name: str | None = Field(default=None)
    status: UserStatus = Field(default=UserStatus.ACTIVE, description="当前状态")

    _projects: list["Project"] = PrivateAttr(default_factory=list)

    @classmethod
    def create(
        cls,
        username: str | None,
        email: str | None,
        password: str | None,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> "User":
        """领域构造：校验 username / email / password，初始状态 ACTIVE"""
        return cls(
            username=validate_username(username),
            email=normalize_email(email),
            password=SecretStr(validate_weak_password(password)),
            first_name=first_name,
            last_name=last_name,
            status=UserStatus.ACTIVE,
        )

    @property
    def projects(self) -> list["Project"]:
        """拥有的项目（副本）"""
        return list(self._projects)

    @property
    def full_name(self) -> str:
        if self.first_name is None and self.last_name is None:
            return self.username
        if self.first_name is None:
            return self.last_name
        if self.last_name is None:
            return self.first_name
        return f"{self.first_name} {self.last_name}"

    def activate(self) -> None:
        if not validate_user_transition(self.status, UserStatus.ACTIVE):
            raise InvalidStateError("User is already active", self.status)
        self.status = UserStatus.ACTIVE

    def deactivate(self) -> None:
        """停用用户：不能拥有任何 ACTIVE 项目"""
        if not validate_user_transition(self.status, UserStatus.INACTIVE):
            raise InvalidStateError("User is already inactive", self.status)
        if self.has_active_projects():
            raise InvariantViolationError(
                "Cannot deactivate user with active projects",
                {"active_projects": self.active_project_count},
            )
        self.status = UserStatus.INACTIVE

    def update_profile(self, first_name: str | None, last_name: str | None) -> None:
        if self.status != UserStatus.ACTIVE:
            raise InvalidStateError("Cannot update profile of inactive user", self.status)
        self.first_name = first_name
        self.last_name = last_name

    def change_password(self, current_password: str | None, new_password: str | None) -> None:
        """修改密码：校验当前密码，新密码必须不同且满足宽松规则"""
        if self.status != UserStatus.ACTIVE:
            raise InvalidStateError("Cannot change password of inactive user", self.status)
        if not self.check_password(current_password):
            raise BadCredentialsError()
        if self.check_password(new_password):
            raise UnchangedPasswordError()
        self.password = SecretStr(validate_weak_password(new_password))

    def check_password(self, raw: str | None) -> bool:
        return raw is not None and self.password.get_secret_value() == raw

    def can_create_projects(self) -> bool:
        return self.status == UserStatus.ACTIVE

    def has_active_projects(self) -> bool:
        return any(p.status == ProjectStatus.ACTIVE for p in self._projects)

    @property
    def active_project_count(self) -> int:
        return sum(1 for p in self._projects if p.status == ProjectStatus.ACTIVE)

    def _register_project(self, project: "Project") -> None:
        if project not in self._projects:
            self._projects.append(project)
