"""UserService -- 用户注册、查询与状态变更

每个变更操作：持有用户锁 -> 加载 -> 一次领域变更 -> 原子保存。
"""

import structlog
from taskflow.core.exceptions import DuplicateEntityError, EntityNotFoundError
from taskflow.core.models import Email, User, UserStatus
from taskflow.core.store import StoreGroup, atomic, save_user
from taskflow.core.store.user_store import UserSearchField

from .locks import AggregateLocks

log = structlog.get_logger()


class UserService:
    """用户业务服务"""

    def __init__(self, store_group: StoreGroup, locks: AggregateLocks) -> None:
        self._stores = store_group
        self._locks = locks

    async def create_user(
        self,
        username: str | None,
        email: str | None,
        password: str | None,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> User:
        """注册新用户

        Raises:
            InvalidArgumentError: 用户名 / 邮箱 / 密码不合法
            DuplicateEntityError: 用户名或邮箱已被占用
        """
        user = User.create(username, email, password, first_name, last_name)
        if await self._stores.user_store.exists_by_username(user.username):
            raise DuplicateEntityError("User", "username", user.username)
        if await self._stores.user_store.exists_by_email(user.email):
            raise DuplicateEntityError("User", "email", user.email)

        await save_user(self._stores.conn, self._stores.user_store, user)
        log.info("user_created", user_id=user.id, username=user.username)
        return user

    async def get_user(self, user_id: int) -> User:
        user = await self._stores.user_store.get_user(user_id)
        if user is None:
            raise EntityNotFoundError("User", user_id)
        return user

    async def find_by_username(self, username: str) -> User:
        user = await self._stores.user_store.find_by_username(username)
        if user is None:
            raise EntityNotFoundError("User", username)
        return user

    async def find_by_email(self, email: str) -> User:
        user = await self._stores.user_store.find_by_email(Email.of(email).value)
        if user is None:
            raise EntityNotFoundError("User", email)
        return user

    async def list_users(self, status: UserStatus | None = None) -> list[User]:
        return await self._stores.user_store.list_users(status)

    async def search_users(self, field: UserSearchField, text: str) -> list[User]:
        return await self._stores.user_store.search_users(field, text)

    async def activate_user(self, user_id: int) -> User:
        async with self._locks.hold("user", user_id):
            user = await self.get_user(user_id)
            user.activate()
            await save_user(self._stores.conn, self._stores.user_store, user)
        log.info("user_activated", user_id=user_id)
        return user

    async def deactivate_user(self, user_id: int) -> User:
        """停用用户；拥有 ACTIVE 项目时拒绝"""
        async with self._locks.hold("user", user_id):
            user = await self.get_user(user_id)
            await self._stores.project_store.load_owned_projects(user)
            user.deactivate()
            await save_user(self._stores.conn, self._stores.user_store, user)
        log.info("user_deactivated", user_id=user_id)
        return user

    async def update_profile(
        self, user_id: int, first_name: str | None, last_name: str | None
    ) -> User:
        async with self._locks.hold("user", user_id):
            user = await self.get_user(user_id)
            user.update_profile(first_name, last_name)
            await save_user(self._stores.conn, self._stores.user_store, user)
        log.info("user_profile_updated", user_id=user_id)
        return user

    async def change_password(
        self, user_id: int, current_password: str | None, new_password: str | None
    ) -> User:
        async with self._locks.hold("user", user_id):
            user = await self.get_user(user_id)
            user.change_password(current_password, new_password)
            await save_user(self._stores.conn, self._stores.user_store, user)
        log.info("user_password_changed", user_id=user_id)
        return user

    async def delete_user(self, user_id: int) -> None:
        """删除用户及其拥有的项目与任务"""
        async with self._locks.hold("user", user_id):
            async with atomic(self._stores.conn):
                deleted = await self._stores.user_store.delete_user(user_id)
            if not deleted:
                raise EntityNotFoundError("User", user_id)
        log.info("user_deleted", user_id=user_id)
