"""UserStore SQLite 实现

username / email 唯一性由表约束保证，冲突转换为 DuplicateEntityError。
返回的 User 不含项目列表；需要停用检查时由 ProjectStore.load_owned_projects 补全。
"""

from datetime import UTC, datetime
from typing import Literal

import aiosqlite

from ..exceptions import DuplicateEntityError
from ..models.base import utcnow
from ..models.enums import UserStatus
from ..models.hydration import mark_persisted, restore_user, touch
from ..models.user import User

USER_COLUMNS = (
    "id, username, email, password, first_name, last_name, status, created_at, updated_at"
)

UserSearchField = Literal["username", "first_name", "last_name"]


def to_db_time(value: datetime) -> str:
    """统一存储为 UTC ISO 字符串，保证字典序即时间序"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="microseconds")


def from_db_time(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def row_to_user(row: aiosqlite.Row, offset: int = 0) -> User:
    """将数据库行（从 offset 列开始的 USER_COLUMNS）转换为 User"""
    return restore_user(
        id=row[offset],
        username=row[offset + 1],
        email=row[offset + 2],
        password=row[offset + 3],
        first_name=row[offset + 4],
        last_name=row[offset + 5],
        status=row[offset + 6],
        created_at=from_db_time(row[offset + 7]),
        updated_at=from_db_time(row[offset + 8]),
    )


class SqliteUserStore:
    """UserStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def save_user(self, user: User) -> None:
        """插入或更新用户

        注意：此方法不自动提交事务，需由调用方管理事务。
        """
        now = utcnow()
        values = (
            user.username,
            user.email,
            user.password.get_secret_value(),
            user.first_name,
            user.last_name,
            user.status.value,
        )
        try:
            if user.id is None:
                cursor = await self._conn.execute(
                    """
                    INSERT INTO users (username, email, password, first_name, last_name,
                                       status, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (*values, to_db_time(now), to_db_time(now)),
                )
                mark_persisted(user, cursor.lastrowid, now)
            else:
                await self._conn.execute(
                    """
                    UPDATE users
                    SET username = ?, email = ?, password = ?, first_name = ?,
                        last_name = ?, status = ?, updated_at = ?
                    WHERE id = ?
                    """,
                    (*values, to_db_time(now), user.id),
                )
                touch(user, now)
        except aiosqlite.IntegrityError as e:
            duplicate = self._duplicate_error(e, user)
            if duplicate is None:
                raise
            raise duplicate from e

    async def get_user(self, user_id: int) -> User | None:
        """根据 id 查询用户"""
        return await self._fetch_one(f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (user_id,))

    async def find_by_username(self, username: str) -> User | None:
        return await self._fetch_one(
            f"SELECT {USER_COLUMNS} FROM users WHERE username = ?", (username.strip(),)
        )

    async def find_by_email(self, email: str) -> User | None:
        return await self._fetch_one(
            f"SELECT {USER_COLUMNS} FROM users WHERE email = ?", (email.strip().lower(),)
        )

    async def exists_by_username(self, username: str) -> bool:
        return await self.find_by_username(username) is not None

    async def exists_by_email(self, email: str) -> bool:
        return await self.find_by_email(email) is not None

    async def list_users(self, status: UserStatus | None = None) -> list[User]:
        """查询用户列表，支持按状态筛选，按 id 正序"""
        if status:
            cursor = await self._conn.execute(
                f"SELECT {USER_COLUMNS} FROM users WHERE status = ? ORDER BY id ASC",
                (status.value,),
            )
        else:
            cursor = await self._conn.execute(f"SELECT {USER_COLUMNS} FROM users ORDER BY id ASC")
        rows = await cursor.fetchall()
        return [row_to_user(row) for row in rows]

    async def search_users(self, field: UserSearchField, text: str) -> list[User]:
        """大小写不敏感的子串查询"""
        if field not in ("username", "first_name", "last_name"):
            raise ValueError(f"Unsupported search field: {field}")
        cursor = await self._conn.execute(
            f"""
            SELECT {USER_COLUMNS} FROM users
            WHERE {field} IS NOT NULL AND instr(lower({field}), lower(?)) > 0
            ORDER BY id ASC
            """,
            (text,),
        )
        rows = await cursor.fetchall()
        return [row_to_user(row) for row in rows]

    async def count_by_status(self, status: UserStatus) -> int:
        cursor = await self._conn.execute(
            "SELECT COUNT(*) FROM users WHERE status = ?", (status.value,)
        )
        row = await cursor.fetchone()
        return row[0] if row else 0

    async def delete_user(self, user_id: int) -> bool:
        """删除用户（级联删除其项目与任务）；不自动提交"""
        cursor = await self._conn.execute("DELETE FROM users WHERE id = ?", (user_id,))
        return cursor.rowcount > 0

    async def _fetch_one(self, sql: str, params: tuple) -> User | None:
        cursor = await self._conn.execute(sql, params)
        row = await cursor.fetchone()
        if row is None:
            return None
        return row_to_user(row)

    @staticmethod
    def _duplicate_error(
        error: aiosqlite.IntegrityError, user: User
    ) -> DuplicateEntityError | None:
        text = str(error)
        if "users.username" in text:
            return DuplicateEntityError("User", "username", user.username)
        if "users.email" in text:
            return DuplicateEntityError("User", "email", user.email)
        return None


def user_columns(alias: str) -> str:
    """带表别名的 USER_COLUMNS（用于 JOIN 查询）"""
    return ", ".join(f"{alias}.{col.strip()}" for col in USER_COLUMNS.split(","))


async def fetch_users_by_ids(
    conn: aiosqlite.Connection,
    user_ids: set[int],
    known: dict[int, User] | None = None,
) -> dict[int, User]:
    """批量加载用户；known 中已有的对象直接复用，保证同一 id 只有一个实例"""
    users = dict(known or {})
    missing = [uid for uid in user_ids if uid not in users]
    if missing:
        placeholders = ", ".join("?" for _ in missing)
        cursor = await conn.execute(
            f"SELECT {USER_COLUMNS} FROM users WHERE id IN ({placeholders})",
            tuple(missing),
        )
        for row in await cursor.fetchall():
            user = row_to_user(row)
            users[user.id] = user
    return users
