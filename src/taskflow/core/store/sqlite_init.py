"""SQLite 数据库初始化

PRAGMA 配置 + 三张表 DDL + 索引创建。
删除级联：users -> projects -> tasks；被删除用户的任务指派置空。
"""

import aiosqlite

# users 表 DDL
_USERS_DDL = """
CREATE TABLE IF NOT EXISTS users (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    username    TEXT NOT NULL UNIQUE,
    email       TEXT NOT NULL UNIQUE,
    password    TEXT NOT NULL,
    first_name  TEXT,
    last_name   TEXT,
    status      TEXT NOT NULL DEFAULT 'ACTIVE',
    created_at  TEXT NOT NULL,
    updated_at  TEXT NOT NULL
);
"""

_USERS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_users_status ON users(status);",
]

# projects 表 DDL
_PROJECTS_DDL = """
CREATE TABLE IF NOT EXISTS projects (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    name        TEXT NOT NULL,
    description TEXT,
    status      TEXT NOT NULL DEFAULT 'ACTIVE',
    owner_id    INTEGER NOT NULL,
    created_at  TEXT NOT NULL,
    updated_at  TEXT NOT NULL,

    FOREIGN KEY (owner_id) REFERENCES users(id) ON DELETE CASCADE
);
"""

_PROJECTS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_projects_owner_id ON projects(owner_id);",
    "CREATE INDEX IF NOT EXISTS idx_projects_status ON projects(status);",
]

# tasks 表 DDL
_TASKS_DDL = """
CREATE TABLE IF NOT EXISTS tasks (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    title       TEXT NOT NULL,
    description TEXT,
    status      TEXT NOT NULL DEFAULT 'TODO',
    priority    TEXT NOT NULL DEFAULT 'MEDIUM',
    due_date    TEXT,
    project_id  INTEGER NOT NULL,
    assigned_to INTEGER,
    created_at  TEXT NOT NULL,
    updated_at  TEXT NOT NULL,

    FOREIGN KEY (project_id) REFERENCES projects(id) ON DELETE CASCADE,
    FOREIGN KEY (assigned_to) REFERENCES users(id) ON DELETE SET NULL
);
"""

_TASKS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_tasks_project_id ON tasks(project_id);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_assigned_to ON tasks(assigned_to);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_priority ON tasks(priority);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_due_date ON tasks(due_date);",
]


# 表名 -> (DDL, 索引)，顺序即建表顺序
_SCHEMA: dict[str, tuple[str, list[str]]] = {
    "users": (_USERS_DDL, _USERS_INDEXES),
    "projects": (_PROJECTS_DDL, _PROJECTS_INDEXES),
    "tasks": (_TASKS_DDL, _TASKS_INDEXES),
}


async def init_db(conn: aiosqlite.Connection) -> None:
    """初始化数据库：设置 PRAGMA + 创建表 + 创建索引

    Args:
        conn: aiosqlite 数据库连接
    """
    # 设置 PRAGMA
    await conn.execute("PRAGMA journal_mode = WAL;")
    await conn.execute("PRAGMA foreign_keys = ON;")
    await conn.execute("PRAGMA busy_timeout = 5000;")

    # 按外键依赖顺序建表
    for ddl, indexes in _SCHEMA.values():
        await conn.execute(ddl)
        for idx_sql in indexes:
            await conn.execute(idx_sql)

    await conn.commit()


async def verify_wal_mode(conn: aiosqlite.Connection) -> bool:
    """验证 WAL 模式是否生效

    Returns:
        True 如果 WAL 模式已启用
    """
    cursor = await conn.execute("PRAGMA journal_mode;")
    row = await cursor.fetchone()
    return row is not None and row[0].lower() == "wal"


async def missing_tables(conn: aiosqlite.Connection) -> list[str]:
    """返回尚未创建的业务表名（按建表顺序）"""
    cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
    existing = {row[0] for row in await cursor.fetchall()}
    return [name for name in _SCHEMA if name not in existing]
