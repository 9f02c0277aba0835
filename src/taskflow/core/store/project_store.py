"""ProjectStore SQLite 实现

get_project / list_projects 返回完整物化的聚合：所有者 + 全部任务（含指派人）。
跨聚合规则（无未完成任务、无活跃项目）依赖这里读到的一致快照。
"""

import aiosqlite

from ..models.base import utcnow
from ..models.enums import ProjectStatus
from ..models.hydration import mark_persisted, restore_project, touch
from ..models.project import Project
from ..models.user import User
from .task_store import SqliteTaskStore, row_to_task
from .user_store import fetch_users_by_ids, from_db_time, row_to_user, to_db_time, user_columns

PROJECT_COLUMNS = "p.id, p.name, p.description, p.status, p.owner_id, p.created_at, p.updated_at"
_PROJECT_COLUMN_COUNT = 7

_SELECT_WITH_OWNER = (
    f"SELECT {PROJECT_COLUMNS}, {user_columns('u')} "
    "FROM projects p JOIN users u ON u.id = p.owner_id"
)


def row_to_project(row: aiosqlite.Row, owner: User | None = None) -> Project:
    """将数据库行转换为 Project；未提供 owner 时从 JOIN 的用户列还原"""
    if owner is None:
        owner = row_to_user(row, offset=_PROJECT_COLUMN_COUNT)
    return restore_project(
        owner=owner,
        id=row[0],
        name=row[1],
        description=row[2],
        status=row[3],
        created_at=from_db_time(row[5]),
        updated_at=from_db_time(row[6]),
    )


class SqliteProjectStore:
    """ProjectStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection, task_store: SqliteTaskStore) -> None:
        self._conn = conn
        self._task_store = task_store

    async def save_project(self, project: Project) -> None:
        """插入或更新项目本身（不含任务，不自动提交）

        Raises:
            ValueError: 所有者尚未持久化
        """
        if project.owner_id is None:
            raise ValueError("Project owner must be persisted before saving the project")
        now = utcnow()
        values = (project.name, project.description, project.status.value, project.owner_id)
        if project.id is None:
            cursor = await self._conn.execute(
                """
                INSERT INTO projects (name, description, status, owner_id,
                                      created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (*values, to_db_time(now), to_db_time(now)),
            )
            mark_persisted(project, cursor.lastrowid, now)
        else:
            await self._conn.execute(
                """
                UPDATE projects
                SET name = ?, description = ?, status = ?, owner_id = ?, updated_at = ?
                WHERE id = ?
                """,
                (*values, to_db_time(now), project.id),
            )
            touch(project, now)

    async def get_project(self, project_id: int) -> Project | None:
        """根据 id 加载项目聚合（所有者 + 全部任务）"""
        cursor = await self._conn.execute(f"{_SELECT_WITH_OWNER} WHERE p.id = ?", (project_id,))
        row = await cursor.fetchone()
        if row is None:
            return None
        project = row_to_project(row)
        await self._attach_tasks([project])
        return project

    async def list_projects(
        self,
        owner_id: int | None = None,
        status: ProjectStatus | None = None,
    ) -> list[Project]:
        """按所有者 / 状态筛选，按 id 正序"""
        clauses: list[str] = []
        params: list = []
        if owner_id is not None:
            clauses.append("p.owner_id = ?")
            params.append(owner_id)
        if status is not None:
            clauses.append("p.status = ?")
            params.append(status.value)
        return await self._query(clauses, tuple(params))

    async def search_projects(
        self,
        name: str | None = None,
        description: str | None = None,
    ) -> list[Project]:
        """名称 / 描述大小写不敏感子串查询"""
        clauses: list[str] = []
        params: list = []
        if name:
            clauses.append("instr(lower(p.name), lower(?)) > 0")
            params.append(name)
        if description:
            clauses.append("p.description IS NOT NULL AND instr(lower(p.description), lower(?)) > 0")
            params.append(description)
        return await self._query(clauses, tuple(params))

    async def load_owned_projects(self, owner: User) -> list[Project]:
        """加载用户拥有的全部项目并挂到该用户对象上（停用检查前调用）"""
        cursor = await self._conn.execute(
            f"{_SELECT_WITH_OWNER} WHERE p.owner_id = ? ORDER BY p.id ASC", (owner.id,)
        )
        rows = await cursor.fetchall()
        projects = [row_to_project(row, owner=owner) for row in rows]
        await self._attach_tasks(projects)
        return projects

    async def count_projects(
        self,
        owner_id: int | None = None,
        status: ProjectStatus | None = None,
    ) -> int:
        clauses: list[str] = []
        params: list = []
        if owner_id is not None:
            clauses.append("owner_id = ?")
            params.append(owner_id)
        if status is not None:
            clauses.append("status = ?")
            params.append(status.value)
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        cursor = await self._conn.execute(f"SELECT COUNT(*) FROM projects{where}", tuple(params))
        row = await cursor.fetchone()
        return row[0] if row else 0

    async def delete_project(self, project_id: int) -> bool:
        """删除项目（级联删除其任务）；不自动提交"""
        cursor = await self._conn.execute("DELETE FROM projects WHERE id = ?", (project_id,))
        return cursor.rowcount > 0

    async def _query(self, clauses: list[str], params: tuple) -> list[Project]:
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        cursor = await self._conn.execute(f"{_SELECT_WITH_OWNER}{where} ORDER BY p.id ASC", params)
        rows = await cursor.fetchall()

        # 同一所有者只还原一个 User 实例
        owners: dict[int, User] = {}
        projects: list[Project] = []
        for row in rows:
            owner_id = row[4]
            owner = owners.get(owner_id)
            if owner is None:
                owner = row_to_user(row, offset=_PROJECT_COLUMN_COUNT)
                owners[owner_id] = owner
            projects.append(row_to_project(row, owner=owner))
        await self._attach_tasks(projects)
        return projects

    async def _attach_tasks(self, projects: list[Project]) -> None:
        """批量加载任务并建立 Project <-> Task 关系"""
        if not projects:
            return
        by_id = {p.id: p for p in projects}
        rows = await self._task_store.fetch_rows_for_projects(list(by_id))
        known = {p.owner.id: p.owner for p in projects if p.owner is not None}
        assignee_ids = {row[7] for row in rows if row[7] is not None}
        users = await fetch_users_by_ids(self._conn, assignee_ids, known)
        for row in rows:
            assignee = users.get(row[7]) if row[7] is not None else None
            row_to_task(row, project=by_id[row[6]], assignee=assignee)
