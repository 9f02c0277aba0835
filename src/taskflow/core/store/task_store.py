"""TaskStore SQLite 实现

查询形状：按项目 / 指派人 / 状态 / 优先级精确匹配，按截止时间范围，
按标题 / 描述大小写不敏感子串。查询结果中的任务只携带项目 id，
需要修改任务时应通过 ProjectStore.get_project 加载整个聚合。
"""

from datetime import datetime
from typing import TYPE_CHECKING

import aiosqlite

from ..models.base import utcnow
from ..models.enums import TaskPriority, TaskStatus
from ..models.hydration import mark_persisted, restore_task, touch
from ..models.task import Task
from ..models.user import User
from .user_store import fetch_users_by_ids, from_db_time, to_db_time

if TYPE_CHECKING:
    from ..models.project import Project

TASK_COLUMNS = (
    "id, title, description, status, priority, due_date, project_id, assigned_to, "
    "created_at, updated_at"
)


def row_to_task(
    row: aiosqlite.Row,
    project: "Project | None" = None,
    assignee: User | None = None,
) -> Task:
    """将数据库行转换为 Task；提供 project 时建立双向关系"""
    return restore_task(
        project=project,
        assigned_to=assignee,
        project_id=row[6],
        id=row[0],
        title=row[1],
        description=row[2],
        status=row[3],
        priority=row[4],
        due_date=from_db_time(row[5]),
        created_at=from_db_time(row[8]),
        updated_at=from_db_time(row[9]),
    )


class SqliteTaskStore:
    """TaskStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def save_task(self, task: Task) -> None:
        """插入或更新任务（不自动提交）

        Raises:
            ValueError: 任务没有已持久化的所属项目
        """
        if task.project_id is None:
            raise ValueError("Task must belong to a persisted project before saving")
        now = utcnow()
        values = (
            task.title,
            task.description,
            task.status.value,
            task.priority.value,
            to_db_time(task.due_date) if task.due_date else None,
            task.project_id,
            task.assigned_to_id,
        )
        if task.id is None:
            cursor = await self._conn.execute(
                """
                INSERT INTO tasks (title, description, status, priority, due_date,
                                   project_id, assigned_to, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (*values, to_db_time(now), to_db_time(now)),
            )
            mark_persisted(task, cursor.lastrowid, now)
        else:
            await self._conn.execute(
                """
                UPDATE tasks
                SET title = ?, description = ?, status = ?, priority = ?, due_date = ?,
                    project_id = ?, assigned_to = ?, updated_at = ?
                WHERE id = ?
                """,
                (*values, to_db_time(now), task.id),
            )
            touch(task, now)

    async def get_task(self, task_id: int) -> Task | None:
        """根据 id 查询任务（含指派人，不含项目对象）"""
        tasks = await self._query(f"SELECT {TASK_COLUMNS} FROM tasks WHERE id = ?", (task_id,))
        return tasks[0] if tasks else None

    async def get_project_id(self, task_id: int) -> int | None:
        """查询任务所属项目 id（用于定位聚合）"""
        cursor = await self._conn.execute("SELECT project_id FROM tasks WHERE id = ?", (task_id,))
        row = await cursor.fetchone()
        return row[0] if row else None

    async def list_tasks(
        self,
        project_id: int | None = None,
        assigned_to: int | None = None,
        status: TaskStatus | None = None,
        priority: TaskPriority | None = None,
    ) -> list[Task]:
        """精确匹配筛选，所有条件取交集，按 id 正序"""
        clauses: list[str] = []
        params: list = []
        if project_id is not None:
            clauses.append("project_id = ?")
            params.append(project_id)
        if assigned_to is not None:
            clauses.append("assigned_to = ?")
            params.append(assigned_to)
        if status is not None:
            clauses.append("status = ?")
            params.append(status.value)
        if priority is not None:
            clauses.append("priority = ?")
            params.append(priority.value)
        return await self._query(self._select(clauses), tuple(params))

    async def list_due_before(self, moment: datetime) -> list[Task]:
        """截止时间严格早于 moment"""
        return await self._query(
            self._select(["due_date IS NOT NULL", "due_date < ?"]), (to_db_time(moment),)
        )

    async def list_due_after(self, moment: datetime) -> list[Task]:
        """截止时间严格晚于 moment"""
        return await self._query(
            self._select(["due_date IS NOT NULL", "due_date > ?"]), (to_db_time(moment),)
        )

    async def list_due_between(self, start: datetime, end: datetime) -> list[Task]:
        """截止时间在 [start, end] 闭区间内"""
        return await self._query(
            self._select(["due_date IS NOT NULL", "due_date BETWEEN ? AND ?"]),
            (to_db_time(start), to_db_time(end)),
        )

    async def search_tasks(
        self,
        title: str | None = None,
        description: str | None = None,
    ) -> list[Task]:
        """标题 / 描述大小写不敏感子串查询"""
        clauses: list[str] = []
        params: list = []
        if title:
            clauses.append("instr(lower(title), lower(?)) > 0")
            params.append(title)
        if description:
            clauses.append("description IS NOT NULL AND instr(lower(description), lower(?)) > 0")
            params.append(description)
        return await self._query(self._select(clauses), tuple(params))

    async def count_tasks(
        self,
        project_id: int | None = None,
        status: TaskStatus | None = None,
        assigned_to: int | None = None,
    ) -> int:
        clauses: list[str] = []
        params: list = []
        if project_id is not None:
            clauses.append("project_id = ?")
            params.append(project_id)
        if status is not None:
            clauses.append("status = ?")
            params.append(status.value)
        if assigned_to is not None:
            clauses.append("assigned_to = ?")
            params.append(assigned_to)
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        cursor = await self._conn.execute(f"SELECT COUNT(*) FROM tasks{where}", tuple(params))
        row = await cursor.fetchone()
        return row[0] if row else 0

    async def delete_task(self, task_id: int) -> bool:
        """删除任务；不自动提交"""
        cursor = await self._conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
        return cursor.rowcount > 0

    async def fetch_rows_for_projects(self, project_ids: list[int]) -> list[aiosqlite.Row]:
        """批量读取多个项目的任务行（ProjectStore 组装聚合时使用）"""
        if not project_ids:
            return []
        placeholders = ", ".join("?" for _ in project_ids)
        cursor = await self._conn.execute(
            f"SELECT {TASK_COLUMNS} FROM tasks WHERE project_id IN ({placeholders}) "
            "ORDER BY id ASC",
            tuple(project_ids),
        )
        return list(await cursor.fetchall())

    @staticmethod
    def _select(clauses: list[str]) -> str:
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        return f"SELECT {TASK_COLUMNS} FROM tasks{where} ORDER BY id ASC"

    async def _query(self, sql: str, params: tuple) -> list[Task]:
        cursor = await self._conn.execute(sql, params)
        rows = await cursor.fetchall()
        assignee_ids = {row[7] for row in rows if row[7] is not None}
        assignees = await fetch_users_by_ids(self._conn, assignee_ids)
        return [
            row_to_task(row, assignee=assignees.get(row[7]) if row[7] is not None else None)
            for row in rows
        ]
