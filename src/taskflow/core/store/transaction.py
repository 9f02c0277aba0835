"""聚合原子持久化

一次领域变更对应一个 SQLite 事务：成功则提交，失败则回滚并还原
内存实体上由本次保存分配的 id / 时间戳，然后重新抛出异常。
"""

from collections.abc import Iterable
from contextlib import asynccontextmanager
from datetime import datetime

import aiosqlite

from ..models.base import Entity
from ..models.project import Project
from ..models.user import User
from .project_store import SqliteProjectStore
from .task_store import SqliteTaskStore
from .user_store import SqliteUserStore

_Snapshot = list[tuple[Entity, int | None, datetime | None, datetime | None]]


def _snapshot(entities: Iterable[Entity]) -> _Snapshot:
    return [(e, e.id, e.created_at, e.updated_at) for e in entities]


def _restore(snapshot: _Snapshot) -> None:
    for entity, entity_id, created_at, updated_at in snapshot:
        entity.id = entity_id
        entity.created_at = created_at
        entity.updated_at = updated_at


@asynccontextmanager
async def atomic(conn: aiosqlite.Connection, entities: Iterable[Entity] = ()):
    """事务上下文：正常退出提交，异常时回滚并还原实体标识"""
    snapshot = _snapshot(entities)
    try:
        yield
        await conn.commit()
    except Exception:
        await conn.rollback()
        _restore(snapshot)
        raise


async def save_user(
    conn: aiosqlite.Connection,
    user_store: SqliteUserStore,
    user: User,
) -> None:
    """原子保存单个用户"""
    async with atomic(conn, [user]):
        await user_store.save_user(user)


async def save_project_aggregate(
    conn: aiosqlite.Connection,
    project_store: SqliteProjectStore,
    task_store: SqliteTaskStore,
    project: Project,
) -> None:
    """在同一事务内保存项目及其全部任务

    Args:
        conn: 数据库连接（需在同一连接上操作以保证事务性）
        project_store: ProjectStore 实例
        task_store: TaskStore 实例
        project: 要保存的项目聚合
    """
    tasks = project.tasks
    async with atomic(conn, [project, *tasks]):
        await project_store.save_project(project)
        for task in tasks:
            await task_store.save_task(task)


async def persist_task_removal(
    conn: aiosqlite.Connection,
    project_store: SqliteProjectStore,
    task_store: SqliteTaskStore,
    project: Project,
    task_id: int,
) -> None:
    """持久化 Project.remove_task 的结果（同一事务）

    领域层移除后任务处于无所属项目的游离状态；tasks.project_id 非空，
    因此持久化时直接删除该任务记录。
    """
    async with atomic(conn, [project]):
        await task_store.delete_task(task_id)
        await project_store.save_project(project)
