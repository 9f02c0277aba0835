"""CLI 入口模块 -- python -m taskflow.core <command>

支持的命令：
  init-db  创建数据库表与索引
  stats    按状态统计用户 / 项目 / 任务数量
"""

import asyncio
import sys

from .config import get_db_path
from .models.enums import ProjectStatus, TaskStatus, UserStatus


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print("用法: python -m taskflow.core <command>")
        print("命令:")
        print("  init-db  创建数据库表与索引")
        print("  stats    按状态统计用户 / 项目 / 任务数量")
        sys.exit(1)

    command = sys.argv[1]

    if command == "init-db":
        asyncio.run(init_database())
    elif command == "stats":
        asyncio.run(print_stats())
    else:
        print(f"未知命令: {command}")
        print("可用命令: init-db, stats")
        sys.exit(1)


async def init_database() -> None:
    """创建 schema（已存在的表保持不变）"""
    from .store import create_store_group

    db_path = get_db_path()
    print(f"数据库路径: {db_path}")

    store_group = await create_store_group(db_path)
    await store_group.conn.close()
    print("初始化完成")


async def collect_stats(store_group) -> dict[str, dict[str, int]]:
    """按状态统计各实体数量"""
    users = {
        status.value: await store_group.user_store.count_by_status(status)
        for status in UserStatus
    }
    projects = {
        status.value: await store_group.project_store.count_projects(status=status)
        for status in ProjectStatus
    }
    tasks = {
        status.value: await store_group.task_store.count_tasks(status=status)
        for status in TaskStatus
    }
    return {"users": users, "projects": projects, "tasks": tasks}


async def print_stats() -> None:
    """输出统计结果"""
    from .store import create_store_group

    store_group = await create_store_group(get_db_path())
    try:
        stats = await collect_stats(store_group)
    finally:
        await store_group.conn.close()

    for kind, counts in stats.items():
        summary = ", ".join(f"{status}={count}" for status, count in counts.items())
        print(f"{kind}: {summary}")


if __name__ == "__main__":
    main()
