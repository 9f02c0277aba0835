"""AggregateLocks -- 聚合级互斥

同一聚合（用户 / 项目）的变更在进程内串行执行：
加载 -> 一次领域变更 -> 单事务持久化，整个过程持有该聚合的锁。
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class AggregateLocks:
    """按 "kind:id" 懒创建的 asyncio.Lock 注册表"""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._guard = asyncio.Lock()

    async def get_lock(self, kind: str, aggregate_id: int) -> asyncio.Lock:
        key = f"{kind}:{aggregate_id}"
        async with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = asyncio.Lock()
                self._locks[key] = lock
            return lock

    @asynccontextmanager
    async def hold(self, kind: str, aggregate_id: int) -> AsyncIterator[None]:
        lock = await self.get_lock(kind, aggregate_id)
        async with lock:
            yield

    def __len__(self) -> int:
        return len(self._locks)
