"""调度配置存储

以 scheduler_id 为键读写 scheduler_configs 表。
每次写入都是独立的短事务；update() 在同一 scheduler_id 的锁内完成
"读取 → 纯函数变换 → 只写变化字段"，管理操作与任务内的游标推进互不覆盖。
"""

import asyncio
from collections import defaultdict
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from harvester.core.database import session_scope
from harvester.core.logging import get_logger
from harvester.models.scheduler import SchedulerConfig
from harvester.repositories.scheduler import SchedulerConfigRepository
from harvester.scheduler.state.models import ScheduleConfig

logger = get_logger("scheduler.store")


def to_value(row: SchedulerConfig) -> ScheduleConfig:
    """ORM 行 -> 值对象"""
    return ScheduleConfig(
        scheduler_id=row.scheduler_id,
        scheduler_name=row.scheduler_name,
        cron_expression=row.cron_expression,
        fixed_rate_ms=row.fixed_rate_ms,
        is_enabled=bool(row.is_enabled),
        last_run_at=row.last_run_at,
        next_run_at=row.next_run_at,
        last_crawled_page=row.last_crawled_page or 1,
        uuid=row.uuid,
    )


class ScheduleStore:
    """调度配置存储

    Example:
        store = ScheduleStore()
        config = await store.update("CRAWLER_HOTSSUL", lambda c: c.with_cron("0 * * * *"))
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None):
        self._session_factory = session_factory
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def get(self, scheduler_id: str) -> ScheduleConfig | None:
        """获取配置，不存在返回 None"""
        async with session_scope(self._session_factory) as session:
            row = await SchedulerConfigRepository(session).get_by_scheduler_id(scheduler_id)
            return to_value(row) if row else None

    async def list_all(self) -> list[ScheduleConfig]:
        """列出全部配置"""
        async with session_scope(self._session_factory) as session:
            rows = await SchedulerConfigRepository(session).list_ordered()
            return [to_value(row) for row in rows]

    async def list_enabled(self) -> list[ScheduleConfig]:
        """列出所有启用的配置（启动时据此装载定时器）"""
        async with session_scope(self._session_factory) as session:
            rows = await SchedulerConfigRepository(session).list_enabled()
            return [to_value(row) for row in rows]

    async def create(self, config: ScheduleConfig) -> ScheduleConfig:
        """新增配置

        Raises:
            ValueError: scheduler_id 已存在
        """
        async with self._locks[config.scheduler_id]:
            async with session_scope(self._session_factory) as session:
                repo = SchedulerConfigRepository(session)
                if await repo.get_by_scheduler_id(config.scheduler_id):
                    raise ValueError(f"调度配置已存在: {config.scheduler_id}")

                row = await repo.create(
                    SchedulerConfig(
                        scheduler_id=config.scheduler_id,
                        scheduler_name=config.scheduler_name,
                        cron_expression=config.cron_expression,
                        fixed_rate_ms=config.fixed_rate_ms,
                        is_enabled=config.is_enabled,
                        last_run_at=config.last_run_at,
                        next_run_at=config.next_run_at,
                        last_crawled_page=config.last_crawled_page,
                    )
                )
                created = to_value(row)

        logger.info("创建调度配置", scheduler_id=created.scheduler_id)
        return created

    async def update(
        self,
        scheduler_id: str,
        mutate: Callable[[ScheduleConfig], ScheduleConfig],
    ) -> ScheduleConfig | None:
        """原子地读-改-写一条配置

        Args:
            scheduler_id: 调度标识
            mutate: 纯函数，接收当前配置返回新配置；抛出的异常原样传出，配置不变

        Returns:
            更新后的配置，不存在返回 None
        """
        lock = self._locks[scheduler_id]
        async with lock:
            async with session_scope(self._session_factory) as session:
                repo = SchedulerConfigRepository(session)
                row = await repo.get_by_scheduler_id(scheduler_id)
                if row is not None:
                    current = to_value(row)
                    updated = mutate(current)
                    changes = updated.changes_from(current)
                    await repo.update_fields(scheduler_id, changes)

        if row is None:
            self._discard_lock(scheduler_id, lock)
            return None

        if changes:
            logger.debug("更新调度配置", scheduler_id=scheduler_id, fields=sorted(changes))
        return updated

    def _discard_lock(self, scheduler_id: str, lock: asyncio.Lock) -> None:
        # 未知标识不保留锁
        if not lock.locked() and self._locks.get(scheduler_id) is lock:
            del self._locks[scheduler_id]
