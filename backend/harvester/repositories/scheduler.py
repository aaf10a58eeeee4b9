"""调度配置 Repository"""

from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from harvester.models.scheduler import SchedulerConfig
from harvester.repositories.base import BaseRepository


class SchedulerConfigRepository(BaseRepository[SchedulerConfig]):
    """调度配置数据访问"""

    model = SchedulerConfig

    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def get_by_scheduler_id(self, scheduler_id: str) -> SchedulerConfig | None:
        """根据调度标识获取配置"""
        result = await self.session.execute(
            select(SchedulerConfig).where(SchedulerConfig.scheduler_id == scheduler_id)
        )
        return result.scalar_one_or_none()

    async def list_ordered(self) -> list[SchedulerConfig]:
        """按创建顺序列出全部配置"""
        result = await self.session.execute(
            select(SchedulerConfig).order_by(SchedulerConfig.id)
        )
        return list(result.scalars().all())

    async def list_enabled(self) -> list[SchedulerConfig]:
        """列出所有启用的配置"""
        result = await self.session.execute(
            select(SchedulerConfig)
            .where(SchedulerConfig.is_enabled.is_(True))
            .order_by(SchedulerConfig.id)
        )
        return list(result.scalars().all())

    async def update_fields(self, scheduler_id: str, values: dict[str, Any]) -> None:
        """只更新给定字段

        Args:
            scheduler_id: 调度标识
            values: 列名 -> 新值
        """
        if not values:
            return
        await self.session.execute(
            update(SchedulerConfig)
            .where(SchedulerConfig.scheduler_id == scheduler_id)
            .values(**values)
        )
        await self.session.flush()
