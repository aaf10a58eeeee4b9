"""调度配置初始化器

负责在应用启动时把预置调度配置写入数据库。
已存在的 scheduler_id 不做任何修改，运行期通过管理接口做的调整在重启后保留。
"""

from typing import Any

from harvester.core.config import settings
from harvester.core.logging import get_logger
from harvester.scheduler.state.models import MIN_FIXED_RATE_MS, ScheduleConfig
from harvester.scheduler.store import ScheduleStore
from harvester.scheduler.triggers import is_valid_cron

logger = get_logger("scheduler.initializer")


def default_seeds() -> list[dict[str, Any]]:
    """内置的抓取调度 + SCHEDULER_CONFIGS_JSON 中的预置项"""
    return [
        {
            "scheduler_id": settings.HARVEST_SCHEDULER_ID,
            "scheduler_name": settings.HARVEST_SCHEDULER_NAME,
            "fixed_rate_ms": settings.HARVEST_FIXED_RATE_MS,
            "is_enabled": settings.HARVEST_ENABLED,
        },
        *settings.scheduler_seeds,
    ]


def _seed_to_config(seed: dict[str, Any]) -> ScheduleConfig | None:
    scheduler_id = seed.get("scheduler_id")
    if not scheduler_id:
        logger.warning("预置调度缺少 scheduler_id", seed=seed)
        return None

    cron_expression = seed.get("cron_expression") or None
    fixed_rate_ms = seed.get("fixed_rate_ms")

    if cron_expression and (
        not isinstance(cron_expression, str) or not is_valid_cron(cron_expression)
    ):
        logger.warning("预置调度 cron 表达式无效", scheduler_id=scheduler_id, cron=cron_expression)
        return None

    if fixed_rate_ms is not None:
        try:
            fixed_rate_ms = int(fixed_rate_ms)
        except (TypeError, ValueError):
            logger.warning("预置调度间隔不是整数", scheduler_id=scheduler_id, fixed_rate_ms=fixed_rate_ms)
            return None
    if fixed_rate_ms is not None and fixed_rate_ms < MIN_FIXED_RATE_MS:
        logger.warning("预置调度间隔过小", scheduler_id=scheduler_id, fixed_rate_ms=fixed_rate_ms)
        return None

    return ScheduleConfig(
        scheduler_id=scheduler_id,
        scheduler_name=seed.get("scheduler_name") or scheduler_id,
        cron_expression=cron_expression,
        # cron 与固定间隔互斥，同时给出时以 cron 为准
        fixed_rate_ms=None if cron_expression else fixed_rate_ms,
        is_enabled=bool(seed.get("is_enabled", True)),
    )


async def init_scheduler_configs(
    store: ScheduleStore,
    seeds: list[dict[str, Any]] | None = None,
) -> list[str]:
    """创建缺失的预置调度配置

    Args:
        store: 调度配置存储
        seeds: 预置项，为 None 时使用 default_seeds()

    Returns:
        本次新建的 scheduler_id 列表
    """
    created: list[str] = []

    for seed in default_seeds() if seeds is None else seeds:
        config = _seed_to_config(seed)
        if config is None:
            continue

        if await store.get(config.scheduler_id) is not None:
            logger.debug("调度配置已存在，跳过", scheduler_id=config.scheduler_id)
            continue

        await store.create(config)
        created.append(config.scheduler_id)

    if created:
        logger.info("预置调度配置初始化完成", count=len(created), scheduler_ids=created)

    return created
