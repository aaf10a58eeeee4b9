"""调度引擎

基于 APScheduler 的运行期可重配调度器：
每个启用的 scheduler_id 对应一个定时 job，可在不重启进程的情况下
启用/禁用、切换 cron 与固定间隔。
"""

import asyncio
from collections import defaultdict
from collections.abc import Callable
from datetime import datetime

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from harvester.core.errors import raise_bad_request, raise_not_found
from harvester.core.logging import get_logger
from harvester.scheduler.registry import TaskRegistry, task_registry
from harvester.scheduler.runner import TaskRunner
from harvester.scheduler.state.models import (
    MIN_FIXED_RATE_MS,
    ScheduleConfig,
    TaskExecutionRecord,
)
from harvester.scheduler.store import ScheduleStore
from harvester.scheduler.triggers import build_trigger, is_valid_cron
from harvester.schemas.scheduler import SchedulerResponse

logger = get_logger("scheduler.engine")


def job_id_for(scheduler_id: str) -> str:
    return f"scheduler_{scheduler_id}"


class SchedulerEngine:
    """调度引擎

    职责：
    1. 启动时为所有启用的配置装载定时器，关闭时全部撤销
    2. 维护 scheduler_id -> job 的映射，保证每个标识最多一个 job
    3. 运行期启用/禁用/修改触发策略，立即生效
    4. 每次触发记录上次运行时间，并在失败边界内执行任务

    同一 scheduler_id 的重配操作在该标识的锁内完成"撤销旧 job → 装载新 job"，
    不同标识之间互不阻塞。

    Example:
        engine = SchedulerEngine(registry, store)
        await engine.startup()
        await engine.update_cron("CRAWLER_HOTSSUL", "0 */2 * * *")
        await engine.shutdown()
    """

    def __init__(
        self,
        registry: TaskRegistry | None = None,
        store: ScheduleStore | None = None,
        runner: TaskRunner | None = None,
        scheduler: AsyncIOScheduler | None = None,
    ):
        self.registry = registry if registry is not None else task_registry
        self.store = store or ScheduleStore()
        self.runner = runner or TaskRunner()
        self._scheduler = scheduler or AsyncIOScheduler()
        self._job_ids: dict[str, str] = {}  # scheduler_id -> job_id
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._manual_runs: set[asyncio.Task] = set()

    @property
    def started(self) -> bool:
        """APScheduler 是否在运行"""
        return self._scheduler.running

    # ==================== 生命周期 ====================

    async def startup(self) -> None:
        """启动调度器并装载所有启用的配置"""
        if self.started:
            logger.warning("调度器已在运行")
            return

        self._scheduler.start()
        logger.info("调度引擎已启动")

        for config in await self.store.list_enabled():
            await self.start(config.scheduler_id)

        logger.info("已装载启用的调度", armed=sorted(self._job_ids))

    async def shutdown(self) -> None:
        """撤销所有定时器并关闭调度器（不等待进行中的执行）"""
        for scheduler_id in list(self._job_ids):
            self._disarm(scheduler_id)

        if self.started:
            self._scheduler.shutdown(wait=False)
        logger.info("调度引擎已停止")

    # ==================== 装载 / 撤销 ====================

    async def start(self, scheduler_id: str) -> bool:
        """按当前配置（重新）装载定时器

        Returns:
            是否已装载
        """
        lock = await self._lock_for(scheduler_id)
        if lock is None:
            logger.warning("调度配置不存在", scheduler_id=scheduler_id)
            return False
        async with lock:
            return await self._arm(scheduler_id) is not None

    async def stop(self, scheduler_id: str) -> None:
        """撤销定时器；未装载时什么也不做"""
        lock = await self._lock_for(scheduler_id)
        if lock is None:
            return
        async with lock:
            self._disarm(scheduler_id)

    async def _lock_for(self, scheduler_id: str) -> asyncio.Lock | None:
        """已知标识的锁；配置不存在时返回 None，不为其建锁"""
        if scheduler_id not in self._locks and await self.store.get(scheduler_id) is None:
            return None
        return self._locks[scheduler_id]

    def is_running(self, scheduler_id: str) -> bool:
        """是否已装载定时器"""
        job_id = self._job_ids.get(scheduler_id)
        return job_id is not None and self._scheduler.get_job(job_id) is not None

    async def _arm(self, scheduler_id: str) -> ScheduleConfig | None:
        """撤销旧 job 后按配置装载新 job（调用方需持有该标识的锁）"""
        self._disarm(scheduler_id)

        config = await self.store.get(scheduler_id)
        if config is None:
            logger.warning("调度配置不存在", scheduler_id=scheduler_id)
            return None

        if self.registry.get(scheduler_id) is None:
            logger.warning("调度任务未注册，保持停用", scheduler_id=scheduler_id)
            return None

        try:
            trigger = build_trigger(config)
        except ValueError as e:
            logger.error("触发器构造失败", scheduler_id=scheduler_id, error=str(e))
            return None

        if trigger is None:
            logger.warning("未设置触发策略，保持停用", scheduler_id=scheduler_id)
            return None

        if not self.started:
            self._scheduler.start()

        job_kwargs = {}
        if isinstance(trigger, IntervalTrigger):
            # 固定间隔从装载时刻立即开始
            job_kwargs["next_run_time"] = datetime.now(self._scheduler.timezone)

        job = self._scheduler.add_job(
            self._fire,
            trigger=trigger,
            args=[scheduler_id],
            id=job_id_for(scheduler_id),
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            misfire_grace_time=None,
            **job_kwargs,
        )
        self._job_ids[scheduler_id] = job.id

        logger.info(
            "装载调度",
            scheduler_id=scheduler_id,
            cron=config.cron_expression,
            fixed_rate_ms=config.fixed_rate_ms,
            next_run=getattr(job, "next_run_time", None),
        )
        return await self._refresh_next_run(scheduler_id) or config

    def _disarm(self, scheduler_id: str) -> None:
        job_id = self._job_ids.pop(scheduler_id, None)
        if job_id is None:
            return
        try:
            self._scheduler.remove_job(job_id)
        except JobLookupError:
            pass
        logger.info("撤销调度", scheduler_id=scheduler_id)

    # ==================== 触发 ====================

    async def _fire(self, scheduler_id: str) -> TaskExecutionRecord | None:
        """定时触发入口：记录运行时间后在失败边界内执行任务"""
        task = self.registry.get(scheduler_id)
        if task is None:
            logger.warning("调度任务未注册", scheduler_id=scheduler_id)
            return None

        if not self.runner.is_running(scheduler_id):
            now = datetime.now()
            try:
                await self.store.update(scheduler_id, lambda c: c.with_last_run(now))
            except Exception as e:
                logger.exception("记录上次运行时间失败", scheduler_id=scheduler_id, error=str(e))

        logger.info("调度触发任务", scheduler_id=scheduler_id)
        record = await self.runner.execute(task)

        await self._refresh_next_run(scheduler_id)
        return record

    async def _refresh_next_run(self, scheduler_id: str) -> ScheduleConfig | None:
        """把 job 的下次触发时间写回配置（仅供参考）"""
        job_id = self._job_ids.get(scheduler_id)
        job = self._scheduler.get_job(job_id) if job_id else None
        next_run_time = getattr(job, "next_run_time", None) if job else None
        next_run = next_run_time.replace(tzinfo=None) if next_run_time else None

        try:
            return await self.store.update(scheduler_id, lambda c: c.with_next_run(next_run))
        except Exception as e:
            logger.exception("记录下次运行时间失败", scheduler_id=scheduler_id, error=str(e))
            return None

    async def trigger(self, scheduler_id: str) -> bool:
        """手动触发一次（后台执行，不等待结果）"""
        if self.registry.get(scheduler_id) is None:
            raise_not_found("scheduler", scheduler_id)

        logger.info("手动触发任务", scheduler_id=scheduler_id)
        run = asyncio.create_task(self._fire(scheduler_id))
        self._manual_runs.add(run)
        run.add_done_callback(self._manual_runs.discard)
        return True

    # ==================== 管理操作 ====================

    async def list_schedulers(self) -> list[SchedulerResponse]:
        """列出全部配置及实时运行状态"""
        return [self._view(config) for config in await self.store.list_all()]

    async def get_scheduler(self, scheduler_id: str) -> SchedulerResponse:
        config = await self.store.get(scheduler_id)
        if config is None:
            raise_not_found("scheduler", scheduler_id)
        return self._view(config)

    async def toggle(self, scheduler_id: str) -> SchedulerResponse:
        return await self._reconfigure(scheduler_id, lambda c: c.toggled())

    async def enable(self, scheduler_id: str) -> SchedulerResponse:
        return await self._reconfigure(scheduler_id, lambda c: c.enabled())

    async def disable(self, scheduler_id: str) -> SchedulerResponse:
        return await self._reconfigure(scheduler_id, lambda c: c.disabled())

    async def update_interval(self, scheduler_id: str, fixed_rate_ms: int) -> SchedulerResponse:
        """切换为固定间隔（清除 cron），启用中则立即重新装载"""
        if fixed_rate_ms < MIN_FIXED_RATE_MS:
            raise_bad_request(
                "interval_too_small",
                f"间隔不能小于 {MIN_FIXED_RATE_MS}ms",
                {"min": MIN_FIXED_RATE_MS, "value": fixed_rate_ms},
            )
        return await self._reconfigure(scheduler_id, lambda c: c.with_fixed_rate(fixed_rate_ms))

    async def update_cron(self, scheduler_id: str, cron_expression: str) -> SchedulerResponse:
        """切换为 cron（清除固定间隔），启用中则立即重新装载

        表达式按原样保存（含首尾空白），解析时按空白分段。
        """
        if not is_valid_cron(cron_expression):
            raise_bad_request(
                "invalid_cron_expression",
                f"无效的 cron 表达式: {cron_expression}",
                {"value": cron_expression},
            )
        return await self._reconfigure(scheduler_id, lambda c: c.with_cron(cron_expression))

    async def _reconfigure(
        self,
        scheduler_id: str,
        mutate: Callable[[ScheduleConfig], ScheduleConfig],
    ) -> SchedulerResponse:
        """持久化变更后按新的启用状态装载或撤销"""
        lock = await self._lock_for(scheduler_id)
        if lock is None:
            raise_not_found("scheduler", scheduler_id)

        async with lock:
            config = await self.store.update(scheduler_id, mutate)
            if config is None:
                raise_not_found("scheduler", scheduler_id)

            if config.is_enabled:
                config = await self._arm(scheduler_id) or config
            else:
                self._disarm(scheduler_id)

            return self._view(config)

    def _view(self, config: ScheduleConfig) -> SchedulerResponse:
        return SchedulerResponse.from_config(
            config,
            self.is_running(config.scheduler_id),
            self.runner.peek_state(config.scheduler_id),
        )

    def get_history(self, scheduler_id: str, limit: int = 10) -> list[TaskExecutionRecord]:
        return self.runner.get_history(scheduler_id, limit)


# 全局调度引擎实例
scheduler_engine = SchedulerEngine()
