"""任务执行器

负责执行具体任务，处理超时、异常捕获、同一任务的单飞控制，并记录执行结果。
"""

import asyncio
import uuid
from collections import deque
from datetime import datetime

from harvester.core.config import settings
from harvester.core.logging import get_logger
from harvester.scheduler.state.models import TaskExecutionRecord, TaskState
from harvester.scheduler.tasks.base import SchedulerTask, TaskResult, TaskResultStatus

logger = get_logger("scheduler.runner")


class TaskRunner:
    """任务执行器

    职责：
    1. 执行任务并捕获异常（任务失败不影响定时器和其他任务）
    2. 同一 scheduler_id 同时最多一次执行，重叠的触发直接跳过
    3. 记录执行时间和结果

    Attributes:
        default_timeout: 默认超时时间（秒）
        history_limit: 保留的执行记录条数
    """

    def __init__(
        self,
        default_timeout: int | None = None,
        history_limit: int | None = None,
    ):
        self.default_timeout = default_timeout or settings.SCHEDULER_TASK_TIMEOUT
        self.history_limit = history_limit or settings.SCHEDULER_HISTORY_LIMIT
        self._task_states: dict[str, TaskState] = {}
        self._execution_history: deque[TaskExecutionRecord] = deque(maxlen=self.history_limit)
        self._running_tasks: set[str] = set()

    def get_state(self, scheduler_id: str) -> TaskState:
        """获取任务统计，不存在则创建默认值"""
        if scheduler_id not in self._task_states:
            self._task_states[scheduler_id] = TaskState(scheduler_id=scheduler_id)
        return self._task_states[scheduler_id]

    def peek_state(self, scheduler_id: str) -> TaskState | None:
        """获取任务统计，尚未执行过返回 None"""
        return self._task_states.get(scheduler_id)

    def is_running(self, scheduler_id: str) -> bool:
        """任务当前是否有执行在进行中"""
        return scheduler_id in self._running_tasks

    async def execute(
        self, task: SchedulerTask, timeout: int | None = None
    ) -> TaskExecutionRecord:
        """执行任务

        Args:
            task: 任务实例
            timeout: 超时时间（秒），为 None 则使用默认值

        Returns:
            执行记录
        """
        scheduler_id = task.scheduler_id
        state = self.get_state(scheduler_id)
        timeout = timeout or self.default_timeout

        record = TaskExecutionRecord(
            id=str(uuid.uuid4()),
            scheduler_id=scheduler_id,
            started_at=datetime.now(),
        )

        if self.is_running(scheduler_id):
            logger.warning("任务正在运行，跳过本次触发", scheduler_id=scheduler_id)
            skipped = TaskResult.skipped("任务正在运行，跳过本次执行")
            record.finish(skipped.status.value, skipped.message)
            state.skip_count += 1
            self._execution_history.append(record)
            return record

        self._running_tasks.add(scheduler_id)
        logger.info("开始执行任务", scheduler_id=scheduler_id, record_id=record.id)

        try:
            result = await asyncio.wait_for(task.run(), timeout=timeout)

            record.finish(result.status.value, result.message, result.error)
            record.data = result.data
            state.last_result = result.status.value
            state.last_error = result.error
            state.run_count += 1
            if result.status == TaskResultStatus.FAILED:
                state.fail_count += 1
                logger.warning(
                    "任务执行失败",
                    scheduler_id=scheduler_id,
                    error=result.error,
                    duration_ms=record.duration_ms,
                )
            else:
                logger.info(
                    "任务执行完成",
                    scheduler_id=scheduler_id,
                    status=result.status.value,
                    duration_ms=record.duration_ms,
                    data=result.data,
                )

        except asyncio.TimeoutError:
            record.finish(
                TaskResultStatus.FAILED.value, "执行超时", f"任务执行超过 {timeout} 秒"
            )
            state.last_result = TaskResultStatus.FAILED.value
            state.last_error = record.error
            state.run_count += 1
            state.fail_count += 1
            logger.error("任务执行超时", scheduler_id=scheduler_id, timeout=timeout)

        except asyncio.CancelledError:
            record.finish("cancelled", "执行被取消")
            logger.info("任务执行被取消", scheduler_id=scheduler_id)
            raise

        except Exception as e:
            record.finish(TaskResultStatus.FAILED.value, "执行异常", str(e))
            state.last_result = TaskResultStatus.FAILED.value
            state.last_error = str(e)
            state.run_count += 1
            state.fail_count += 1
            logger.exception("任务执行异常", scheduler_id=scheduler_id, error=str(e))

        finally:
            self._running_tasks.discard(scheduler_id)
            self._execution_history.append(record)

        return record

    def get_history(
        self, scheduler_id: str | None = None, limit: int = 10
    ) -> list[TaskExecutionRecord]:
        """获取执行历史（按开始时间倒序）

        Args:
            scheduler_id: 调度标识，为 None 则返回所有任务
            limit: 返回条数
        """
        records = list(self._execution_history)
        if scheduler_id:
            records = [r for r in records if r.scheduler_id == scheduler_id]
        return sorted(records, key=lambda r: r.started_at, reverse=True)[:limit]
