"""任务注册中心

scheduler_id -> 任务实例 的查找表，只负责"能跑什么"，
"何时跑、是否跑"由 ScheduleStore 中的配置决定。
"""

from harvester.core.logging import get_logger
from harvester.scheduler.tasks.base import SchedulerTask

logger = get_logger("scheduler.registry")


class TaskRegistry:
    """任务注册中心

    进程启动时一次性注册，运行期间不再变更。

    Example:
        registry = TaskRegistry()
        registry.register(HarvestBoardTask(store))

        task = registry.get("CRAWLER_HOTSSUL")
    """

    def __init__(self):
        self._tasks: dict[str, SchedulerTask] = {}

    def register(self, task: SchedulerTask) -> None:
        """注册任务

        Args:
            task: 任务实例

        Raises:
            ValueError: scheduler_id 已注册（启动期配置错误）
        """
        if task.scheduler_id in self._tasks:
            raise ValueError(f"任务已注册: {task.scheduler_id}")

        self._tasks[task.scheduler_id] = task
        logger.info(
            "注册任务",
            scheduler_id=task.scheduler_id,
            description=getattr(task, "description", ""),
        )

    def get(self, scheduler_id: str) -> SchedulerTask | None:
        """获取任务，不存在则返回 None"""
        return self._tasks.get(scheduler_id)

    def list_all(self) -> list[SchedulerTask]:
        """列出所有任务"""
        return list(self._tasks.values())

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, scheduler_id: str) -> bool:
        return scheduler_id in self._tasks


# 全局任务注册中心实例
task_registry = TaskRegistry()
