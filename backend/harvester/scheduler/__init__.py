"""运行期可重配的任务调度模块

- SchedulerEngine: 调度引擎，按配置装载/撤销定时器
- ScheduleStore: 调度配置存储（scheduler_configs 表）
- TaskRegistry: 任务注册中心
- TaskRunner: 任务执行器（失败边界 + 单飞）

使用方式：
    from harvester.scheduler import scheduler_engine, task_registry
    from harvester.scheduler.tasks import HarvestBoardTask

    # 注册任务
    task_registry.register(HarvestBoardTask(scheduler_engine.store))

    # 启动调度器
    await scheduler_engine.startup()
"""

from harvester.scheduler.engine import SchedulerEngine, scheduler_engine
from harvester.scheduler.registry import TaskRegistry, task_registry
from harvester.scheduler.runner import TaskRunner
from harvester.scheduler.store import ScheduleStore

__all__ = [
    "ScheduleStore",
    "SchedulerEngine",
    "TaskRegistry",
    "TaskRunner",
    "scheduler_engine",
    "task_registry",
]
