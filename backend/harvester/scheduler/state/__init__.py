"""调度状态模块

调度配置值对象与执行历史。
"""

from harvester.scheduler.state.models import (
    MIN_FIXED_RATE_MS,
    ScheduleConfig,
    TaskExecutionRecord,
    TaskState,
)

__all__ = [
    "MIN_FIXED_RATE_MS",
    "ScheduleConfig",
    "TaskExecutionRecord",
    "TaskState",
]
