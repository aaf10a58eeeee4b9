"""任务接口

调度器只关心两件事：任务的 scheduler_id 和可等待的 run()。
任何满足 SchedulerTask 协议的对象都可以注册，无需继承。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable


class TaskResultStatus(str, Enum):
    """任务执行结果状态"""

    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class TaskResult:
    """任务执行结果

    Attributes:
        status: 执行状态
        message: 结果描述
        data: 附加数据（如保存条数、页码等）
        error: 错误信息（失败时）
    """

    status: TaskResultStatus
    message: str = ""
    data: dict[str, Any] = field(default_factory=dict)
    error: str | None = None

    @classmethod
    def success(cls, message: str = "执行成功", **data) -> "TaskResult":
        return cls(status=TaskResultStatus.SUCCESS, message=message, data=data)

    @classmethod
    def failed(cls, error: str, message: str = "执行失败", **data) -> "TaskResult":
        return cls(status=TaskResultStatus.FAILED, message=message, error=error, data=data)

    @classmethod
    def skipped(cls, message: str = "跳过执行") -> "TaskResult":
        return cls(status=TaskResultStatus.SKIPPED, message=message)


@runtime_checkable
class SchedulerTask(Protocol):
    """可调度任务

    Example:
        class CleanupTask:
            scheduler_id = "CLEANUP"
            description = "清理过期数据"

            async def run(self) -> TaskResult:
                return TaskResult.success("完成", removed=10)
    """

    scheduler_id: str
    description: str

    async def run(self) -> TaskResult:
        """执行一次任务"""
        ...
