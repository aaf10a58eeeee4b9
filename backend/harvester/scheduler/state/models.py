"""调度状态模型

- ScheduleConfig: 调度配置的不可变值对象，所有变更都返回新对象
- TaskState / TaskExecutionRecord: 执行器在内存中维护的运行统计与历史
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

MIN_FIXED_RATE_MS = 1000


@dataclass(frozen=True)
class ScheduleConfig:
    """调度配置

    cron_expression 与 fixed_rate_ms 互斥；两者都为空时配置处于惰性状态
    （即使启用也不会触发），这不是错误。

    Attributes:
        scheduler_id: 调度标识（与任务注册中心的键一致）
        scheduler_name: 显示名称
        cron_expression: cron 表达式
        fixed_rate_ms: 固定间隔（毫秒）
        is_enabled: 是否启用
        last_run_at: 上次触发时间
        next_run_at: 下次触发时间（仅供参考）
        last_crawled_page: 任务进度游标
    """

    scheduler_id: str
    scheduler_name: str
    cron_expression: str | None = None
    fixed_rate_ms: int | None = None
    is_enabled: bool = True
    last_run_at: datetime | None = None
    next_run_at: datetime | None = None
    last_crawled_page: int = 1
    uuid: str | None = None

    @property
    def has_trigger(self) -> bool:
        return bool(self.cron_expression) or bool(self.fixed_rate_ms and self.fixed_rate_ms > 0)

    def toggled(self) -> "ScheduleConfig":
        return replace(self, is_enabled=not self.is_enabled)

    def enabled(self) -> "ScheduleConfig":
        return replace(self, is_enabled=True)

    def disabled(self) -> "ScheduleConfig":
        return replace(self, is_enabled=False)

    def with_fixed_rate(self, fixed_rate_ms: int) -> "ScheduleConfig":
        """切换为固定间隔触发（清除 cron）"""
        if fixed_rate_ms < MIN_FIXED_RATE_MS:
            raise ValueError(f"fixed_rate_ms 不能小于 {MIN_FIXED_RATE_MS}: {fixed_rate_ms}")
        return replace(self, fixed_rate_ms=fixed_rate_ms, cron_expression=None)

    def with_cron(self, cron_expression: str) -> "ScheduleConfig":
        """切换为 cron 触发（清除固定间隔）"""
        return replace(self, cron_expression=cron_expression, fixed_rate_ms=None)

    def with_last_run(self, at: datetime) -> "ScheduleConfig":
        return replace(self, last_run_at=at)

    def with_next_run(self, at: datetime | None) -> "ScheduleConfig":
        return replace(self, next_run_at=at)

    def with_cursor_advanced(self) -> "ScheduleConfig":
        return replace(self, last_crawled_page=(self.last_crawled_page or 1) + 1)

    def changes_from(self, other: "ScheduleConfig") -> dict[str, Any]:
        """与另一份配置比较，返回发生变化的持久化字段"""
        return {
            name: getattr(self, name)
            for name in PERSISTED_FIELDS
            if getattr(self, name) != getattr(other, name)
        }


# scheduler_id / uuid 一经创建不再变化
PERSISTED_FIELDS = (
    "scheduler_name",
    "cron_expression",
    "fixed_rate_ms",
    "is_enabled",
    "last_run_at",
    "next_run_at",
    "last_crawled_page",
)


@dataclass
class TaskState:
    """任务运行时统计（仅内存）"""

    scheduler_id: str
    last_result: str | None = None
    last_error: str | None = None
    run_count: int = 0
    fail_count: int = 0
    skip_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "scheduler_id": self.scheduler_id,
            "last_result": self.last_result,
            "last_error": self.last_error,
            "run_count": self.run_count,
            "fail_count": self.fail_count,
            "skip_count": self.skip_count,
        }


@dataclass
class TaskExecutionRecord:
    """任务执行记录

    Attributes:
        id: 记录 ID
        scheduler_id: 调度标识
        started_at: 开始时间
        finished_at: 结束时间
        duration_ms: 耗时（毫秒）
        status: 执行结果状态
        message: 结果描述
        error: 错误信息
        data: 附加数据
    """

    id: str
    scheduler_id: str
    started_at: datetime
    finished_at: datetime | None = None
    duration_ms: int | None = None
    status: str = "running"
    message: str = ""
    error: str | None = None
    data: dict[str, Any] = field(default_factory=dict)

    def finish(self, status: str, message: str = "", error: str | None = None) -> None:
        self.finished_at = datetime.now()
        self.duration_ms = int((self.finished_at - self.started_at).total_seconds() * 1000)
        self.status = status
        self.message = message
        self.error = error

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "scheduler_id": self.scheduler_id,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "duration_ms": self.duration_ms,
            "status": self.status,
            "message": self.message,
            "error": self.error,
            "data": self.data,
        }
