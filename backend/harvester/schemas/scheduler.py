"""调度管理相关 Schema"""

from datetime import datetime
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from harvester.scheduler.state.models import ScheduleConfig, TaskState


class TaskStatsResponse(BaseModel):
    """执行统计（进程重启后清零）"""

    run_count: int = 0
    fail_count: int = 0
    skip_count: int = 0
    last_result: str | None = None
    last_error: str | None = None


class SchedulerResponse(BaseModel):
    """调度配置 + 实时运行状态"""

    uuid: str | None = None
    scheduler_id: str
    scheduler_name: str
    cron_expression: str | None = None
    fixed_rate_ms: int | None = None
    is_enabled: bool
    is_running: bool = Field(description="当前是否已装载定时器")
    last_run_at: datetime | None = None
    next_run_at: datetime | None = None
    last_crawled_page: int = 1
    stats: TaskStatsResponse | None = Field(default=None, description="本进程内的执行统计")

    @classmethod
    def from_config(
        cls,
        config: "ScheduleConfig",
        is_running: bool,
        stats: "TaskState | None" = None,
    ) -> "SchedulerResponse":
        return cls(
            uuid=config.uuid,
            scheduler_id=config.scheduler_id,
            scheduler_name=config.scheduler_name,
            cron_expression=config.cron_expression,
            fixed_rate_ms=config.fixed_rate_ms,
            is_enabled=config.is_enabled,
            is_running=is_running,
            last_run_at=config.last_run_at,
            next_run_at=config.next_run_at,
            last_crawled_page=config.last_crawled_page,
            stats=TaskStatsResponse(**stats.to_dict()) if stats is not None else None,
        )


class UpdateIntervalRequest(BaseModel):
    """修改固定间隔请求"""

    fixed_rate_ms: int = Field(description="固定间隔（毫秒），最小 1000")


class UpdateCronRequest(BaseModel):
    """修改 cron 表达式请求"""

    cron_expression: str = Field(min_length=1, max_length=50, description="cron 表达式")


class SchedulerActionResponse(BaseModel):
    """管理操作响应"""

    success: bool = True
    message: str
    data: SchedulerResponse | None = None


class ExecutionRecordResponse(BaseModel):
    """执行记录响应"""

    id: str
    scheduler_id: str
    started_at: str
    finished_at: str | None
    duration_ms: int | None
    status: str
    message: str
    error: str | None
    data: dict[str, Any] = Field(default_factory=dict)
