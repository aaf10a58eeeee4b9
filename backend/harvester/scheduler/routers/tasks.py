"""调度管理 API 路由

运行期查看与调整调度配置，修改立即作用于定时器，无需重启。
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from harvester.scheduler.engine import SchedulerEngine, scheduler_engine
from harvester.schemas.scheduler import (
    ExecutionRecordResponse,
    SchedulerActionResponse,
    SchedulerResponse,
    UpdateCronRequest,
    UpdateIntervalRequest,
)

router = APIRouter(prefix="/api/admin/schedulers", tags=["scheduler-admin"])


def get_scheduler_engine() -> SchedulerEngine:
    return scheduler_engine


EngineDep = Annotated[SchedulerEngine, Depends(get_scheduler_engine)]


# ==================== 查询 ====================


@router.get("", response_model=list[SchedulerResponse])
async def list_schedulers(engine: EngineDep):
    """列出所有调度配置及运行状态"""
    return await engine.list_schedulers()


@router.get("/{scheduler_id}", response_model=SchedulerResponse)
async def get_scheduler(scheduler_id: str, engine: EngineDep):
    """获取单个调度配置"""
    return await engine.get_scheduler(scheduler_id)


@router.get("/{scheduler_id}/history", response_model=list[ExecutionRecordResponse])
async def get_scheduler_history(scheduler_id: str, engine: EngineDep, limit: int = 10):
    """获取执行历史

    Args:
        scheduler_id: 调度标识
        limit: 返回条数（默认10）
    """
    await engine.get_scheduler(scheduler_id)
    return [
        ExecutionRecordResponse(**record.to_dict())
        for record in engine.get_history(scheduler_id, limit)
    ]


# ==================== 控制 ====================


@router.put("/{scheduler_id}/toggle", response_model=SchedulerActionResponse)
async def toggle_scheduler(scheduler_id: str, engine: EngineDep):
    """切换启用状态"""
    data = await engine.toggle(scheduler_id)
    state = "启用" if data.is_enabled else "禁用"
    return SchedulerActionResponse(message=f"调度 {scheduler_id} 已{state}", data=data)


@router.put("/{scheduler_id}/enable", response_model=SchedulerActionResponse)
async def enable_scheduler(scheduler_id: str, engine: EngineDep):
    data = await engine.enable(scheduler_id)
    return SchedulerActionResponse(message=f"调度 {scheduler_id} 已启用", data=data)


@router.put("/{scheduler_id}/disable", response_model=SchedulerActionResponse)
async def disable_scheduler(scheduler_id: str, engine: EngineDep):
    data = await engine.disable(scheduler_id)
    return SchedulerActionResponse(message=f"调度 {scheduler_id} 已禁用", data=data)


@router.put("/{scheduler_id}/interval", response_model=SchedulerActionResponse)
async def update_interval(scheduler_id: str, body: UpdateIntervalRequest, engine: EngineDep):
    """改为固定间隔触发（清除 cron）"""
    data = await engine.update_interval(scheduler_id, body.fixed_rate_ms)
    return SchedulerActionResponse(
        message=f"调度 {scheduler_id} 间隔已更新为 {body.fixed_rate_ms}ms", data=data
    )


@router.put("/{scheduler_id}/cron", response_model=SchedulerActionResponse)
async def update_cron(scheduler_id: str, body: UpdateCronRequest, engine: EngineDep):
    """改为 cron 触发（清除固定间隔）"""
    data = await engine.update_cron(scheduler_id, body.cron_expression)
    return SchedulerActionResponse(
        message=f"调度 {scheduler_id} cron 已更新为 {data.cron_expression}", data=data
    )


@router.post("/{scheduler_id}/trigger", response_model=SchedulerActionResponse)
async def trigger_scheduler(scheduler_id: str, engine: EngineDep):
    """立即执行一次（后台运行）"""
    await engine.trigger(scheduler_id)
    return SchedulerActionResponse(message=f"调度 {scheduler_id} 已触发")
