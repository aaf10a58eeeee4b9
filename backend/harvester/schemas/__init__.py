"""Pydantic Schemas"""

from harvester.schemas.article import ParsedArticle
from harvester.schemas.scheduler import (
    ExecutionRecordResponse,
    SchedulerActionResponse,
    SchedulerResponse,
    TaskStatsResponse,
    UpdateCronRequest,
    UpdateIntervalRequest,
)

__all__ = [
    "ExecutionRecordResponse",
    "ParsedArticle",
    "SchedulerActionResponse",
    "SchedulerResponse",
    "TaskStatsResponse",
    "UpdateCronRequest",
    "UpdateIntervalRequest",
]
