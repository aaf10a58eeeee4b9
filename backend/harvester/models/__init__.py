"""数据模型"""

from harvester.models.article import Article
from harvester.models.base import Base
from harvester.models.scheduler import SchedulerConfig

__all__ = [
    "Article",
    "Base",
    "SchedulerConfig",
]
