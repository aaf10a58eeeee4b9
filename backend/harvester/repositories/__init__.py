"""数据访问层"""

from harvester.repositories.article import ArticleRepository
from harvester.repositories.scheduler import SchedulerConfigRepository

__all__ = [
    "ArticleRepository",
    "SchedulerConfigRepository",
]
