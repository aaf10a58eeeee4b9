"""论坛抓取服务

- HarvestService: 抓取一页列表并保存新文章
- PageParser: 列表页/详情页解析
- SqlArticleStore: 基于 articles 表的文章存储
"""

from harvester.services.crawler.article_store import (
    ArticleStore,
    HarvestedItem,
    SqlArticleStore,
)
from harvester.services.crawler.crawler_service import HarvestService
from harvester.services.crawler.page_parser import PageParser

__all__ = [
    "ArticleStore",
    "HarvestService",
    "HarvestedItem",
    "PageParser",
    "SqlArticleStore",
]
