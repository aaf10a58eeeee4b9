"""文章存储

抓取流程只依赖 ArticleStore 协议（按去重键查重 + 保存），
SqlArticleStore 是基于 articles 表的默认实现，每次调用一个独立短事务。
"""

from dataclasses import dataclass
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from harvester.core.database import session_scope
from harvester.repositories.article import ArticleRepository


@dataclass(frozen=True)
class HarvestedItem:
    """待入库的抓取条目

    Attributes:
        category: 分类（articles.topic）
        article_type: 文章类型
        title: 标题
        content: 正文
        source_id: 去重键（来源前缀 + 站点帖子 ID）
        created_by: 作者，抓取条目为 None
    """

    category: str
    article_type: str
    title: str
    content: str
    source_id: str
    created_by: int | None = None


class ArticleStore(Protocol):
    async def exists_by_dedup_key(self, source_id: str) -> bool: ...

    async def save(self, item: HarvestedItem) -> None: ...


class SqlArticleStore:
    """基于 SQLAlchemy 的文章存储"""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None):
        self._session_factory = session_factory

    async def exists_by_dedup_key(self, source_id: str) -> bool:
        async with session_scope(self._session_factory) as session:
            return await ArticleRepository(session).exists_by_source_id(source_id)

    async def save(self, item: HarvestedItem) -> None:
        async with session_scope(self._session_factory) as session:
            await ArticleRepository(session).create_article(
                topic=item.category,
                article_type=item.article_type,
                title=item.title,
                content=item.content,
                source_id=item.source_id,
                created_by=item.created_by,
            )
