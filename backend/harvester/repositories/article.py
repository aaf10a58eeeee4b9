"""文章 Repository"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from harvester.models.article import Article
from harvester.repositories.base import BaseRepository


class ArticleRepository(BaseRepository[Article]):
    """文章数据访问"""

    model = Article

    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def exists_by_source_id(self, source_id: str) -> bool:
        """检查去重键是否已存在"""
        result = await self.session.execute(
            select(func.count(Article.id)).where(Article.source_id == source_id)
        )
        return (result.scalar() or 0) > 0

    async def create_article(
        self,
        topic: str,
        article_type: str,
        title: str,
        content: str,
        source_id: str | None = None,
        created_by: int | None = None,
    ) -> Article:
        """创建文章"""
        article = Article(
            topic=topic,
            article_type=article_type,
            title=title,
            content=content,
            source_id=source_id,
            created_by=created_by,
        )
        return await self.create(article)
