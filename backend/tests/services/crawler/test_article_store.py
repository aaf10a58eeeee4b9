"""SqlArticleStore 测试（真实 SQLite）"""

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from harvester.core.database import session_scope
from harvester.models import Article
from harvester.services.crawler.article_store import HarvestedItem, SqlArticleStore


def make_item(source_id="hotssul_1", **kwargs):
    kwargs.setdefault("category", "ADULT")
    kwargs.setdefault("article_type", "CRAWLED")
    kwargs.setdefault("title", "제목")
    kwargs.setdefault("content", "본문")
    return HarvestedItem(source_id=source_id, **kwargs)


@pytest.mark.anyio
class TestSqlArticleStore:
    async def test_save_then_exists(self, session_factory):
        store = SqlArticleStore(session_factory)

        assert not await store.exists_by_dedup_key("hotssul_1")
        await store.save(make_item())
        assert await store.exists_by_dedup_key("hotssul_1")

    async def test_saved_columns(self, session_factory):
        await SqlArticleStore(session_factory).save(make_item(title="T", content="C"))

        async with session_scope(session_factory) as session:
            result = await session.execute(select(Article).where(Article.source_id == "hotssul_1"))
            article = result.scalar_one()

        assert article.topic == "ADULT"
        assert article.article_type == "CRAWLED"
        assert article.title == "T"
        assert article.content == "C"
        assert article.created_by is None
        assert article.uuid

    async def test_duplicate_key_rejected(self, session_factory):
        store = SqlArticleStore(session_factory)
        await store.save(make_item())

        with pytest.raises(IntegrityError):
            await store.save(make_item())
