"""数据库连接管理

SQLite + aiosqlite，调度配置与抓取结果共用一个数据库文件。
"""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from harvester.core.config import settings
from harvester.core.logging import get_logger

logger = get_logger("database")


def create_engine(url: str | None = None) -> AsyncEngine:
    """创建数据库引擎"""
    return create_async_engine(
        url or settings.database_url,
        connect_args={"timeout": 30, "check_same_thread": False},
        echo=False,
        future=True,
    )


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """创建会话工厂"""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


engine = create_engine()
session_factory = create_session_factory(engine)


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession] | None = None,
) -> AsyncGenerator[AsyncSession, None]:
    """获取数据库会话（上下文管理器）

    正常退出时提交，异常（包括取消）时回滚后继续抛出。
    """
    async with (factory or session_factory)() as session:
        try:
            yield session
            await session.commit()
        except asyncio.CancelledError:
            try:
                await session.rollback()
            except Exception:
                pass
            raise
        except Exception:
            try:
                await session.rollback()
            except Exception:
                pass
            raise


async def init_db(bind: AsyncEngine | None = None) -> None:
    """初始化数据库（创建表）"""
    from harvester.models import Base

    target = bind or engine
    if bind is None:
        settings.ensure_data_dir()
    async with target.begin() as conn:
        # WAL 允许调度写入与抓取写入并发读
        await conn.execute(text("PRAGMA journal_mode=WAL"))
        await conn.run_sync(Base.metadata.create_all)
    logger.info("数据库表初始化完成", url=str(target.url))
