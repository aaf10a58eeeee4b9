"""文章模型"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from harvester.models.base import Base


class Article(Base):
    """文章表

    抓取入库的文章通过 source_id（来源前缀 + 站点文章 ID）去重，
    created_by 为空表示非用户发布。
    """

    __tablename__ = "articles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uuid: Mapped[str] = mapped_column(
        String(36), nullable=False, unique=True, default=lambda: str(uuid.uuid4())
    )
    topic: Mapped[str] = mapped_column(String(50), nullable=False, comment="分类")
    article_type: Mapped[str] = mapped_column(
        String(20), nullable=False, comment="文章类型（如 CRAWLED）"
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    source_id: Mapped[str | None] = mapped_column(
        String(100), nullable=True, unique=True, index=True, comment="去重键"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), onupdate=func.now(), nullable=False
    )
