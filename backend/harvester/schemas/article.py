"""文章解析结果 Schema"""

from pydantic import BaseModel, Field


class ParsedArticle(BaseModel):
    """详情页解析结果

    标题或正文为空时仍返回对象，由调用方决定是否丢弃。
    """

    title: str = Field(default="", description="标题")
    content: str = Field(default="", description="正文（已规整换行）")

    @property
    def is_complete(self) -> bool:
        return bool(self.title) and bool(self.content)
