"""Repository 基类"""

from typing import Generic, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from harvester.models.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """通用数据访问

    子类需声明 model 属性；所有方法只 flush，不 commit，
    事务边界由调用方的 session 上下文决定。
    """

    model: type[ModelT]

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, obj: ModelT) -> ModelT:
        """新增记录"""
        self.session.add(obj)
        await self.session.flush()
        await self.session.refresh(obj)
        return obj

