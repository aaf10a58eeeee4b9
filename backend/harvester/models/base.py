"""ORM 基础类"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """所有数据表的基础模型类"""

    pass
