"""调度配置模型"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from harvester.models.base import Base


class SchedulerConfig(Base):
    """调度配置表

    每个 scheduler_id 一行，是进程重启后恢复调度的唯一依据：
    - 触发策略：cron_expression 与 fixed_rate_ms 互斥，任一时刻最多一个有值
    - 运行记录：last_run_at（每次触发时写入）、next_run_at（仅供参考）
    - 任务进度：last_crawled_page（抓取任务的页码游标）
    """

    __tablename__ = "scheduler_configs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uuid: Mapped[str] = mapped_column(
        String(36), nullable=False, unique=True, default=lambda: str(uuid.uuid4())
    )
    scheduler_id: Mapped[str] = mapped_column(
        String(50), nullable=False, unique=True, index=True, comment="调度标识"
    )
    scheduler_name: Mapped[str] = mapped_column(
        String(100), nullable=False, comment="显示名称"
    )

    # 触发策略
    cron_expression: Mapped[str | None] = mapped_column(
        String(50), nullable=True, comment="cron 表达式（5 段或带秒的 6 段）"
    )
    fixed_rate_ms: Mapped[int | None] = mapped_column(
        Integer, nullable=True, comment="固定间隔（毫秒，>= 1000）"
    )
    is_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # 运行记录
    last_run_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    next_run_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # 任务进度
    last_crawled_page: Mapped[int] = mapped_column(
        Integer, default=1, nullable=False, comment="下一次要抓取的列表页"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), onupdate=func.now(), nullable=False
    )
