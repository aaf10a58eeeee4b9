"""论坛抓取任务

每次触发抓取游标指向的一页列表，成功后把游标推进到下一页。
"""

from collections.abc import Callable

from harvester.core.config import settings
from harvester.core.errors import ListingFetchError
from harvester.core.logging import get_logger
from harvester.scheduler.store import ScheduleStore
from harvester.scheduler.tasks.base import TaskResult
from harvester.services.crawler.article_store import SqlArticleStore
from harvester.services.crawler.crawler_service import HarvestService

logger = get_logger("scheduler.tasks.harvest_board")


class HarvestBoardTask:
    """论坛抓取任务

    游标（last_crawled_page）保存在自己的调度配置中：
    - 列表页获取失败：本次失败，游标不动，下次重试同一页
    - 其余情况：无论新增多少条，游标 +1

    Attributes:
        store: 调度配置存储（读游标、写游标）
        service_factory: 每次运行创建一个抓取服务
    """

    description = "定时抓取论坛列表页并保存新文章"

    def __init__(
        self,
        store: ScheduleStore,
        service_factory: Callable[[], HarvestService] | None = None,
        scheduler_id: str | None = None,
    ):
        self.store = store
        self.scheduler_id = scheduler_id or settings.HARVEST_SCHEDULER_ID
        self._service_factory = service_factory or (lambda: HarvestService(SqlArticleStore()))

    async def run(self) -> TaskResult:
        config = await self.store.get(self.scheduler_id)
        if config is None:
            return TaskResult.failed(f"调度配置不存在: {self.scheduler_id}")

        page = config.last_crawled_page
        logger.info("开始抓取", scheduler_id=self.scheduler_id, page=page)

        service = self._service_factory()
        try:
            saved = await service.crawl_and_save_page(page)
        except ListingFetchError as e:
            return TaskResult.failed(str(e), "列表页获取失败", page=page)
        finally:
            await service.close()

        try:
            updated = await self.store.update(self.scheduler_id, lambda c: c.with_cursor_advanced())
        except Exception as e:
            logger.exception("游标保存失败", scheduler_id=self.scheduler_id, page=page, error=str(e))
            return TaskResult.failed(str(e), "游标保存失败", page=page, saved=saved)

        if updated is None:
            logger.error("游标保存失败：调度配置已不存在", scheduler_id=self.scheduler_id, page=page)
            return TaskResult.failed(
                f"调度配置不存在: {self.scheduler_id}", "游标保存失败", page=page, saved=saved
            )

        return TaskResult.success(
            f"第 {page} 页抓取完成，新增 {saved} 条",
            page=page,
            saved=saved,
            next_page=updated.last_crawled_page,
        )
