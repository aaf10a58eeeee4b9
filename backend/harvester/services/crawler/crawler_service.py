"""论坛抓取服务

抓取一页列表，逐条获取详情并入库：
列表页 → 帖子 ID → 去重 → 详情页 → 解析 → 保存
"""

import asyncio

import httpx

from harvester.core.config import settings
from harvester.core.errors import ListingFetchError
from harvester.core.logging import get_logger
from harvester.services.crawler.article_store import ArticleStore, HarvestedItem
from harvester.services.crawler.page_parser import PageParser

logger = get_logger("crawler.service")


def create_http_client() -> httpx.AsyncClient:
    """创建带固定 User-Agent 和超时的 HTTP 客户端"""
    return httpx.AsyncClient(
        headers={"User-Agent": settings.HARVEST_USER_AGENT},
        timeout=settings.HARVEST_HTTP_TIMEOUT,
        follow_redirects=True,
    )


class HarvestService:
    """论坛抓取服务

    负责：
    1. 获取列表页并解析帖子 ID
    2. 按去重键跳过已入库的帖子
    3. 获取并解析详情页，保存新文章
    4. 两次详情请求之间固定间隔，避免给源站造成压力

    单条失败（请求、解析、保存）只记录日志，不影响同页其他条目；
    列表页失败则整页中止。
    """

    def __init__(
        self,
        article_store: ArticleStore,
        client: httpx.AsyncClient | None = None,
        parser: PageParser | None = None,
        request_delay: float | None = None,
    ):
        self.article_store = article_store
        self.parser = parser or PageParser()
        self.request_delay = (
            settings.HARVEST_REQUEST_DELAY if request_delay is None else request_delay
        )

        # 外部传入的客户端由调用方负责关闭
        self._owns_client = client is None
        self._client = client or create_http_client()

    async def close(self) -> None:
        """关闭 HTTP 客户端"""
        if self._owns_client:
            try:
                await self._client.aclose()
            except Exception as e:
                logger.warning("关闭 HTTP 客户端失败，忽略", error=str(e))

    async def crawl_and_save_page(self, page: int) -> int:
        """抓取一页列表并保存新文章

        Args:
            page: 列表页码

        Returns:
            本次新保存的文章数

        Raises:
            ListingFetchError: 列表页获取失败
            asyncio.CancelledError: 运行被取消（剩余条目不再处理）
        """
        list_url = settings.HARVEST_LIST_URL.format(page=page)
        try:
            html = await self._fetch_page(list_url)
        except httpx.HTTPError as e:
            logger.error("列表页获取失败", page=page, url=list_url, error=str(e))
            raise ListingFetchError(page, str(e)) from e

        item_ids = self.parser.parse_listing_ids(html)
        logger.info("解析列表页完成", page=page, items=len(item_ids))

        saved_count = 0
        detail_fetched = False

        for item_id in item_ids:
            source_id = f"{settings.HARVEST_SOURCE_PREFIX}{item_id}"

            try:
                if await self.article_store.exists_by_dedup_key(source_id):
                    logger.debug("文章已存在，跳过", source_id=source_id)
                    continue
            except Exception as e:
                logger.error("查重失败，跳过", source_id=source_id, error=str(e))
                continue

            if detail_fetched:
                await self._pause(page)
            detail_fetched = True

            if await self._harvest_item(item_id, source_id):
                saved_count += 1

        logger.info("列表页处理完成", page=page, saved=saved_count, total=len(item_ids))
        return saved_count

    async def _pause(self, page: int) -> None:
        try:
            await asyncio.sleep(self.request_delay)
        except asyncio.CancelledError:
            logger.warning("抓取被取消，放弃本页剩余条目", page=page)
            raise

    async def _harvest_item(self, item_id: str, source_id: str) -> bool:
        """获取并保存单条详情，返回是否新保存"""
        detail_url = settings.HARVEST_DETAIL_URL.format(item_id=item_id)

        try:
            html = await self._fetch_page(detail_url)
            parsed = self.parser.parse_detail(html)
        except Exception as e:
            logger.error("详情页处理失败", source_id=source_id, url=detail_url, error=str(e))
            return False

        if not parsed.title:
            logger.warning("标题为空，丢弃", source_id=source_id, url=detail_url)
            return False
        if not parsed.content:
            logger.warning("正文为空，丢弃", source_id=source_id, url=detail_url)
            return False

        item = HarvestedItem(
            category=settings.HARVEST_CATEGORY,
            article_type=settings.HARVEST_ARTICLE_TYPE,
            title=parsed.title,
            content=parsed.content,
            source_id=source_id,
        )
        try:
            await self.article_store.save(item)
        except Exception as e:
            logger.error("保存文章失败", source_id=source_id, error=str(e))
            return False

        logger.info("保存文章", source_id=source_id, title=parsed.title)
        return True

    async def _fetch_page(self, url: str) -> str:
        """GET 页面内容

        Raises:
            httpx.HTTPError: 网络错误、超时或非 2xx 响应
        """
        response = await self._client.get(url)
        response.raise_for_status()
        return response.text
