"""页面解析器

基于 CSS 选择器解析论坛列表页与详情页：
- 列表页：提取帖子 ID（保持页面顺序，去重）
- 详情页：提取标题与正文，正文去广告并规整换行
"""

import re

from bs4 import BeautifulSoup

from harvester.core.logging import get_logger
from harvester.schemas.article import ParsedArticle

logger = get_logger("crawler.parser")

LISTING_ROW_SELECTOR = "div.list-board ul.list-body li.list-item:not(.bg-light)"
LISTING_LINK_SELECTOR = 'a[href*="wr_id="]'
ITEM_ID_PATTERN = re.compile(r"wr_id=(\d+)")

TITLE_SELECTORS = ('meta[property="og:title"]', 'meta[name="title"]')
CONTENT_SELECTORS = (".view-content2", ".view-content")
AD_SELECTOR = ".hotssul1, .hotssul2, .hotssul3"

# 换行占位符：先把 <br>/<p> 标记出来，空白折叠后再还原为换行
_LINE_BREAK = "\ue000"


class PageParser:
    """页面解析器"""

    def parse_listing_ids(self, html: str) -> list[str]:
        """解析列表页中的帖子 ID

        置顶行（.bg-light）不参与；同一 ID 只保留第一次出现。

        Args:
            html: 列表页 HTML

        Returns:
            帖子 ID 列表（页面顺序）
        """
        soup = BeautifulSoup(html, "html.parser")

        item_ids: list[str] = []
        seen: set[str] = set()
        for row in soup.select(LISTING_ROW_SELECTOR):
            link = row.select_one(LISTING_LINK_SELECTOR)
            if link is None:
                continue

            match = ITEM_ID_PATTERN.search(link.get("href", ""))
            if not match:
                continue

            item_id = match.group(1)
            if item_id in seen:
                continue
            seen.add(item_id)
            item_ids.append(item_id)

        return item_ids

    def parse_detail(self, html: str) -> ParsedArticle:
        """解析详情页

        Args:
            html: 详情页 HTML

        Returns:
            解析结果（标题或正文可能为空）
        """
        soup = BeautifulSoup(html, "html.parser")
        return ParsedArticle(title=self._extract_title(soup), content=self._extract_content(soup))

    def _extract_title(self, soup: BeautifulSoup) -> str:
        for selector in TITLE_SELECTORS:
            meta = soup.select_one(selector)
            if meta is None:
                continue
            title = (meta.get("content") or "").strip()
            if title:
                return title
        return ""

    def _extract_content(self, soup: BeautifulSoup) -> str:
        body = None
        for selector in CONTENT_SELECTORS:
            body = soup.select_one(selector)
            if body is not None:
                break
        if body is None:
            return ""

        for ad in body.select(AD_SELECTOR):
            ad.decompose()

        for br in body.find_all("br"):
            br.replace_with(_LINE_BREAK)
        for paragraph in body.find_all("p"):
            paragraph.insert_after(_LINE_BREAK)

        return normalize_text(body.get_text())


def normalize_text(text: str) -> str:
    """折叠空白，还原换行占位符，连续 3 个以上换行压缩为 2 个"""
    text = re.sub(r"\s+", " ", text)
    text = text.replace(_LINE_BREAK, "\n")
    text = re.sub(r"[ \t]*\n[ \t]*", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()
