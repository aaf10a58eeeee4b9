"""页面解析器测试"""

import pytest

from harvester.services.crawler.page_parser import PageParser, normalize_text


def listing_html(*rows: str) -> str:
    return f"""
    <html><body>
      <div class="list-board">
        <ul class="list-body">{''.join(rows)}</ul>
      </div>
    </body></html>
    """


def row(item_id: str, notice: bool = False) -> str:
    css = "list-item bg-light" if notice else "list-item"
    return (
        f'<li class="{css}"><div class="wr-subject">'
        f'<a href="/bbs/board.php?bo_table=ssul19&amp;wr_id={item_id}&amp;page=1">글 {item_id}</a>'
        f"</div></li>"
    )


def detail_html(title: str | None = "제목", body: str = "<p>본문</p>", content_class="view-content2"):
    meta = f'<meta property="og:title" content="{title}">' if title is not None else ""
    return f"""
    <html><head>{meta}</head>
    <body><div class="{content_class}">{body}</div></body></html>
    """


@pytest.fixture
def parser():
    return PageParser()


class TestParseListingIds:
    def test_extracts_ids_in_page_order(self, parser):
        html = listing_html(row("300"), row("200"), row("100"))
        assert parser.parse_listing_ids(html) == ["300", "200", "100"]

    def test_skips_notice_rows(self, parser):
        html = listing_html(row("999", notice=True), row("300"))
        assert parser.parse_listing_ids(html) == ["300"]

    def test_deduplicates_first_wins(self, parser):
        html = listing_html(row("300"), row("200"), row("300"))
        assert parser.parse_listing_ids(html) == ["300", "200"]

    def test_rows_without_item_link_ignored(self, parser):
        html = listing_html('<li class="list-item"><a href="/bbs/other.php">x</a></li>', row("1"))
        assert parser.parse_listing_ids(html) == ["1"]

    def test_rows_outside_board_ignored(self, parser):
        html = f'<ul class="list-body">{row("5")}</ul>'
        assert parser.parse_listing_ids(html) == []

    def test_empty_page(self, parser):
        assert parser.parse_listing_ids("<html></html>") == []


class TestParseDetail:
    def test_title_from_og_meta(self, parser):
        assert parser.parse_detail(detail_html(title="  첫 번째 글 ")).title == "첫 번째 글"

    def test_title_fallback_to_name_meta(self, parser):
        html = '<html><head><meta name="title" content="대체 제목"></head><body></body></html>'
        assert parser.parse_detail(html).title == "대체 제목"

    def test_missing_title_is_empty(self, parser):
        assert parser.parse_detail(detail_html(title=None)).title == ""

    def test_content_fallback_selector(self, parser):
        parsed = parser.parse_detail(detail_html(content_class="view-content", body="본문"))
        assert parsed.content == "본문"

    def test_ads_removed(self, parser):
        body = '앞<div class="hotssul1">광고1</div><span class="hotssul3">광고3</span>뒤'
        assert parser.parse_detail(detail_html(body=body)).content == "앞뒤"

    def test_br_and_paragraph_become_newlines(self, parser):
        body = "<p>첫 줄</p><p>둘째 줄</p>셋째<br>넷째"
        assert parser.parse_detail(detail_html(body=body)).content == "첫 줄\n둘째 줄\n셋째\n넷째"

    def test_whitespace_collapsed(self, parser):
        body = "  여러   칸\n\t 공백  "
        assert parser.parse_detail(detail_html(body=body)).content == "여러 칸 공백"

    def test_blank_lines_limited_to_two(self, parser):
        body = "위<br><br><br><br><br>아래"
        assert parser.parse_detail(detail_html(body=body)).content == "위\n\n아래"

    def test_missing_body_is_empty(self, parser):
        html = '<html><head><meta property="og:title" content="t"></head><body></body></html>'
        parsed = parser.parse_detail(html)
        assert parsed.content == ""
        assert not parsed.is_complete


def test_normalize_text_trims():
    assert normalize_text("\n\n  a  \n") == "a"
