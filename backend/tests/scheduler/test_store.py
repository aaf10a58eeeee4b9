"""调度配置存储测试（真实 SQLite）"""

import asyncio

import pytest

from harvester.scheduler.state.models import ScheduleConfig


def make_config(scheduler_id="CRAWLER_HOTSSUL", **kwargs):
    kwargs.setdefault("scheduler_name", "crawler")
    kwargs.setdefault("fixed_rate_ms", 60_000)
    return ScheduleConfig(scheduler_id=scheduler_id, **kwargs)


@pytest.mark.anyio
class TestScheduleStore:
    async def test_create_and_get(self, schedule_store):
        created = await schedule_store.create(make_config())

        assert created.uuid is not None
        assert created.last_crawled_page == 1

        loaded = await schedule_store.get("CRAWLER_HOTSSUL")
        assert loaded == created

    async def test_get_missing_returns_none(self, schedule_store):
        assert await schedule_store.get("MISSING") is None

    async def test_create_duplicate_rejected(self, schedule_store):
        await schedule_store.create(make_config())
        with pytest.raises(ValueError):
            await schedule_store.create(make_config())

    async def test_list_all_and_enabled(self, schedule_store):
        await schedule_store.create(make_config("A"))
        await schedule_store.create(make_config("B", is_enabled=False))
        await schedule_store.create(make_config("C"))

        assert [c.scheduler_id for c in await schedule_store.list_all()] == ["A", "B", "C"]
        assert [c.scheduler_id for c in await schedule_store.list_enabled()] == ["A", "C"]

    async def test_update_persists_new_value(self, schedule_store):
        await schedule_store.create(make_config())

        updated = await schedule_store.update("CRAWLER_HOTSSUL", lambda c: c.with_cron("0 * * * *"))
        assert updated.cron_expression == "0 * * * *"
        assert updated.fixed_rate_ms is None

        loaded = await schedule_store.get("CRAWLER_HOTSSUL")
        assert loaded.cron_expression == "0 * * * *"
        assert loaded.fixed_rate_ms is None

    async def test_update_missing_returns_none(self, schedule_store):
        assert await schedule_store.update("MISSING", lambda c: c.toggled()) is None
        assert "MISSING" not in schedule_store._locks

    async def test_update_mutate_error_leaves_config_unchanged(self, schedule_store):
        await schedule_store.create(make_config())

        with pytest.raises(ValueError):
            await schedule_store.update("CRAWLER_HOTSSUL", lambda c: c.with_fixed_rate(10))

        loaded = await schedule_store.get("CRAWLER_HOTSSUL")
        assert loaded.fixed_rate_ms == 60_000

    async def test_concurrent_updates_do_not_clobber(self, schedule_store):
        """游标推进与触发策略修改并发执行，两者都保留"""
        await schedule_store.create(make_config())

        await asyncio.gather(
            schedule_store.update("CRAWLER_HOTSSUL", lambda c: c.with_cursor_advanced()),
            schedule_store.update("CRAWLER_HOTSSUL", lambda c: c.with_cron("0 0 * * *")),
            schedule_store.update("CRAWLER_HOTSSUL", lambda c: c.with_cursor_advanced()),
        )

        loaded = await schedule_store.get("CRAWLER_HOTSSUL")
        assert loaded.last_crawled_page == 3
        assert loaded.cron_expression == "0 0 * * *"
        assert loaded.fixed_rate_ms is None
