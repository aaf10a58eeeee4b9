"""预置调度配置初始化测试"""

import pytest

from harvester.core.config import settings
from harvester.scheduler.initializer import default_seeds, init_scheduler_configs


def test_default_seeds_include_harvest_scheduler():
    seed = default_seeds()[0]
    assert seed["scheduler_id"] == settings.HARVEST_SCHEDULER_ID
    assert seed["fixed_rate_ms"] == settings.HARVEST_FIXED_RATE_MS


@pytest.mark.anyio
class TestInitSchedulerConfigs:
    async def test_creates_default_harvest_config(self, schedule_store):
        created = await init_scheduler_configs(schedule_store)

        assert settings.HARVEST_SCHEDULER_ID in created
        config = await schedule_store.get(settings.HARVEST_SCHEDULER_ID)
        assert config.fixed_rate_ms == settings.HARVEST_FIXED_RATE_MS
        assert config.cron_expression is None
        assert config.last_crawled_page == 1

    async def test_existing_rows_not_overwritten(self, schedule_store):
        seeds = [{"scheduler_id": "JOB", "scheduler_name": "job", "fixed_rate_ms": 60_000}]
        await init_scheduler_configs(schedule_store, seeds)
        await schedule_store.update("JOB", lambda c: c.with_cron("0 5 * * *").disabled())

        created = await init_scheduler_configs(schedule_store, seeds)

        assert created == []
        config = await schedule_store.get("JOB")
        assert config.cron_expression == "0 5 * * *"
        assert config.fixed_rate_ms is None
        assert config.is_enabled is False

    async def test_cron_wins_when_both_given(self, schedule_store):
        seeds = [{"scheduler_id": "BOTH", "cron_expression": "0 * * * *", "fixed_rate_ms": 5000}]
        await init_scheduler_configs(schedule_store, seeds)

        config = await schedule_store.get("BOTH")
        assert config.cron_expression == "0 * * * *"
        assert config.fixed_rate_ms is None
        assert config.scheduler_name == "BOTH"

    @pytest.mark.parametrize(
        "seed",
        [
            {"scheduler_name": "no id"},
            {"scheduler_id": "BAD_CRON", "cron_expression": "nope"},
            {"scheduler_id": "TOO_FAST", "fixed_rate_ms": 10},
            {"scheduler_id": "NOT_A_NUMBER", "fixed_rate_ms": "abc"},
            {"scheduler_id": "WRONG_TYPE", "fixed_rate_ms": [5000]},
        ],
    )
    async def test_invalid_seeds_skipped(self, schedule_store, seed):
        assert await init_scheduler_configs(schedule_store, [seed]) == []
        assert await schedule_store.list_all() == []

    async def test_invalid_seed_does_not_block_others(self, schedule_store):
        seeds = [
            {"scheduler_id": "BROKEN", "fixed_rate_ms": "abc"},
            {"scheduler_id": "GOOD", "fixed_rate_ms": "60000"},
        ]

        created = await init_scheduler_configs(schedule_store, seeds)

        assert created == ["GOOD"]
        config = await schedule_store.get("GOOD")
        assert config.fixed_rate_ms == 60_000
