"""触发器构造测试"""

from datetime import datetime

import pytest
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from harvester.scheduler.state.models import ScheduleConfig
from harvester.scheduler.triggers import (
    build_cron_trigger,
    build_trigger,
    is_valid_cron,
    translate_day_of_week,
)


class TestCronExpressions:
    @pytest.mark.parametrize(
        "expression",
        ["0 * * * *", "*/5 * * * *", "0 0 */2 * * ?", "0 30 9 * * MON-FRI"],
    )
    def test_valid(self, expression):
        assert is_valid_cron(expression)
        assert isinstance(build_cron_trigger(expression), CronTrigger)

    @pytest.mark.parametrize(
        "expression",
        ["", "not a cron", "* * *", "61 * * * *", "0 0 0 0 0 0 0"],
    )
    def test_invalid(self, expression):
        assert not is_valid_cron(expression)

    def test_six_fields_leading_seconds(self):
        trigger = build_cron_trigger("15 0 * * * *")
        fields = {f.name: str(f) for f in trigger.fields}
        assert fields["second"] == "15"
        assert fields["minute"] == "0"


class TestDayOfWeek:
    """星期字段按 crontab 编号：0 和 7 为周日，1 为周一"""

    @pytest.mark.parametrize(
        ("field", "expected"),
        [
            ("*", "*"),
            ("?", "*"),
            ("0", "sun"),
            ("7", "sun"),
            ("1", "mon"),
            ("1-5", "mon,tue,wed,thu,fri"),
            ("5-7", "sun,fri,sat"),
            ("1,3,5", "mon,wed,fri"),
            ("*/2", "sun,tue,thu,sat"),
            ("1-5/2", "mon,wed,fri"),
            ("MON-FRI", "mon,tue,wed,thu,fri"),
        ],
    )
    def test_translate(self, field, expected):
        assert translate_day_of_week(field) == expected

    @pytest.mark.parametrize("field", ["8", "5-1", "1/0", "funday", ""])
    def test_translate_invalid(self, field):
        with pytest.raises(ValueError):
            translate_day_of_week(field)

    @pytest.mark.parametrize(
        ("expression", "weekday"),
        [
            ("0 9 * * 0", 6),
            ("0 9 * * 7", 6),
            ("0 9 * * 1", 0),
            ("0 0 9 * * 1", 0),
            ("0 0 9 * * 6", 5),
        ],
    )
    def test_fires_on_expected_weekday(self, expression, weekday):
        trigger = build_cron_trigger(expression)
        # 2026-10-19 是周一
        now = datetime(2026, 10, 19, 10, 0, tzinfo=trigger.timezone)

        next_fire = trigger.get_next_fire_time(None, now)

        assert next_fire.weekday() == weekday
        assert next_fire.hour == 9

    def test_weekdays_range_skips_weekend(self):
        trigger = build_cron_trigger("0 9 * * 1-5")
        # 2026-10-24 是周六
        now = datetime(2026, 10, 24, 10, 0, tzinfo=trigger.timezone)

        next_fire = trigger.get_next_fire_time(None, now)

        assert next_fire.date() == datetime(2026, 10, 26).date()


class TestBuildTrigger:
    def test_cron_wins_over_fixed_rate(self):
        config = ScheduleConfig(
            scheduler_id="X", scheduler_name="x", cron_expression="0 * * * *", fixed_rate_ms=5000
        )
        assert isinstance(build_trigger(config), CronTrigger)

    def test_fixed_rate_interval(self):
        config = ScheduleConfig(scheduler_id="X", scheduler_name="x", fixed_rate_ms=5000)
        trigger = build_trigger(config)
        assert isinstance(trigger, IntervalTrigger)
        assert trigger.interval.total_seconds() == 5

    def test_no_trigger(self):
        assert build_trigger(ScheduleConfig(scheduler_id="X", scheduler_name="x")) is None

    def test_invalid_cron_raises(self):
        config = ScheduleConfig(scheduler_id="X", scheduler_name="x", cron_expression="bad")
        with pytest.raises(ValueError):
            build_trigger(config)
