"""触发器构造

把调度配置翻译为 APScheduler 触发器：
- cron：5 段标准 crontab，或带前置秒字段的 6 段（"?" 视为 "*"）
- 固定间隔：毫秒转秒

星期字段按 crontab 习惯编号（0 和 7 都是周日，1 是周一），
APScheduler 从 0 = 周一开始编号，因此统一转换为英文缩写后再交给 CronTrigger。
"""

from apscheduler.triggers.base import BaseTrigger
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from harvester.scheduler.state.models import ScheduleConfig

WEEKDAY_NAMES = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")


def _weekday_value(token: str) -> int:
    """星期的 crontab 编号（0-7，名称按 sun=0 计）"""
    token = token.lower()
    if token.isdigit():
        value = int(token)
        if value > 7:
            raise ValueError(f"星期取值超出范围 0-7: {token!r}")
        return value
    if token in WEEKDAY_NAMES:
        return WEEKDAY_NAMES.index(token)
    raise ValueError(f"无法识别的星期取值: {token!r}")


def translate_day_of_week(field: str) -> str:
    """把 crontab 星期字段转换为 APScheduler 可用的名称列表

    支持单值、范围、列表和步长，例如 "0"、"7"、"1-5"、"1,3,5"、"*/2"、"MON-FRI"。

    Raises:
        ValueError: 字段非法
    """
    if field in ("*", "?"):
        return "*"

    days: set[int] = set()
    for part in field.split(","):
        base, _, step_text = part.partition("/")
        step = 1
        if step_text:
            if not step_text.isdigit() or int(step_text) == 0:
                raise ValueError(f"星期步长非法: {part!r}")
            step = int(step_text)

        if base in ("*", "?"):
            first, last = 0, 6
        elif "-" in base:
            first_text, last_text = base.split("-", 1)
            first, last = _weekday_value(first_text), _weekday_value(last_text)
            if first > last:
                raise ValueError(f"星期范围非法: {part!r}")
        else:
            first = _weekday_value(base)
            # "1/2" 表示从 1 开始到周六，每隔 2 天
            last = 6 if step_text else first

        days.update(day % 7 for day in range(first, last + 1, step))

    return ",".join(WEEKDAY_NAMES[day] for day in sorted(days))


def build_cron_trigger(expression: str) -> CronTrigger:
    """解析 cron 表达式

    Raises:
        ValueError: 表达式字段数不对或字段非法
    """
    fields = ["*" if f == "?" else f for f in expression.split()]
    if len(fields) == 5:
        fields.insert(0, "0")
    elif len(fields) != 6:
        raise ValueError(f"cron 表达式应为 5 或 6 段，实际 {len(fields)} 段: {expression!r}")

    second, minute, hour, day, month, day_of_week = fields
    return CronTrigger(
        second=second,
        minute=minute,
        hour=hour,
        day=day,
        month=month,
        day_of_week=translate_day_of_week(day_of_week),
    )


def is_valid_cron(expression: str) -> bool:
    try:
        build_cron_trigger(expression)
    except ValueError:
        return False
    return True


def build_trigger(config: ScheduleConfig) -> BaseTrigger | None:
    """根据配置构造触发器，cron 优先；两者都未设置返回 None"""
    if config.cron_expression:
        return build_cron_trigger(config.cron_expression)
    if config.fixed_rate_ms and config.fixed_rate_ms > 0:
        return IntervalTrigger(seconds=config.fixed_rate_ms / 1000)
    return None
