"""日志模块测试"""

from datetime import datetime
from pathlib import Path

from harvester.core.logging import (
    BoundLogger,
    LogMode,
    _escape_markup,
    _safe_for_logging,
    get_logger,
    logger,
)


class TestSafeForLogging:
    """测试日志值转换"""

    def test_primitives_pass_through(self):
        assert _safe_for_logging(1) == 1
        assert _safe_for_logging("a") == "a"
        assert _safe_for_logging(None) is None

    def test_datetime_to_isoformat(self):
        assert _safe_for_logging(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05"

    def test_nested_containers(self):
        value = {"pages": (1, 2), "path": Path("/tmp/x")}
        assert _safe_for_logging(value) == {"pages": [1, 2], "path": "/tmp/x"}

    def test_long_repr_truncated(self):
        class Big:
            def __repr__(self):
                return "x" * 5000

        assert _safe_for_logging(Big()).endswith("...")


def test_escape_markup():
    assert _escape_markup("<b>{x}</b>") == "\\<b\\>{{x}}\\</b\\>"


class TestLogger:
    def test_get_logger_binds_module(self):
        bound = get_logger("scheduler.test")
        assert isinstance(bound, BoundLogger)

    def test_configure_without_file(self):
        logger.configure(mode=LogMode.SIMPLE, level="INFO", log_file="")
        assert logger.configured

        get_logger("scheduler.test").info("测试日志", scheduler_id="X", data={"a": 1})

    def test_configure_with_file(self, tmp_path):
        log_file = tmp_path / "logs" / "test.log"
        logger.configure(mode="json", level="DEBUG", log_file=str(log_file))
        assert log_file.parent.is_dir()

        # 恢复为测试默认配置
        logger.configure(mode="simple", level="INFO", log_file="")
