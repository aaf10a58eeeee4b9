"""Pytest 配置"""

import os
import tempfile

import pytest


# 测试环境配置：数据库放到临时目录，不写日志文件，不在启动时装载调度。
# 必须在导入 harvester.core.config 之前设置。
_TEST_DATA_DIR = tempfile.mkdtemp(prefix="harvester-tests-")
os.environ.setdefault("DATABASE_PATH", os.path.join(_TEST_DATA_DIR, "harvester.db"))
os.environ.setdefault("LOG_FILE", "")
os.environ.setdefault("LOG_MODE", "simple")
os.environ.setdefault("LOG_LEVEL", "INFO")
os.environ.setdefault("SCHEDULER_ENABLED", "false")
os.environ.setdefault("HARVEST_REQUEST_DELAY", "0")


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def session_factory(tmp_path, anyio_backend):
    """基于临时 SQLite 文件的会话工厂（已建表）"""
    from harvester.core.database import create_engine, create_session_factory, init_db

    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_db(engine)
    yield create_session_factory(engine)
    await engine.dispose()


@pytest.fixture
def schedule_store(session_factory):
    from harvester.scheduler.store import ScheduleStore

    return ScheduleStore(session_factory)
