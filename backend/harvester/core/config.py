"""应用配置管理"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict

from harvester.core.paths import get_project_root


class Settings(BaseSettings):
    """应用配置"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ========== ENV_JSON 目录配置 ==========
    # 复杂 JSON 配置可放在独立文件中：<ENV_JSON_DIR>/<ENV_VAR_NAME>.json
    # 加载优先级：.env 中的环境变量 > .env.json 目录中的文件
    ENV_JSON_DIR: str = ""  # 示例：.env.json

    # 数据库配置
    DATABASE_PATH: str = "./data/harvester.db"

    # 服务配置
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # 日志配置
    LOG_LEVEL: str = "DEBUG"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    LOG_MODE: str = "detailed"  # simple, detailed, json
    LOG_FILE: str = "./logs/harvester.log"  # 日志文件路径
    LOG_FILE_ROTATION: str = "10 MB"  # 日志文件轮转大小
    LOG_FILE_RETENTION: str = "7 days"  # 日志文件保留时间

    # ========== 调度器配置 ==========
    SCHEDULER_ENABLED: bool = True  # 是否在启动时装载已启用的调度
    SCHEDULER_TASK_TIMEOUT: int = 3600  # 单次任务执行超时（秒）
    SCHEDULER_HISTORY_LIMIT: int = 200  # 内存中保留的执行记录条数

    # 预置调度配置（JSON 数组格式）
    # 每个元素：scheduler_id、scheduler_name、cron_expression、fixed_rate_ms、is_enabled
    # 仅在数据库中不存在对应 scheduler_id 时创建，不覆盖运行期修改
    SCHEDULER_CONFIGS_JSON: str = ""

    # ========== 论坛抓取任务配置 ==========
    HARVEST_SCHEDULER_ID: str = "CRAWLER_HOTSSUL"
    HARVEST_SCHEDULER_NAME: str = "핫썰 크롤러"
    HARVEST_FIXED_RATE_MS: int = 3_600_000  # 默认每小时抓取一页
    HARVEST_ENABLED: bool = True  # 预置配置的初始启用状态

    # 源站点（{page} / {item_id} 为占位符）
    HARVEST_LIST_URL: str = "https://hotssul.com/bbs/board.php?bo_table=ssul19&page={page}"
    HARVEST_DETAIL_URL: str = "https://hotssul.com/bbs/board.php?bo_table=ssul19&wr_id={item_id}"
    HARVEST_USER_AGENT: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    HARVEST_HTTP_TIMEOUT: float = 10.0  # 单次请求超时（秒）
    HARVEST_REQUEST_DELAY: float = 0.3  # 详情页请求间隔（秒）

    # 入库标记
    HARVEST_SOURCE_PREFIX: str = "hotssul_"  # 去重键前缀
    HARVEST_CATEGORY: str = "ADULT"
    HARVEST_ARTICLE_TYPE: str = "CRAWLED"

    @property
    def database_url(self) -> str:
        """SQLite 数据库 URL"""
        return f"sqlite+aiosqlite:///{self.DATABASE_PATH}"

    @property
    def scheduler_seeds(self) -> list[dict[str, Any]]:
        """解析预置调度配置

        支持从 SCHEDULER_CONFIGS_JSON 环境变量或
        ENV_JSON_DIR/SCHEDULER_CONFIGS_JSON.json 文件加载，环境变量优先。
        """
        parsed = self._load_json_from_env_or_file(
            "SCHEDULER_CONFIGS_JSON", self.SCHEDULER_CONFIGS_JSON
        )
        if not isinstance(parsed, list):
            return []
        return [item for item in parsed if isinstance(item, dict)]

    def ensure_data_dir(self) -> None:
        """确保数据目录存在"""
        Path(self.DATABASE_PATH).parent.mkdir(parents=True, exist_ok=True)

    def _load_json_from_env_or_file(self, var_name: str, env_value: str) -> Any:
        """通用 JSON 配置加载

        Args:
            var_name: 环境变量名（同时也是 .env.json 目录下的文件名）
            env_value: .env 中的环境变量值

        Returns:
            解析后的 JSON 对象，失败返回 None
        """
        raw = (env_value or "").strip()
        if raw:
            try:
                return json.loads(raw)
            except json.JSONDecodeError:
                pass

        if not self.ENV_JSON_DIR:
            return None

        env_dir = Path(self.ENV_JSON_DIR)
        if not env_dir.is_absolute():
            env_dir = (get_project_root() / env_dir).resolve()
        json_file = env_dir / f"{var_name}.json"
        if not json_file.exists():
            return None

        try:
            return json.loads(json_file.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            return None


@lru_cache
def get_settings() -> Settings:
    """获取配置单例"""
    return Settings()


settings = get_settings()
