"""项目路径工具"""

from functools import lru_cache
from pathlib import Path


@lru_cache
def get_project_root() -> Path:
    """获取项目根目录（即 backend/ 目录）

    以 harvester 包的上两级目录为准，避免依赖当前工作目录。
    """
    return Path(__file__).resolve().parent.parent.parent
