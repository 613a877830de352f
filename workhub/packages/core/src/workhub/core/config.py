"""配置常量模块 -- 可通过环境变量覆盖

包含数据库路径、目录服务数据文件、分页大小以及任务字段长度限制等常量。
"""

import os
from pathlib import Path


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("WORKHUB_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "WORKHUB_DB_PATH",
        str(_get_base_dir() / "sqlite" / "workhub.db"),
    )


def get_directory_path() -> Path | None:
    """获取目录服务 JSON 数据文件路径，未配置时返回 None"""
    value = os.environ.get("WORKHUB_DIRECTORY_PATH")
    return Path(value) if value else None


# 任务列表固定分页大小
TASK_PAGE_SIZE: int = 10

# 任务字段长度限制
TITLE_MIN_LENGTH: int = 3
TITLE_MAX_LENGTH: int = 150
DESCRIPTION_MAX_LENGTH: int = 2000
CANCEL_REASON_MAX_LENGTH: int = 300
ESTIMATED_HOURS_MAX: float = 999

# 标签限制
MAX_TAGS: int = 5
TAG_MAX_LENGTH: int = 20

# 进展记录消息长度
UPDATE_MESSAGE_MIN_LENGTH: int = 3
UPDATE_MESSAGE_MAX_LENGTH: int = 500

# 目录服务中未知人员/部门的展示名
UNKNOWN_DISPLAY_NAME: str = "Unknown"
