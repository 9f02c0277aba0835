"""配置常量模块 -- 可通过环境变量覆盖

包含数据库路径、API 前缀、应用名称与版本等可配置常量。
"""

import os
from pathlib import Path

import structlog

log = structlog.get_logger()

APP_NAME = "TaskFlow API"
APP_VERSION = "0.1.0"


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("TASKFLOW_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "TASKFLOW_DB_PATH",
        str(_get_base_dir() / "sqlite" / "taskflow.db"),
    )


def get_api_prefix() -> str:
    """获取带版本号的 API 路由前缀（如 /api/v1）；空串表示挂载在根路径"""
    prefix = os.environ.get("TASKFLOW_API_PREFIX", "/api/v1").strip().rstrip("/")
    if prefix and not prefix.startswith("/"):
        prefix = "/" + prefix
    return prefix


# 项目详情中内联返回的任务标题截断长度
DEFAULT_TASK_TITLE_PREVIEW_LENGTH = 60

# "..." 占 3 个字符
_MIN_TASK_TITLE_PREVIEW_LENGTH = 3


def get_task_title_preview_length() -> int:
    """任务标题预览长度；非整数或小于 3 时记录 warning 并回退到默认值"""
    val = os.environ.get("TASKFLOW_TASK_TITLE_PREVIEW_LENGTH")
    if val is None:
        return DEFAULT_TASK_TITLE_PREVIEW_LENGTH
    try:
        length = int(val)
    except ValueError:
        length = None
    if length is None or length < _MIN_TASK_TITLE_PREVIEW_LENGTH:
        log.warning(
            "invalid_preview_length_config",
            env_var="TASKFLOW_TASK_TITLE_PREVIEW_LENGTH",
            value=val,
            fallback=DEFAULT_TASK_TITLE_PREVIEW_LENGTH,
        )
        return DEFAULT_TASK_TITLE_PREVIEW_LENGTH
    return length
