"""日志配置 -- structlog + 标准库 logging 统一输出

TASKFLOW_LOG_FORMAT=dev|json 选择渲染器，TASKFLOW_LOG_LEVEL 控制根级别。
请求日志由 LoggingMiddleware 输出，uvicorn.access 因此降到 WARNING。
Logfire 只在 LOGFIRE_SEND_TO_LOGFIRE=true 时启用。
"""

import logging
import os

import structlog

# 与请求日志重复或过于嘈杂的第三方 logger
_QUIET_LOGGERS = ("uvicorn.access", "aiosqlite")


def _resolve_level(name: str) -> int:
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def _pick_renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer(ensure_ascii=False)
    return structlog.dev.ConsoleRenderer()


def setup_logging(log_format: str | None = None, log_level: str | None = None) -> None:
    """初始化 structlog，并把标准库 logging 接到同一个格式化器

    参数优先于环境变量；未知级别回退到 INFO。
    """
    log_format = (log_format or os.environ.get("TASKFLOW_LOG_FORMAT", "dev")).lower()
    level = _resolve_level(log_level or os.environ.get("TASKFLOW_LOG_LEVEL", "INFO"))

    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_pick_renderer(log_format),
            foreign_pre_chain=pre_chain,
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def setup_logfire() -> None:
    """按需启用 Logfire APM（需要 logfire extra 和 LOGFIRE_TOKEN）"""
    if os.environ.get("LOGFIRE_SEND_TO_LOGFIRE", "false").lower() != "true":
        return
    try:
        import logfire

        logfire.configure(service_name="taskflow")
        logfire.instrument_fastapi()
    except Exception as exc:
        structlog.get_logger().warning("logfire_init_failed", error=str(exc))
