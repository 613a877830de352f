"""structlog 配置模块

WORKHUB_LOG_FORMAT=json 输出结构化 JSON，其余值使用开发控制台渲染；
WORKHUB_LOG_LEVEL 控制根 logger 级别（默认 INFO）。
"""

import logging
import os

import structlog

# aiosqlite 每次调用都会打 debug 日志，噪音过大
_NOISY_LOGGERS = ("aiosqlite",)


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer(ensure_ascii=False)
    return structlog.dev.ConsoleRenderer()


def setup_logging() -> None:
    """让 structlog 与标准库日志共用同一个 handler 和渲染器"""
    log_format = os.environ.get("WORKHUB_LOG_FORMAT", "dev").lower()
    level = getattr(
        logging, os.environ.get("WORKHUB_LOG_LEVEL", "INFO").upper(), logging.INFO
    )
    pre_chain = _shared_processors()

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_renderer(log_format),
            foreign_pre_chain=pre_chain,
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
