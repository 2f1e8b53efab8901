"""structlog ベースのロガー設定"""

from __future__ import annotations

import logging
import sys

import structlog

from .config import LogSection

PACKAGE_LOGGER = "k1s0_targeting"


def new_logger(
    level: str = "INFO", format: str = "json", name: str = PACKAGE_LOGGER
) -> structlog.stdlib.BoundLogger:
    """ライブラリのロガーを構成して返す。

    レベルは ``k1s0_targeting`` 配下の標準ロガーに設定するため、各モジュールの
    ``structlog.stdlib.get_logger(__name__)`` にも反映される。

    Args:
        level: ログレベル ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
        format: 出力形式 ("json" or "text")
        name: 返すロガーの名前
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    package = logging.getLogger(PACKAGE_LOGGER)
    package.setLevel(log_level)
    if not package.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(message)s"))
        package.addHandler(handler)

    renderer: structlog.types.Processor
    if format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    return structlog.stdlib.get_logger(name)


def configure_from(section: LogSection) -> structlog.stdlib.BoundLogger:
    """設定の log セクションからロガーを構成する。"""
    return new_logger(level=section.level, format=section.format)
