"""ロガー設定のユニットテスト"""

import logging

from k1s0_targeting import new_logger
from k1s0_targeting.config import LogSection
from k1s0_targeting.logger import configure_from


def test_new_logger_json_format() -> None:
    logger = new_logger(level="INFO", format="json")
    assert logger is not None


def test_new_logger_text_format() -> None:
    logger = new_logger(level="DEBUG", format="text")
    assert logger is not None


def test_configure_from_section() -> None:
    logger = configure_from(LogSection(level="WARNING", format="text"))
    bound = logger.bind(toggle_key="header")
    assert bound is not None
    assert logging.getLogger("k1s0_targeting").level == logging.WARNING
