"""Logging configuration setup."""

import logging
from config.settings import config


def setup_logging(level: str = None):
    """ログ設定のセットアップ"""
    # 引数がなければ settings.py からログレベルを取得
    level_name = (level or config.LOG_LEVEL).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s"
    )
    return logging.getLogger(__name__)
