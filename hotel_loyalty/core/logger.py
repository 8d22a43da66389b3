# hotel_loyalty/core/logger.py
"""
Настройка логирования.

Модули пишут через logging.getLogger(__name__); здесь только один раз
при старте настраивается корневой логгер.
"""

import logging
import sys


def setup_logging(level: str = "INFO") -> None:
    """
    Настроить корневой логгер.

    level: имя уровня (debug, info, warning, error, critical),
    неизвестное имя -> INFO.
    """
    numeric_level = getattr(logging, (level or "INFO").upper(), logging.INFO)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )

    # access-лог uvicorn дублирует debug-лог запросов
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
