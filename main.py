# main.py
"""
Запуск:
    python main.py

Конфигурация — из окружения / .env (см. hotel_loyalty/core/config.py).
При ошибке конфигурации процесс завершается с кодом 1 до приёма запросов.
"""
import logging
import sys

from dotenv import load_dotenv
load_dotenv()

import uvicorn

from hotel_loyalty.core.config import build_config
from hotel_loyalty.core.errors import ConfigError
from hotel_loyalty.core.logger import setup_logging
from hotel_loyalty.main import create_app

logger = logging.getLogger("hotel_loyalty")


def main() -> int:
    try:
        config = build_config()
    except ConfigError as e:
        setup_logging("INFO")
        logger.critical("❌ %s", e)
        return 1

    setup_logging(config.log_level)
    app = create_app(config, install_shutdown_hooks=True)

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=config.port,
        proxy_headers=False,  # X-Forwarded-For разбирает RateLimitCheck
        timeout_graceful_shutdown=config.shutdown_timeout,
        log_config=None,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
