# hotel_loyalty/core/shutdown.py
"""
Необработанные исключения -> тот же путь остановки, что и SIGTERM.

uvicorn по SIGTERM перестаёт принимать соединения, ждёт активные запросы
(не дольше timeout_graceful_shutdown) и вызывает shutdown lifespan,
где закрывается пул БД. Если и это зависло, процесс убивает таймер
жёсткого дедлайна (os._exit(1)).
"""
from __future__ import annotations

import asyncio
import logging
import os
import signal
import sys
import threading

logger = logging.getLogger(__name__)

# запас поверх timeout_graceful_shutdown на shutdown lifespan
FORCE_EXIT_GRACE = 5


class ShutdownHooks:
    def __init__(self, kill=os.kill, deadline: float | None = None, force_exit=os._exit):
        self._kill = kill
        self._force_exit = force_exit
        self.deadline = deadline
        self._timer: threading.Timer | None = None
        self._requested = False
        self._prev_excepthook = None
        self._prev_thread_hook = None

    @property
    def requested(self) -> bool:
        return self._requested

    def request_shutdown(self, reason: str, error: BaseException | None = None) -> None:
        logger.warning("Сигнал %s. Остановка сервера...", reason)
        if error is not None:
            logger.error("Причина остановки: %r", error, exc_info=error)
        if self._requested:
            return
        self._requested = True
        self.arm_deadline()
        self._kill(os.getpid(), signal.SIGTERM)

    def arm_deadline(self) -> None:
        if self.deadline is None or self._timer is not None:
            return
        self._timer = threading.Timer(self.deadline, self._deadline_expired)
        self._timer.daemon = True
        self._timer.start()

    def _deadline_expired(self) -> None:
        logger.error("Принудительное завершение: не уложились в %s с", self.deadline)
        self._force_exit(1)

    def _loop_handler(self, loop: asyncio.AbstractEventLoop, context: dict) -> None:
        error = context.get("exception")
        if error is None:
            loop.default_exception_handler(context)
            return
        self.request_shutdown("unhandledRejection", error)

    def _excepthook(self, exc_type, exc, tb) -> None:
        self.request_shutdown("uncaughtException", exc)

    def _thread_hook(self, args: threading.ExceptHookArgs) -> None:
        self.request_shutdown("uncaughtException", args.exc_value)

    def install(self, loop: asyncio.AbstractEventLoop) -> None:
        loop.set_exception_handler(self._loop_handler)
        self._prev_excepthook = sys.excepthook
        self._prev_thread_hook = threading.excepthook
        sys.excepthook = self._excepthook
        threading.excepthook = self._thread_hook

    def uninstall(self, loop: asyncio.AbstractEventLoop) -> None:
        loop.set_exception_handler(None)
        if self._prev_excepthook is not None:
            sys.excepthook = self._prev_excepthook
        if self._prev_thread_hook is not None:
            threading.excepthook = self._prev_thread_hook
