# hotel_loyalty/core/errors.py
"""
Ошибки приложения.

AppError и наследники возвращаются клиенту как {"success": false, "message": ...}
с соответствующим HTTP-статусом. ConfigError — фатальная ошибка при старте,
до приёма трафика.
"""
from __future__ import annotations

from starlette.responses import JSONResponse


class ConfigError(RuntimeError):
    """Некорректная конфигурация окружения. Процесс должен завершиться."""


class AppError(Exception):
    status_code: int = 500
    default_message: str = "Внутренняя ошибка сервера"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Некорректные данные запроса"


class AuthError(AppError):
    status_code = 401
    default_message = "Неверный пароль"


class OriginRejected(AppError):
    status_code = 403
    default_message = "Origin not allowed by CORS"

    def __init__(self, origin: str | None = None, message: str | None = None):
        self.origin = origin
        super().__init__(message)


class RateLimited(AppError):
    status_code = 429
    default_message = "Слишком много запросов. Повторите попытку позже."

    def __init__(self, retry_after: int = 0, message: str | None = None):
        self.retry_after = max(0, int(retry_after))
        super().__init__(message)


class UpstreamError(AppError):
    """Ошибка БД. message — публичный текст, detail — для логов."""

    status_code = 500
    default_message = "Ошибка базы данных"

    def __init__(self, message: str | None = None, detail: str | None = None):
        self.detail = detail
        super().__init__(message)


def error_response(exc: AppError, headers: dict[str, str] | None = None) -> JSONResponse:
    out = dict(headers or {})
    if isinstance(exc, RateLimited) and exc.retry_after:
        out["Retry-After"] = str(exc.retry_after)
    return JSONResponse(
        {"success": False, "message": exc.message},
        status_code=exc.status_code,
        headers=out,
    )
