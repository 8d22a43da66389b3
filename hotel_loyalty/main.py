# hotel_loyalty/main.py
from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

# ✅ чтобы SQLAlchemy увидел модели
import hotel_loyalty.models  # noqa: F401
from hotel_loyalty.api import auth_router, bonuses_router, guests_router, system_router
from hotel_loyalty.core.admission import AdmissionMiddleware, OriginCheck, RateLimitCheck
from hotel_loyalty.core.config import AppConfig
from hotel_loyalty.core.database import Base, create_db_engine, make_session_factory
from hotel_loyalty.core.errors import AppError, UpstreamError, ValidationError, error_response
from hotel_loyalty.core.rate_limit import FixedWindowRateLimiter
from hotel_loyalty.core.shutdown import FORCE_EXIT_GRACE, ShutdownHooks
from hotel_loyalty.services.auth import AuthGate
from hotel_loyalty.services.metrics import Metrics, RequestDurationMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    config: AppConfig = app.state.config
    engine: Engine = app.state.engine
    hooks: ShutdownHooks | None = app.state.shutdown_hooks

    if hooks is not None:
        hooks.install(asyncio.get_running_loop())

    if config.auto_create_tables:
        try:
            Base.metadata.create_all(bind=engine)
        except SQLAlchemyError as e:
            # сервер поднимается, /health покажет проблему с БД
            logger.error("Не удалось создать таблицы: %s", e)

    logger.info("Loyalty API запущен на порту %s", config.port)
    logger.info("Allowed origins: %s", ", ".join(config.origins.origins))
    logger.info("Auth: %s", "Disabled" if config.auth_disabled else "Enabled")

    yield

    logger.info("HTTP сервер остановлен")
    if hooks is not None:
        # внешний SIGTERM тоже получает жёсткий дедлайн на закрытие пула
        hooks.arm_deadline()
    engine.dispose()
    logger.info("База данных отключена")

    if hooks is not None:
        hooks.uninstall(asyncio.get_running_loop())


def _register_exception_handlers(app: FastAPI, config: AppConfig) -> None:
    @app.exception_handler(UpstreamError)
    async def upstream_error_handler(request: Request, exc: UpstreamError):
        logger.error("%s: %s", exc.message, exc.detail)
        if config.is_development and exc.detail:
            return error_response(UpstreamError(exc.detail))
        return error_response(exc)

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.debug("Некорректный запрос %s: %s", request.url.path, exc.errors())
        return error_response(ValidationError())

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        # неизвестный путь или метод -> 404, как для любого несуществующего маршрута
        if exc.status_code in (404, 405):
            return JSONResponse({"error": "Not Found"}, status_code=404)
        return JSONResponse({"success": False, "message": str(exc.detail)}, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Global error: %s", exc)
        message = str(exc) if config.is_development else "Internal Server Error"
        return JSONResponse({"message": message}, status_code=500)


def create_app(
    config: AppConfig,
    engine: Engine | None = None,
    limiter: FixedWindowRateLimiter | None = None,
    install_shutdown_hooks: bool = False,
) -> FastAPI:
    app = FastAPI(title="Hotel Loyalty API", lifespan=lifespan)

    engine = engine or create_db_engine(config)
    metrics = Metrics()

    app.state.config = config
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)
    app.state.auth_gate = AuthGate(config.expected_hash, disabled=config.auth_disabled)
    app.state.metrics = metrics
    app.state.started_at = time.monotonic()
    app.state.shutdown_hooks = (
        ShutdownHooks(deadline=config.shutdown_timeout + FORCE_EXIT_GRACE) if install_shutdown_hooks else None
    )

    limiter = limiter or FixedWindowRateLimiter(config.rate_limit_max, config.rate_limit_window)

    # Порядок: последний добавленный — внешний.
    # metrics -> admission (rate limit, origin) -> CORS -> роуты
    app.add_middleware(
        CORSMiddleware,
        # чужие origin уже отклонены AdmissionMiddleware, здесь только заголовки
        allow_origin_regex=".*",
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_middleware(
        AdmissionMiddleware,
        checks=[
            RateLimitCheck(limiter, trusted_hops=config.trust_proxy_hops),
            OriginCheck(config.origins),
        ],
        log_requests=config.is_debug_logging,
    )
    app.add_middleware(RequestDurationMiddleware, metrics=metrics)

    _register_exception_handlers(app, config)

    app.include_router(auth_router)
    app.include_router(guests_router)
    app.include_router(bonuses_router)
    app.include_router(system_router)

    if config.static_dir is not None and config.static_dir.is_dir():
        app.mount("/app", StaticFiles(directory=str(config.static_dir), html=True), name="static")

    return app
