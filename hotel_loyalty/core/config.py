# hotel_loyalty/core/config.py
"""
Конфигурация из окружения (.env поддерживается).

Settings — сырые значения переменных окружения.
AppConfig — проверенная неизменяемая конфигурация, собирается один раз
при старте (build_config) и передаётся компонентам явно.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic import ValidationError as SettingsValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from hotel_loyalty.core.errors import ConfigError
from hotel_loyalty.core.origins import DEFAULT_ALLOWED_ORIGINS, OriginPolicy, parse_origins_list
from hotel_loyalty.core.security import normalize_hash

BASE_DIR = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    PORT: int = 3000
    APP_ENV: str = Field(default="production", validation_alias=AliasChoices("APP_ENV", "NODE_ENV"))

    DATABASE_URL: str | None = None

    # --- Пароль (sha256 hex, допускается префикс sha256: / 0x) ---
    PASSWORD_HASH: str | None = None
    AUTH_DISABLED: bool = False

    # Через запятую, "*" — любая подстрока
    ALLOWED_ORIGINS: str = ""

    # --- Rate limit ---
    RATE_LIMIT_WINDOW: int = Field(default=15 * 60 * 1000, gt=0)  # мс
    RATE_LIMIT_MAX: int = Field(default=100, gt=0)
    TRUST_PROXY_HOPS: int = Field(default=1, ge=0)  # за nginx

    # --- PostgreSQL pool ---
    PG_POOL_MAX: int = Field(default=10, gt=0)
    PG_IDLE_TIMEOUT: int = Field(default=30_000, gt=0)        # мс
    PG_CONNECTION_TIMEOUT: int = Field(default=5_000, gt=0)   # мс
    PG_STATEMENT_TIMEOUT: int = Field(default=10_000, gt=0)   # мс
    PG_SSL_REJECT_UNAUTHORIZED: bool = True

    LOG_LEVEL: str = "info"
    STATIC_DIR: str = str(BASE_DIR / "public")
    SHUTDOWN_TIMEOUT: int = Field(default=10, gt=0)  # сек

    # create_all при старте (таблицы уже есть -> ничего не делает)
    DB_AUTO_CREATE: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        env_ignore_empty=True,
        populate_by_name=True,
    )


@dataclass(frozen=True)
class PoolConfig:
    max_size: int = 10
    idle_timeout: float = 30.0
    connect_timeout: float = 5.0
    statement_timeout_ms: int = 10_000
    ssl_reject_unauthorized: bool = True


@dataclass(frozen=True)
class AppConfig:
    database_url: str
    port: int = 3000
    environment: str = "production"
    auth_disabled: bool = False
    expected_hash: bytes | None = field(default=None, repr=False)
    origins: OriginPolicy = field(default_factory=lambda: OriginPolicy.from_lists(DEFAULT_ALLOWED_ORIGINS))
    rate_limit_max: int = 100
    rate_limit_window: float = 15 * 60.0  # сек
    trust_proxy_hops: int = 1
    pool: PoolConfig = field(default_factory=PoolConfig)
    log_level: str = "info"
    static_dir: Path | None = None
    shutdown_timeout: int = 10
    auto_create_tables: bool = True

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"

    @property
    def is_development(self) -> bool:
        return self.environment.strip().lower() == "development"

    @property
    def is_debug_logging(self) -> bool:
        return self.log_level.strip().lower() == "debug"


def decode_password_hash(raw: str | None) -> bytes | None:
    if raw is None or not raw.strip():
        return None
    normalized = normalize_hash(raw)
    if normalized is None:
        raise ConfigError("PASSWORD_HASH должен быть sha256-хешем из 64 hex-символов")
    return bytes.fromhex(normalized)


def build_config(settings: Settings | None = None) -> AppConfig:
    if settings is None:
        try:
            settings = Settings()
        except SettingsValidationError as e:
            raise ConfigError(f"Некорректные переменные окружения: {e}") from e

    database_url = (settings.DATABASE_URL or "").strip()
    if not database_url:
        raise ConfigError("Переменная DATABASE_URL не задана. Сервер остановлен.")

    expected_hash = decode_password_hash(settings.PASSWORD_HASH)
    if not settings.AUTH_DISABLED and expected_hash is None:
        raise ConfigError(
            "Не задан PASSWORD_HASH и AUTH не отключён. Укажи PASSWORD_HASH или AUTH_DISABLED=true."
        )

    static_dir = Path(settings.STATIC_DIR) if settings.STATIC_DIR else None

    return AppConfig(
        database_url=database_url,
        port=settings.PORT,
        environment=settings.APP_ENV,
        auth_disabled=settings.AUTH_DISABLED,
        expected_hash=expected_hash,
        origins=OriginPolicy.from_lists(
            DEFAULT_ALLOWED_ORIGINS,
            parse_origins_list(settings.ALLOWED_ORIGINS),
        ),
        rate_limit_max=settings.RATE_LIMIT_MAX,
        rate_limit_window=settings.RATE_LIMIT_WINDOW / 1000,
        trust_proxy_hops=settings.TRUST_PROXY_HOPS,
        pool=PoolConfig(
            max_size=settings.PG_POOL_MAX,
            idle_timeout=settings.PG_IDLE_TIMEOUT / 1000,
            connect_timeout=settings.PG_CONNECTION_TIMEOUT / 1000,
            statement_timeout_ms=settings.PG_STATEMENT_TIMEOUT,
            ssl_reject_unauthorized=settings.PG_SSL_REJECT_UNAUTHORIZED,
        ),
        log_level=settings.LOG_LEVEL,
        static_dir=static_dir,
        shutdown_timeout=settings.SHUTDOWN_TIMEOUT,
        auto_create_tables=settings.DB_AUTO_CREATE,
    )
