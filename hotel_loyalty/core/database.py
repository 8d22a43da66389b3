# hotel_loyalty/core/database.py
from __future__ import annotations

from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from hotel_loyalty.core.config import AppConfig

Base = declarative_base()


def normalize_database_url(url: str) -> str:
    # postgres:// из PaaS-окружений -> драйвер psycopg 3
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    if url.startswith("postgresql://"):
        url = "postgresql+psycopg://" + url[len("postgresql://"):]
    return url


def _postgres_connect_args(config: AppConfig, query: dict) -> dict:
    pool = config.pool
    args: dict = {
        "connect_timeout": max(1, int(round(pool.connect_timeout))),
        # каждый запрос ограничен statement_timeout, чтобы не держать пул
        "options": f"-c statement_timeout={int(pool.statement_timeout_ms)}",
    }
    if "sslmode" not in query:
        if config.is_production:
            args["sslmode"] = "verify-full" if pool.ssl_reject_unauthorized else "require"
        else:
            args["sslmode"] = "disable"
    return args


def create_db_engine(config: AppConfig) -> Engine:
    url = make_url(normalize_database_url(config.database_url))
    pool = config.pool

    if url.get_backend_name() == "postgresql":
        return create_engine(
            url,
            pool_size=pool.max_size,
            max_overflow=0,
            pool_timeout=pool.connect_timeout,
            pool_recycle=max(1, int(pool.idle_timeout)),
            pool_pre_ping=True,
            connect_args=_postgres_connect_args(config, dict(url.query)),
        )

    # sqlite и прочее — для локальной разработки
    return create_engine(url, pool_pre_ping=True)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
