import hashlib

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

import hotel_loyalty.models  # noqa: F401
from hotel_loyalty.core.config import AppConfig
from hotel_loyalty.core.database import Base
from hotel_loyalty.main import create_app

SECRET_HASH = hashlib.sha256(b"secret").digest()


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def make_client(engine):
    clients = []

    def _make(limiter=None, **overrides):
        params = dict(database_url="sqlite://", expected_hash=SECRET_HASH, static_dir=None)
        params.update(overrides)
        app = create_app(AppConfig(**params), engine=engine, limiter=limiter)
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client):
    return make_client()
