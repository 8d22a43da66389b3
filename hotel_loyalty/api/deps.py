from __future__ import annotations

from fastapi import Request

from hotel_loyalty.core.config import AppConfig
from hotel_loyalty.services.auth import AuthGate


def get_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_auth_gate(request: Request) -> AuthGate:
    return request.app.state.auth_gate
