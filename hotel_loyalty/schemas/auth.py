from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class AuthIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # тип проверяет AuthGate: не-строка = "пароль обязателен" (400)
    password: Any = None


class AuthOut(BaseModel):
    success: bool
    message: str
