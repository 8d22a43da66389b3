from __future__ import annotations

from pydantic import BaseModel


class ConfigOut(BaseModel):
    authDisabled: bool


class HealthOut(BaseModel):
    status: str
    database: str
    uptime: float
