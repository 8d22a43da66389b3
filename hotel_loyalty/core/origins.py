# hotel_loyalty/core/origins.py
"""
Проверка Origin для CORS.

Список разрешённых источников = встроенные + ALLOWED_ORIGINS из окружения.
Строится один раз при старте и дальше не меняется.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable

DEFAULT_BACKEND_HOST = "loyalty-api.usadba4.ru"

DEFAULT_ALLOWED_ORIGINS: tuple[str, ...] = (
    "https://usadba4.ru",
    "https://www.usadba4.ru",
    f"https://{DEFAULT_BACKEND_HOST}",
    "http://localhost",
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1",
    "http://127.0.0.1:3000",
)


def parse_origins_list(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def compile_wildcard(pattern: str) -> re.Pattern[str]:
    # "*" -> любая подстрока, остальное экранируем; якоря даёт fullmatch
    body = ".*".join(re.escape(part) for part in pattern.split("*"))
    return re.compile(body, re.IGNORECASE)


@dataclass(frozen=True)
class OriginPolicy:
    origins: tuple[str, ...]
    exact: frozenset[str] = field(repr=False)
    wildcards: tuple[re.Pattern[str], ...] = field(repr=False)

    @classmethod
    def from_lists(cls, *lists: Iterable[str]) -> "OriginPolicy":
        unique: list[str] = []
        for items in lists:
            for origin in items:
                if origin and origin not in unique:
                    unique.append(origin)

        exact = frozenset(o for o in unique if "*" not in o)
        wildcards = tuple(compile_wildcard(o) for o in unique if "*" in o)
        return cls(origins=tuple(unique), exact=exact, wildcards=wildcards)

    def is_allowed(self, origin: str | None) -> bool:
        # Без Origin — не браузер или тот же источник
        if not origin:
            return True
        if origin in self.exact:
            return True
        return any(rx.fullmatch(origin) for rx in self.wildcards)
