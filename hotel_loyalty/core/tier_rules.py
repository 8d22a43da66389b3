from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class LoyaltyLevel:
    normalized: str
    display: str


# Порядок важен: гость поднимается на одну ступень за визит
LOYALTY_LEVELS: tuple[LoyaltyLevel, ...] = (
    LoyaltyLevel("1 сезон", "1 СЕЗОН"),
    LoyaltyLevel("2 сезона", "2 СЕЗОНА"),
    LoyaltyLevel("3 сезона", "3 СЕЗОНА"),
    LoyaltyLevel("4 сезона", "4 СЕЗОНА"),
)

FIRST_LEVEL = LOYALTY_LEVELS[0]
TOP_LEVEL = LOYALTY_LEVELS[-1]


def normalize_tier(value) -> str:
    return re.sub(r"\s+", " ", str(value or "").strip().lower())


def next_tier(current) -> str:
    """
    Уровень, который гость получит на этом визите.
    Новый/неизвестный уровень -> первый, верхний уровень не растёт.
    """
    normalized = normalize_tier(current)
    if not normalized:
        return FIRST_LEVEL.display

    for index, level in enumerate(LOYALTY_LEVELS):
        if level.normalized == normalized:
            return LOYALTY_LEVELS[min(index + 1, len(LOYALTY_LEVELS) - 1)].display

    return FIRST_LEVEL.display
