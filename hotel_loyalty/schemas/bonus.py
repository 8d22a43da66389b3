from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict


class BalanceOut(BaseModel):
    """Карточка гостя для поиска по телефону (loyalty_level — уже следующий уровень)."""

    guest_phone: str
    last_name: Optional[str] = None
    first_name: Optional[str] = None
    loyalty_level: str
    current_balance: float = 0
    visits_count: int = 0
    last_visit_date: Optional[date] = None


class BalanceSearchOut(BaseModel):
    success: bool = True
    data: Optional[BalanceOut] = None


class BalanceRowOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    phone: str
    last_name: Optional[str] = None
    first_name: Optional[str] = None
    loyalty_level: Optional[str] = None
    bonus_balances: float
    visits_total: int
    last_date_visit: Optional[date] = None


class BalanceListOut(BaseModel):
    success: bool = True
    data: list[BalanceRowOut]
