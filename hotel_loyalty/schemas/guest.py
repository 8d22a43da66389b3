from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class CheckoutIn(BaseModel):
    """
    Данные выезда гостя из формы администратора.
    Типы намеренно свободные: проверка и нормализация — в services/checkout.py,
    чтобы каждая ошибка возвращала свой текст и статус 400.
    """
    model_config = ConfigDict(extra="ignore")

    guest_phone: Any = None
    last_name: Any = None
    first_name: Any = None
    checkin_date: Any = None
    loyalty_level: Any = None
    shelter_booking_id: Any = None
    total_amount: Any = None
    bonus_spent: Any = None


class GuestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    guest_phone: str
    last_name: str
    first_name: str
    checkin_date: date
    loyalty_level: Optional[str] = None
    shelter_booking_id: str
    total_amount: float
    bonus_spent: int
    created_at: datetime


class GuestCreatedOut(BaseModel):
    success: bool = True
    message: str
    data: GuestOut


class GuestListOut(BaseModel):
    success: bool = True
    data: list[GuestOut]
