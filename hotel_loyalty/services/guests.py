# hotel_loyalty/services/guests.py
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import desc, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hotel_loyalty.core.errors import UpstreamError
from hotel_loyalty.core.tier_rules import next_tier
from hotel_loyalty.models.bonus_balance import BonusBalance
from hotel_loyalty.models.guest import Guest
from hotel_loyalty.schemas.bonus import BalanceOut
from hotel_loyalty.services.checkout import CheckoutRecord

logger = logging.getLogger(__name__)

RECENT_LIMIT = 100


class GuestStore:
    """Доступ к таблицам guests (журнал выездов) и bonuses_balance (только чтение)."""

    def __init__(self, db: Session):
        self.db = db

    def insert_checkout(self, record: CheckoutRecord) -> Guest:
        guest = Guest(
            guest_phone=record.guest_phone,
            last_name=record.last_name,
            first_name=record.first_name,
            checkin_date=record.checkin_date,
            loyalty_level=record.loyalty_level,
            shelter_booking_id=record.shelter_booking_id,
            total_amount=record.total_amount,
            bonus_spent=record.bonus_spent,
        )
        try:
            self.db.add(guest)
            self.db.commit()
            self.db.refresh(guest)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise UpstreamError("Ошибка при добавлении гостя", detail=str(e)) from e
        return guest

    def find_latest_balance(self, phone: str) -> Optional[BonusBalance]:
        stmt = (
            select(BonusBalance)
            .where(BonusBalance.phone == phone)
            .order_by(desc(BonusBalance.last_date_visit))
            .limit(1)
        )
        try:
            return self.db.execute(stmt).scalars().first()
        except SQLAlchemyError as e:
            raise UpstreamError("Ошибка при поиске гостя", detail=str(e)) from e

    def list_checkouts(self, limit: int = RECENT_LIMIT) -> list[Guest]:
        stmt = select(Guest).order_by(desc(Guest.created_at), desc(Guest.id)).limit(limit)
        try:
            return list(self.db.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            raise UpstreamError("Ошибка при получении списка гостей", detail=str(e)) from e

    def list_balances(self, limit: int = RECENT_LIMIT) -> list[BonusBalance]:
        stmt = select(BonusBalance).order_by(desc(BonusBalance.last_date_visit)).limit(limit)
        try:
            return list(self.db.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            raise UpstreamError("Ошибка при получении данных бонусов", detail=str(e)) from e

    def ping(self) -> None:
        try:
            self.db.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise UpstreamError("База данных недоступна", detail=str(e)) from e


def search_guest(store: GuestStore, phone: str) -> Optional[BalanceOut]:
    """
    Последняя запись баланса по телефону.
    loyalty_level в ответе — уровень, который гость получит на этом визите;
    в базе ничего не меняется.
    """
    row = store.find_latest_balance(phone)
    if row is None:
        logger.debug("Гость %s не найден, новый гость", phone)
        return None

    return BalanceOut(
        guest_phone=row.phone,
        last_name=row.last_name,
        first_name=row.first_name,
        loyalty_level=next_tier(row.loyalty_level),
        current_balance=float(row.bonus_balances or 0),
        visits_count=int(row.visits_total or 0),
        last_visit_date=row.last_date_visit,
    )
