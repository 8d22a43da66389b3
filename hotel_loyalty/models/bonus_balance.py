from __future__ import annotations

from sqlalchemy import Column, Date, Integer, Numeric, String

from hotel_loyalty.core.database import Base


class BonusBalance(Base):
    # Таблица заполняется снаружи (выгрузка из PMS), здесь только чтение
    __tablename__ = "bonuses_balance"

    id = Column(Integer, primary_key=True)

    phone = Column(String(10), index=True, nullable=False)
    last_name = Column(String(120), nullable=True)
    first_name = Column(String(120), nullable=True)

    loyalty_level = Column(String(40), nullable=True)

    bonus_balances = Column(Numeric(12, 2, asdecimal=False), default=0, nullable=False)
    visits_total = Column(Integer, default=0, nullable=False)
    last_date_visit = Column(Date, nullable=True)
