from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Integer, Numeric, String, func

from hotel_loyalty.core.database import Base


class Guest(Base):
    """Журнал выездов: одна строка на каждый выезд, без обновлений."""

    __tablename__ = "guests"

    id = Column(Integer, primary_key=True, index=True)

    # последние 10 цифр номера
    guest_phone = Column(String(10), index=True, nullable=False)

    last_name = Column(String(120), nullable=False)
    first_name = Column(String(120), nullable=False)

    checkin_date = Column(Date, nullable=False)
    loyalty_level = Column(String(40), nullable=True)

    shelter_booking_id = Column(String(80), nullable=False)

    total_amount = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    bonus_spent = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, server_default=func.now(), nullable=False)
