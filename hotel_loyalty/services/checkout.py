from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

from hotel_loyalty.core.errors import ValidationError
from hotel_loyalty.core.security import canonical_phone
from hotel_loyalty.schemas.guest import CheckoutIn

MAX_NAME_LENGTH = 120
MAX_BOOKING_ID_LENGTH = 80
MAX_AMOUNT = 1_000_000
MAX_BONUS_SPENT = 1_000_000

# (regex, порядок групп год/месяц/день)
_DATE_FORMATS = (
    (re.compile(r"^([0-9]{4})-([0-9]{2})-([0-9]{2})$"), (1, 2, 3)),
    (re.compile(r"^([0-9]{2})\.([0-9]{2})\.([0-9]{4})$"), (3, 2, 1)),
    (re.compile(r"^([0-9]{2})-([0-9]{2})-([0-9]{4})$"), (3, 2, 1)),
    (re.compile(r"^([0-9]{4})\.([0-9]{2})\.([0-9]{2})$"), (1, 2, 3)),
)

_INT_PREFIX_RE = re.compile(r"^\s*([+-]?[0-9]+)")


@dataclass(frozen=True)
class CheckoutRecord:
    guest_phone: str
    last_name: str
    first_name: str
    checkin_date: date
    loyalty_level: Optional[str]
    shelter_booking_id: str
    total_amount: float
    bonus_spent: int


def normalize_checkin_date(value) -> Optional[str]:
    """YYYY-MM-DD / DD.MM.YYYY / DD-MM-YYYY / YYYY.MM.DD -> YYYY-MM-DD. None — не распознано."""
    raw = str(value or "").strip()
    if not raw:
        return None

    for rx, (y, m, d) in _DATE_FORMATS:
        match = rx.match(raw)
        if not match:
            continue
        iso = f"{match.group(y)}-{match.group(m)}-{match.group(d)}"
        try:
            date.fromisoformat(iso)
        except ValueError:
            return None
        return iso

    return None


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_amount(value) -> float:
    if isinstance(value, bool):
        return math.nan
    try:
        return float(str(value).strip())
    except (TypeError, ValueError):
        return math.nan


def _parse_bonus(value) -> int:
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    if isinstance(value, int):
        return value
    match = _INT_PREFIX_RE.match(str(value))
    return int(match.group(1)) if match else 0


def validate_checkout(payload: CheckoutIn) -> CheckoutRecord:
    required = (
        payload.guest_phone,
        payload.last_name,
        payload.first_name,
        payload.shelter_booking_id,
        payload.total_amount,
    )
    if any(_is_blank(v) for v in required):
        raise ValidationError(
            "Заполните обязательные поля: телефон, фамилия, имя, номер бронирования и сумму."
        )

    phone = canonical_phone(payload.guest_phone)
    if phone is None:
        raise ValidationError("Укажите корректный номер телефона гостя.")

    last_name = str(payload.last_name).strip()
    first_name = str(payload.first_name).strip()
    booking_id = str(payload.shelter_booking_id).strip()
    loyalty_level = str(payload.loyalty_level or "").strip()

    if not last_name or not first_name:
        raise ValidationError("Фамилия и имя не могут быть пустыми.")

    if len(last_name) > MAX_NAME_LENGTH or len(first_name) > MAX_NAME_LENGTH:
        raise ValidationError("Фамилия и имя не должны превышать 120 символов.")

    if not booking_id:
        raise ValidationError("Укажите номер бронирования Shelter.")

    if len(booking_id) > MAX_BOOKING_ID_LENGTH:
        raise ValidationError("Номер бронирования слишком длинный.")

    checkin = normalize_checkin_date(payload.checkin_date)
    if not checkin:
        raise ValidationError("Некорректный формат даты заезда.")

    amount = _parse_amount(payload.total_amount)
    if not math.isfinite(amount) or amount <= 0 or amount > MAX_AMOUNT:
        raise ValidationError("Сумма при выезде должна быть положительным числом не более 1 000 000.")

    bonus_spent = max(0, _parse_bonus(payload.bonus_spent))
    if bonus_spent > MAX_BONUS_SPENT:
        raise ValidationError("Списанные баллы не могут превышать 1 000 000.")

    return CheckoutRecord(
        guest_phone=phone,
        last_name=last_name,
        first_name=first_name,
        checkin_date=date.fromisoformat(checkin),
        loyalty_level=loyalty_level or None,
        shelter_booking_id=booking_id,
        total_amount=amount,
        bonus_spent=bonus_spent,
    )
