from datetime import date

import pytest

from hotel_loyalty.core.errors import ValidationError
from hotel_loyalty.schemas.guest import CheckoutIn
from hotel_loyalty.services.checkout import normalize_checkin_date, validate_checkout

VALID = {
    "guest_phone": "+7 (999) 123-45-67",
    "last_name": " Иванов ",
    "first_name": "Иван",
    "checkin_date": "05.01.2024",
    "loyalty_level": " 2 СЕЗОНА ",
    "shelter_booking_id": "SH-1001",
    "total_amount": "15000.50",
    "bonus_spent": "300",
}


def checkout(**overrides):
    data = dict(VALID)
    data.update(overrides)
    return validate_checkout(CheckoutIn(**data))


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2024-01-05", "2024-01-05"),
        ("05.01.2024", "2024-01-05"),
        ("05-01-2024", "2024-01-05"),
        ("2024.01.05", "2024-01-05"),
        (" 2024-01-05 ", "2024-01-05"),
    ],
)
def test_date_formats(raw, expected):
    assert normalize_checkin_date(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "13-13-2024", "31.02.2024", "5.1.2024", "2024/01/05", "yesterday"])
def test_bad_dates(raw):
    assert normalize_checkin_date(raw) is None


def test_valid_record_is_normalized():
    record = checkout()
    assert record.guest_phone == "9991234567"
    assert record.last_name == "Иванов"
    assert record.checkin_date == date(2024, 1, 5)
    assert record.loyalty_level == "2 СЕЗОНА"
    assert record.total_amount == 15000.5
    assert record.bonus_spent == 300


@pytest.mark.parametrize("amount", [1, "1", 1_000_000, "1000000"])
def test_amount_bounds_accepted(amount):
    assert checkout(total_amount=amount).total_amount == float(amount)


@pytest.mark.parametrize("amount", [0, "0", 1_000_001, -5, "abc", "nan", "inf"])
def test_amount_bounds_rejected(amount):
    with pytest.raises(ValidationError):
        checkout(total_amount=amount)


@pytest.mark.parametrize("field", ["guest_phone", "last_name", "first_name", "shelter_booking_id", "total_amount"])
def test_required_fields(field):
    with pytest.raises(ValidationError, match="обязательные поля"):
        checkout(**{field: None})


def test_short_phone():
    with pytest.raises(ValidationError, match="номер телефона"):
        checkout(guest_phone="123-45-67")


def test_blank_name():
    with pytest.raises(ValidationError):
        checkout(first_name="   ")


def test_long_name():
    with pytest.raises(ValidationError, match="120"):
        checkout(last_name="Я" * 121)
    assert checkout(last_name="Я" * 120).last_name == "Я" * 120


def test_booking_id_length():
    with pytest.raises(ValidationError, match="слишком длинный"):
        checkout(shelter_booking_id="B" * 81)
    assert checkout(shelter_booking_id="B" * 80).shelter_booking_id == "B" * 80


def test_unparseable_date():
    with pytest.raises(ValidationError, match="даты заезда"):
        checkout(checkin_date="13-13-2024")


def test_missing_date():
    with pytest.raises(ValidationError):
        checkout(checkin_date=None)


@pytest.mark.parametrize("raw, expected", [(None, 0), ("", 0), ("-10", 0), ("abc", 0), ("12.7", 12), (12.7, 12), (1_000_000, 1_000_000)])
def test_bonus_spent_parsing(raw, expected):
    assert checkout(bonus_spent=raw).bonus_spent == expected


def test_bonus_spent_ceiling():
    with pytest.raises(ValidationError, match="баллы"):
        checkout(bonus_spent=1_000_001)


def test_empty_loyalty_level_stored_as_null():
    assert checkout(loyalty_level="  ").loyalty_level is None
