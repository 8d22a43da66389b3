# hotel_loyalty/models/__init__.py
from hotel_loyalty.models.guest import Guest
from hotel_loyalty.models.bonus_balance import BonusBalance

__all__ = ["Guest", "BonusBalance"]
