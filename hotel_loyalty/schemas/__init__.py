from hotel_loyalty.schemas.auth import AuthIn, AuthOut
from hotel_loyalty.schemas.bonus import BalanceOut, BalanceRowOut, BalanceSearchOut, BalanceListOut
from hotel_loyalty.schemas.guest import CheckoutIn, GuestOut, GuestCreatedOut, GuestListOut
from hotel_loyalty.schemas.system import ConfigOut, HealthOut

__all__ = [
    "AuthIn",
    "AuthOut",
    "BalanceOut",
    "BalanceRowOut",
    "BalanceSearchOut",
    "BalanceListOut",
    "CheckoutIn",
    "GuestOut",
    "GuestCreatedOut",
    "GuestListOut",
    "ConfigOut",
    "HealthOut",
]
