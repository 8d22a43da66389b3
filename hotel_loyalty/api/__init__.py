from hotel_loyalty.api.auth import router as auth_router
from hotel_loyalty.api.bonuses import router as bonuses_router
from hotel_loyalty.api.guests import router as guests_router
from hotel_loyalty.api.system import router as system_router

__all__ = ["auth_router", "bonuses_router", "guests_router", "system_router"]
