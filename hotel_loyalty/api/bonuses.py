from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from hotel_loyalty.core.database import get_db
from hotel_loyalty.core.errors import ValidationError
from hotel_loyalty.core.security import canonical_phone
from hotel_loyalty.schemas.bonus import BalanceListOut, BalanceRowOut, BalanceSearchOut
from hotel_loyalty.services.guests import GuestStore, search_guest

router = APIRouter(prefix="/bonuses", tags=["bonuses"])


@router.get("/search", response_model=BalanceSearchOut)
def search_bonuses(phone: Optional[str] = Query(default=None), db: Session = Depends(get_db)):
    if not phone:
        raise ValidationError("Не указан номер телефона для поиска")

    key = canonical_phone(phone)
    if key is None:
        raise ValidationError("Неверный формат номера телефона")

    # data = None -> новый гость, фронт подставит первый уровень
    return BalanceSearchOut(success=True, data=search_guest(GuestStore(db), key))


@router.get("", response_model=BalanceListOut, include_in_schema=False)
@router.get("/", response_model=BalanceListOut)
def list_bonuses(db: Session = Depends(get_db)):
    rows = GuestStore(db).list_balances()
    return BalanceListOut(success=True, data=[BalanceRowOut.model_validate(r) for r in rows])
