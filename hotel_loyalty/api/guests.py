from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hotel_loyalty.core.database import get_db
from hotel_loyalty.schemas.guest import CheckoutIn, GuestCreatedOut, GuestListOut, GuestOut
from hotel_loyalty.services.checkout import validate_checkout
from hotel_loyalty.services.guests import GuestStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/guests", tags=["guests"])


@router.post("", response_model=GuestCreatedOut)
@router.post("/", response_model=GuestCreatedOut, include_in_schema=False)
def create_guest(payload: CheckoutIn, db: Session = Depends(get_db)):
    record = validate_checkout(payload)
    guest = GuestStore(db).insert_checkout(record)
    logger.info("Выезд гостя записан: id=%s booking=%s", guest.id, guest.shelter_booking_id)
    return GuestCreatedOut(
        success=True,
        message="✅ Данные гостя успешно добавлены!",
        data=GuestOut.model_validate(guest),
    )


@router.get("", response_model=GuestListOut, include_in_schema=False)
@router.get("/", response_model=GuestListOut)
def list_guests(db: Session = Depends(get_db)):
    rows = GuestStore(db).list_checkouts()
    return GuestListOut(success=True, data=[GuestOut.model_validate(g) for g in rows])
