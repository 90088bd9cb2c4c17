from datetime import datetime
from typing import List, Optional
import re

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from meetbook.core.db import get_db
from meetbook.services import availability


router = APIRouter()

_DATE_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class AvailabilityUpdate(BaseModel):
    date: str = Field(..., min_length=10, max_length=10)
    slots: List[str]


def _require_date_key(value: str) -> str:
    if not _DATE_KEY_RE.match(value):
        raise HTTPException(status_code=400, detail="Invalid date format, expected YYYY-MM-DD")
    return availability.parse_day(value).isoformat()


@router.get("")
def get_availability(date: Optional[str] = None, db: Session = Depends(get_db)):
    if not date:
        raise HTTPException(status_code=400, detail="Date is required")

    day = availability.parse_day(_require_date_key(date))
    now = datetime.now(availability.booking_timezone())
    return {"slots": availability.resolve(db, day, now=now)}


@router.post("")
def set_availability(payload: AvailabilityUpdate, db: Session = Depends(get_db)):
    """Create or replace the slot list for a single date."""
    key = _require_date_key(payload.date)
    try:
        override = availability.upsert_override(db, key, payload.slots)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"success": True, "availability": override.to_dict()}
