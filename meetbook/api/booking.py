from typing import Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from sqlalchemy.orm import Session

from meetbook.api.deps import get_verification_store
from meetbook.core.db import get_db
from meetbook.services.booking_service import BookingOrchestrator, BookingRequest
from meetbook.services.email_service import EmailService, get_email_service
from meetbook.services.meeting_service import MeetingProvider, get_meeting_provider
from meetbook.services.verification import VerificationStore


router = APIRouter()


class BookingCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=50)
    customer_type: Literal["existing", "new"] = Field(..., alias="customerType")
    description: Optional[str] = Field(default=None, max_length=2000)
    date: str = Field(..., min_length=1)
    slot: str = Field(..., min_length=1, max_length=5)


@router.post("")
def create_booking(
    payload: BookingCreate,
    db: Session = Depends(get_db),
    verification_store: VerificationStore = Depends(get_verification_store),
    email_service: EmailService = Depends(get_email_service),
    meeting_provider: MeetingProvider = Depends(get_meeting_provider),
):
    orchestrator = BookingOrchestrator(
        db, verification_store, email_service, meeting_provider
    )
    booking = orchestrator.create_booking(
        BookingRequest(
            name=payload.name,
            email=str(payload.email),
            phone=payload.phone,
            customer_type=payload.customer_type,
            description=payload.description,
            date=payload.date,
            slot=payload.slot,
        )
    )
    return {"success": True, "booking": booking.to_dict()}
