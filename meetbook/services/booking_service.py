"""Booking orchestration.

A booking attempt moves through: email verified -> slot reserved ->
committed -> meeting provisioned -> link stored -> notified. The
verification consume and the ledger insert share one short transaction;
the unique constraint on (booking_date, slot) decides which of two racing
requests wins. Outbound calls happen only after that transaction commits.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from meetbook.core.config import settings
from meetbook.core.errors import (
    EmailNotVerifiedError,
    MissingFieldsError,
    SlotAlreadyBookedError,
    SlotUnavailableError,
)
from meetbook.core.models import Booking
from meetbook.services import availability
from meetbook.services.email_service import EmailService
from meetbook.services.meeting_service import (
    MeetingProvider,
    MeetingProviderError,
    fallback_meeting_link,
)
from meetbook.services.verification import VerificationStore, normalize_email

logger = logging.getLogger(__name__)

CUSTOMER_TYPES = ("existing", "new")
REQUIRED_FIELDS = ("name", "email", "phone", "customer_type", "date", "slot")


@dataclass
class BookingRequest:
    name: str
    email: str
    phone: str
    customer_type: str
    date: str
    slot: str
    description: Optional[str] = None


class BookingOrchestrator:
    def __init__(
        self,
        db: Session,
        verification_store: VerificationStore,
        email_service: EmailService,
        meeting_provider: MeetingProvider,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.db = db
        self.verification_store = verification_store
        self.email_service = email_service
        self.meeting_provider = meeting_provider
        self.clock = clock or (lambda: datetime.now(availability.booking_timezone()))

    def _validate(self, request: BookingRequest):
        missing = [
            f for f in REQUIRED_FIELDS
            if not isinstance(getattr(request, f), str) or not getattr(request, f).strip()
        ]
        if missing:
            raise MissingFieldsError("All required fields must be filled in")
        if request.customer_type not in CUSTOMER_TYPES:
            raise MissingFieldsError("customerType must be 'existing' or 'new'")

        day = availability.parse_day(request.date)
        try:
            slot = availability.parse_slot(request.slot)
        except ValueError:
            raise SlotUnavailableError("Invalid slot")
        return day, slot

    def _check_slot_offered(self, day, slot: str) -> datetime:
        if slot not in availability.schedule_for(self.db, day):
            raise SlotUnavailableError("Slot not available")

        start = availability.slot_start(day, slot)
        if start <= self.clock():
            raise SlotUnavailableError("Slot is in the past")
        return start

    def _provision_meeting(self, name: str, start: datetime) -> str:
        try:
            meeting = self.meeting_provider.create_meeting(
                f"Möte med {name}", start, settings.BOOKING_DURATION_MINUTES
            )
            logger.info(f"Meeting created: {meeting.meeting_id}")
            return meeting.join_url
        except MeetingProviderError as e:
            logger.error(f"Failed to create meeting, using fallback link: {e}")
        except Exception as e:
            logger.exception(f"Unexpected meeting provider error, using fallback link: {e}")
        return fallback_meeting_link()

    def _notify(self, booking: Booking) -> None:
        for send in (
            self.email_service.send_booking_confirmation,
            self.email_service.send_booking_notification,
        ):
            try:
                if not send(booking):
                    logger.warning(f"{send.__name__} not delivered for booking {booking.id}")
            except Exception as e:
                logger.error(f"{send.__name__} failed for booking {booking.id}: {e}")

    def _store_meeting_link(self, booking: Booking, link: str) -> None:
        try:
            booking.meeting_link = link
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to store meeting link for booking {booking.id}: {e}")
        self.db.refresh(booking)

    def create_booking(self, request: BookingRequest) -> Booking:
        day, slot = self._validate(request)
        email = normalize_email(request.email)
        name = request.name.strip()

        # Reservation: the verification consume and the ledger insert commit
        # together, before any outbound call is made.
        try:
            if not self.verification_store.consume(email, commit=False):
                logger.info(f"Booking rejected - email not verified: {email}")
                raise EmailNotVerifiedError(
                    "Email has not been verified. Please verify your email first."
                )

            start = self._check_slot_offered(day, slot)

            booking = Booking(
                name=name,
                email=email,
                phone=request.phone.strip(),
                customer_type=request.customer_type,
                description=(request.description or "").strip(),
                booking_date=day,
                slot=slot,
                meeting_link="",
            )
            self.db.add(booking)
            try:
                self.db.flush()
            except IntegrityError:
                logger.info(f"Slot already booked: {day.isoformat()} {slot}")
                raise SlotAlreadyBookedError("This time slot is already booked")
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Slot reserved: {day.isoformat()} {slot} ({email})")

        link = self._provision_meeting(name, start)
        self._store_meeting_link(booking, link)
        logger.info(f"Booking created: {booking.id} {day.isoformat()} {slot} ({email})")

        self._notify(booking)
        return booking
