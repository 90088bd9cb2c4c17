import uuid
from sqlalchemy import (
    Column,
    String,
    DateTime,
    Text,
    JSON,
    Boolean,
    Date,
    Integer,
    UniqueConstraint,
    Uuid,
)
from datetime import datetime
from meetbook.core.db import Base


class AvailabilityOverride(Base):
    __tablename__ = "availability_overrides"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Calendar-day key, YYYY-MM-DD
    date = Column(String(10), unique=True, nullable=False, index=True)
    slots = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self) -> dict:
        return {"date": self.date, "slots": list(self.slots or [])}


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        UniqueConstraint("booking_date", "slot", name="uq_bookings_date_slot"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(50), nullable=False)
    customer_type = Column(String(16), nullable=False)
    description = Column(Text, nullable=False, default="")

    booking_date = Column(Date, nullable=False, index=True)
    slot = Column(String(5), nullable=False)
    meeting_link = Column(String(500), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "customerType": self.customer_type,
            "description": self.description or "",
            "date": self.booking_date.isoformat(),
            "slot": self.slot,
            "meetingLink": self.meeting_link,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


class EmailVerification(Base):
    __tablename__ = "email_verifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Always stored lower-cased
    email = Column(String(255), unique=True, nullable=False, index=True)
    code = Column(String(6), nullable=False)
    verified = Column(Boolean, default=False, nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
