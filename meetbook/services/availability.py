"""Availability resolution for a single calendar day.

The schedule for a day is either its override (authoritative, replaces the
defaults entirely) or the weekday/weekend default list. Booked slots are
subtracted, and the configured order is preserved. When the caller passes
the current time, slots of that day that have already started are dropped.
"""
from datetime import date, datetime
from typing import Iterable, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import logging
import re

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from meetbook.core.config import settings
from meetbook.core.errors import InvalidDateError
from meetbook.core.models import AvailabilityOverride, Booking

logger = logging.getLogger(__name__)

_SLOT_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

DEFAULT_WEEKDAY_SLOTS = ["09:00", "10:00", "11:00", "13:00", "14:00", "15:00", "16:00"]
DEFAULT_WEEKEND_SLOTS = ["10:00", "12:00", "14:00"]


def _parse_slot_list(value: str, fallback: List[str]) -> List[str]:
    try:
        slots = [parse_slot(v) for v in value.split(",") if v.strip() != ""]
    except ValueError:
        return list(fallback)
    return slots or list(fallback)


def parse_slot(value: str) -> str:
    """Validate an HH:MM time-of-day string."""
    if not isinstance(value, str) or not _SLOT_RE.match(value.strip()):
        raise ValueError(f"Invalid slot: {value!r}")
    return value.strip()


def parse_day(value) -> date:
    """Normalise a date or ISO date/timestamp string to a calendar day."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise InvalidDateError("Invalid date")

    raw = value.strip()
    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError:
        raise InvalidDateError("Invalid date format, expected YYYY-MM-DD")


def day_key(day: date) -> str:
    return day.isoformat()


def dedupe_slots(slots: Iterable[str]) -> List[str]:
    seen = set()
    ordered = []
    for slot in slots:
        if slot not in seen:
            seen.add(slot)
            ordered.append(slot)
    return ordered


def default_slots(day: date) -> List[str]:
    if day.weekday() >= 5:
        return _parse_slot_list(settings.BOOKING_WEEKEND_SLOTS, DEFAULT_WEEKEND_SLOTS)
    return _parse_slot_list(settings.BOOKING_WEEKDAY_SLOTS, DEFAULT_WEEKDAY_SLOTS)


def get_override(db: Session, day: date) -> AvailabilityOverride | None:
    return (
        db.query(AvailabilityOverride)
        .filter(AvailabilityOverride.date == day_key(day))
        .first()
    )


def schedule_for(db: Session, day: date) -> List[str]:
    """Configured slots for the day, before bookings are taken into account."""
    override = get_override(db, day)
    if override is not None:
        return list(override.slots or [])
    return default_slots(day)


def booked_slots(db: Session, day: date) -> set:
    rows = db.query(Booking.slot).filter(Booking.booking_date == day).all()
    return {r[0] for r in rows}


def booking_timezone() -> ZoneInfo:
    try:
        return ZoneInfo(settings.BOOKING_TIMEZONE)
    except ZoneInfoNotFoundError:
        return ZoneInfo("UTC")


def slot_start(day: date, slot: str) -> datetime:
    hour, minute = (int(p) for p in slot.split(":"))
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=booking_timezone())


def resolve(db: Session, day, now: Optional[datetime] = None) -> List[str]:
    day = parse_day(day)
    slots = schedule_for(db, day)
    taken = booked_slots(db, day)
    available = [s for s in slots if s not in taken]
    if now is not None:
        now = now.astimezone(booking_timezone())
        if now.date() == day:
            available = [s for s in available if slot_start(day, s) > now]
    logger.debug(
        "Availability for %s: %s (booked: %s)", day_key(day), available, sorted(taken)
    )
    return available


def upsert_override(db: Session, day, slots: Iterable[str]) -> AvailabilityOverride:
    """Create or replace the slot list for a single day."""
    key = day_key(parse_day(day))
    cleaned = dedupe_slots(parse_slot(s) for s in slots)

    override = db.query(AvailabilityOverride).filter(AvailabilityOverride.date == key).first()
    if override is None:
        override = AvailabilityOverride(date=key, slots=cleaned)
        db.add(override)
        try:
            db.commit()
        except IntegrityError:
            # Lost the insert race to another request; update its row instead
            db.rollback()
            override = (
                db.query(AvailabilityOverride)
                .filter(AvailabilityOverride.date == key)
                .one()
            )
            override.slots = cleaned
            db.commit()
    else:
        override.slots = cleaned
        db.commit()

    db.refresh(override)
    logger.info("Availability override stored for %s: %s", key, cleaned)
    return override
