"""One-time email verification codes backed by the database.

Every state transition is a single conditional statement, so two requests
racing on the same email cannot both verify or both consume a record.
"""
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable
import logging
import secrets

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from meetbook.core.config import settings
from meetbook.core.models import EmailVerification

logger = logging.getLogger(__name__)


class CodeStatus(str, Enum):
    VERIFIED = "verified"
    INVALID = "invalid"
    EXPIRED = "expired"
    MISSING = "missing"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def generate_code() -> str:
    return str(100000 + secrets.randbelow(900000))


class VerificationStore:
    def __init__(self, db: Session, clock: Callable[[], datetime] = datetime.utcnow):
        self.db = db
        self.clock = clock
        self.code_ttl = timedelta(minutes=settings.VERIFICATION_CODE_TTL_MINUTES)
        self.verified_ttl = timedelta(minutes=settings.VERIFIED_EMAIL_TTL_MINUTES)

    def request_code(self, email: str) -> str:
        """Issue a fresh code for the email, replacing any pending one."""
        email = normalize_email(email)
        code = generate_code()
        expires_at = self.clock() + self.code_ttl

        self.purge_expired()
        result = self.db.execute(
            update(EmailVerification)
            .where(EmailVerification.email == email)
            .values(code=code, verified=False, expires_at=expires_at, created_at=self.clock())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.db.add(
                EmailVerification(
                    email=email,
                    code=code,
                    verified=False,
                    expires_at=expires_at,
                    created_at=self.clock(),
                )
            )
        try:
            self.db.commit()
        except IntegrityError:
            # A concurrent request inserted first; overwrite it
            self.db.rollback()
            self.db.execute(
                update(EmailVerification)
                .where(EmailVerification.email == email)
                .values(code=code, verified=False, expires_at=expires_at)
                .execution_options(synchronize_session=False)
            )
            self.db.commit()

        logger.info(f"Verification code issued for {email}")
        return code

    def check_code(self, email: str, code: str) -> CodeStatus:
        email = normalize_email(email)
        now = self.clock()

        result = self.db.execute(
            update(EmailVerification)
            .where(
                EmailVerification.email == email,
                EmailVerification.code == code,
                EmailVerification.expires_at >= now,
            )
            .values(verified=True, expires_at=now + self.verified_ttl)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            self.db.commit()
            logger.info(f"Email verified: {email}")
            return CodeStatus.VERIFIED

        record = (
            self.db.query(EmailVerification)
            .filter(EmailVerification.email == email)
            .first()
        )
        if record is None:
            self.db.rollback()
            return CodeStatus.MISSING

        if record.expires_at < now:
            self.db.delete(record)
            self.db.commit()
            logger.info(f"Verification code expired for {email}")
            return CodeStatus.EXPIRED

        self.db.rollback()
        return CodeStatus.INVALID

    def consume(self, email: str, commit: bool = True) -> bool:
        """Atomically take the verified state for a booking; single use.

        With ``commit=False`` the delete joins the caller's transaction, so a
        rollback there restores the verification.
        """
        email = normalize_email(email)
        result = self.db.execute(
            delete(EmailVerification)
            .where(
                EmailVerification.email == email,
                EmailVerification.verified.is_(True),
                EmailVerification.expires_at >= self.clock(),
            )
            .execution_options(synchronize_session=False)
        )
        consumed = result.rowcount == 1
        if commit:
            self.db.commit()
        return consumed

    def purge_expired(self) -> int:
        result = self.db.execute(
            delete(EmailVerification)
            .where(EmailVerification.expires_at < self.clock())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount:
            logger.debug(f"Purged {result.rowcount} expired verification records")
        return result.rowcount
