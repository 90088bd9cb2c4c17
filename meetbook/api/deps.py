from fastapi import Depends
from sqlalchemy.orm import Session

from meetbook.core.db import get_db
from meetbook.services.verification import VerificationStore


def get_verification_store(db: Session = Depends(get_db)) -> VerificationStore:
    return VerificationStore(db)
