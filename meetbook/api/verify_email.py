from typing import Optional
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, EmailStr

from meetbook.api.deps import get_verification_store
from meetbook.services.email_service import EmailService, get_email_service
from meetbook.services.verification import CodeStatus, VerificationStore

logger = logging.getLogger(__name__)

router = APIRouter()

_STATUS_ERRORS = {
    CodeStatus.MISSING: "No code has been sent to this email",
    CodeStatus.EXPIRED: "The code has expired",
    CodeStatus.INVALID: "Incorrect code",
}


class VerifyEmailRequest(BaseModel):
    email: Optional[EmailStr] = None
    action: Optional[str] = None
    code: Optional[str] = None


@router.post("")
def verify_email(
    payload: VerifyEmailRequest,
    store: VerificationStore = Depends(get_verification_store),
    email_service: EmailService = Depends(get_email_service),
):
    if not payload.email:
        raise HTTPException(status_code=400, detail="Email is required")
    email = str(payload.email)

    if payload.action == "send":
        code = store.request_code(email)
        if not email_service.send_verification_code(email, code):
            logger.error(f"Verification code dispatch failed for {email}")
            raise HTTPException(status_code=500, detail="Failed to send verification code")
        return {"success": True, "message": "Verification code sent"}

    if payload.action == "verify":
        if not payload.code:
            raise HTTPException(status_code=400, detail="Code is required")

        status = store.check_code(email, payload.code.strip())
        if status is not CodeStatus.VERIFIED:
            raise HTTPException(status_code=400, detail=_STATUS_ERRORS[status])
        return {"success": True, "verified": True}

    raise HTTPException(status_code=400, detail="Invalid action")
