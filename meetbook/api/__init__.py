from fastapi import APIRouter
from .health import router as health_router
from .availability import router as availability_router
from .booking import router as booking_router
from .verify_email import router as verify_email_router

router = APIRouter()

router.include_router(health_router, prefix="/health", tags=["health"])
router.include_router(availability_router, prefix="/availability", tags=["availability"])
router.include_router(booking_router, prefix="/book", tags=["booking"])
router.include_router(verify_email_router, prefix="/verify-email", tags=["verification"])
