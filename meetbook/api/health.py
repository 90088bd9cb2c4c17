from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from meetbook.core.db import get_db

router = APIRouter()

@router.get("")
def health_check(db: Session = Depends(get_db)):
    """Health check including database connectivity"""
    health_status = {
        "status": "healthy",
        "version": "1.0.0",
        "services": {}
    }

    try:
        db.execute(text("SELECT 1"))
        health_status["services"]["database"] = "healthy"
    except Exception as e:
        health_status["services"]["database"] = f"unhealthy: {str(e)}"
        health_status["status"] = "degraded"

    return health_status
