"""Health check routes"""

from fastapi import APIRouter, Depends
import logging

from sqlalchemy import text
from sqlalchemy.orm import Session

from app.config import settings
from api.dependencies import get_db

router = APIRouter(tags=["Health"])
logger = logging.getLogger("recipebox.api.health")


@router.get("/health-check")
def health_check(db: Session = Depends(get_db)):
    """Basic health check endpoint; also pings the database"""
    db.execute(text("SELECT 1"))
    return {"status": "ok", "service": settings.app_name, "database": "ok"}
