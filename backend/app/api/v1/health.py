"""
Health check and status endpoints.
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.core.datetime_utils import utc_now
from app.core import settings
from app.models import get_db

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """
    Health check endpoint.

    Reports the service version and whether the database answers a trivial
    query. Always returns 200 so load balancers can read the body.
    """
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except Exception as e:
        logger.warning(f"Health check database probe failed: {e}")
        database = "unavailable"

    return {
        "status": "healthy" if database == "ok" else "degraded",
        "database": database,
        "timestamp": utc_now().isoformat(),
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }
