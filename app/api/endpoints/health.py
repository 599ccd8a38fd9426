"""
Health check endpoint.
"""

import logging
from typing import Any, Dict
from fastapi import APIRouter, Depends, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.clock import isoformat, utcnow
from app.core.database import get_db

router = APIRouter(tags=["Health"])
logger = logging.getLogger(__name__)


@router.get("/health", status_code=status.HTTP_200_OK)
def health_check(db: Session = Depends(get_db)) -> Dict[str, Any]:
    """
    Report service and database status.

    Always 200 so load balancers see the process; `status` turns
    "degraded" when the database is unreachable.
    """
    health_status = {"status": "healthy", "timestamp": isoformat(utcnow()), "database": "healthy"}

    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        health_status["status"] = "degraded"
        health_status["database"] = "unreachable"

    return health_status
