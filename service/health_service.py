"""Health service for basic health checks"""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from service.dto import HealthResponseDTO

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def get_health(session: Optional[Session] = None) -> HealthResponseDTO:
    """
    Get health status, pinging the database when a session is given.

    Returns:
        HealthResponseDTO: Health check result
    """
    logger.info("Health check requested")

    database = None
    if session is not None:
        try:
            session.execute(text("SELECT 1"))
            database = "ok"
        except SQLAlchemyError as e:
            logger.warning(f"Database ping failed: {e}")
            database = "unavailable"

    return HealthResponseDTO(
        ok=database != "unavailable",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=VERSION,
        database=database
    )
