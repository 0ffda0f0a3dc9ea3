"""Common dependencies for FastAPI dependency injection"""
import uuid
from datetime import datetime, timezone
from typing import Generator

from sqlalchemy.orm import Session

from core.config import LinkingSettings, PlanningSettings, get_linking_settings, get_planning_settings
from core.db import get_db


def get_db_session() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields:
        Session: SQLAlchemy database session
    """
    yield from get_db()


def get_trace_id() -> str:
    """
    Generate unique trace ID for request tracking.

    Returns:
        str: Unique trace ID
    """
    return f"api_{datetime.now(timezone.utc).strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:8]}"


def get_linking_config() -> LinkingSettings:
    return get_linking_settings()


def get_planning_config() -> PlanningSettings:
    return get_planning_settings()
