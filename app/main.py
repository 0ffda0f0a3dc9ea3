from fastapi import FastAPI
import logging

from app.api.health import router as health_router
from app.api.links import router as links_router
from app.api.planning import router as planning_router
from core.logging import setup_json_logging

# Setup logging
setup_json_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Content Ops API", version="0.1.0")

# Include routers
app.include_router(health_router)  # Health at root level
app.include_router(links_router, prefix="/api/v1")
app.include_router(planning_router, prefix="/api/v1")
