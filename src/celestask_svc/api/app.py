"""FastAPI application for the celestask_svc API.

This module creates and configures the FastAPI application instance
with all necessary routes, and provides the ``celestask_svc`` entry point.
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from .. import config
from ..database import check_db_connection, get_engine, init_db
from ..routes.import_export_routes import import_export_router
from ..services.manifest import resolve_table_order

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables and verify the table order before serving."""
    engine = get_engine()
    init_db(engine)
    order = resolve_table_order(engine)
    logger.info(f"Import/export table order: {', '.join(order)}")
    yield


# Create FastAPI application instance
app = FastAPI(
    title="Celestask Data Transfer API",
    description="Whole-database JSON export and merge/replace import for Celestask",
    version="1.0.0",
    lifespan=lifespan
)

# Include routers with API prefix
app.include_router(import_export_router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    if not check_db_connection():
        return {"status": "degraded", "database": "unreachable"}
    return {"status": "healthy", "database": "ok"}


def main() -> None:
    """Run the API with uvicorn using SERVICE_HOST, SERVICE_PORT and LOG_LEVEL."""
    logging.basicConfig(
        level=config.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    uvicorn.run(app, host=config.SERVICE_HOST, port=config.SERVICE_PORT)
