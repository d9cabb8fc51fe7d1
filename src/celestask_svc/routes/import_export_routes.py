"""FastAPI routes for whole-database import and export.

Endpoints:
    GET  /export         JSON export document as a download
    GET  /export/status  row count per manifest table
    GET  /export/sqlite  raw SQLite database file as a download
    POST /import         import a document in merge or replace mode
"""

import logging
import os
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from fastapi.responses import FileResponse, JSONResponse
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.data_transfer import ExportStatus, ImportResult
from ..services.errors import DataTransferError
from ..services.export_service import (
    build_export_filename,
    build_snapshot_filename,
    export_database,
    get_export_status,
    resolve_snapshot_path,
)
from ..services.import_service import import_database

logger = logging.getLogger(__name__)

import_export_router = APIRouter()


@import_export_router.get("/export")
async def export_endpoint(db: Session = Depends(get_db)) -> JSONResponse:
    """Export every manifest table as a downloadable JSON document.

    Raises:
        HTTPException: 500 with code EXPORT_ERROR if any table cannot be read
    """
    logger.info("GET /export request")

    try:
        document = export_database(db)
    except DataTransferError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_dict())
    except Exception as e:
        logger.error(e, exc_info=True)
        raise HTTPException(
            status_code=500,
            detail={"code": "EXPORT_ERROR", "message": "Failed to export data"}
        )

    filename = build_export_filename()
    return JSONResponse(
        content=document.model_dump(mode="json", by_alias=True),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@import_export_router.get("/export/status", response_model=ExportStatus)
async def export_status_endpoint(db: Session = Depends(get_db)) -> ExportStatus:
    """Report the row count of each manifest table before an import."""
    try:
        return get_export_status(db)
    except DataTransferError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_dict())
    except Exception as e:
        logger.error(e, exc_info=True)
        raise HTTPException(
            status_code=500,
            detail={"code": "STATUS_ERROR", "message": "Failed to get export status"}
        )


@import_export_router.get("/export/sqlite")
async def export_sqlite_endpoint(db: Session = Depends(get_db)) -> FileResponse:
    """Stream the SQLite database file as an opaque binary attachment.

    Raises:
        HTTPException: 404 with code DATABASE_NOT_FOUND when the store is
            not a file-backed SQLite database or the file is missing
    """
    path = resolve_snapshot_path(db.get_bind().url)
    if path is None or not os.path.isfile(path):
        logger.warning(f"SQLite snapshot requested but no database file is available: {path}")
        raise HTTPException(
            status_code=404,
            detail={"code": "DATABASE_NOT_FOUND", "message": "Database file not found"}
        )

    return FileResponse(
        path,
        media_type="application/octet-stream",
        filename=build_snapshot_filename()
    )


@import_export_router.post("/import", response_model=ImportResult, response_model_exclude_none=True)
async def import_endpoint(
    payload: Any = Body(None),
    mode: str = Query("merge", description="Reconciliation mode: 'merge' or 'replace'"),
    db: Session = Depends(get_db)
) -> ImportResult:
    """Import an export document.

    Rows the store rejects are reported in the result and do not fail the
    request, so a 200 may still carry non-zero error counts.

    Raises:
        HTTPException: 400 with INVALID_MODE or INVALID_PAYLOAD before any
            write, 500 with IMPORT_FAILED when the import was rolled back
    """
    logger.info(f"POST /import request - mode: {mode}")

    try:
        return import_database(db, payload, mode)
    except DataTransferError as e:
        if e.status_code >= 500:
            logger.error(e, exc_info=True)
        else:
            logger.warning(f"Import rejected: {e.code} - {e.message}")
        raise HTTPException(status_code=e.status_code, detail=e.to_dict())
    except Exception as e:
        logger.error(e, exc_info=True)
        raise HTTPException(
            status_code=500,
            detail={"code": "INTERNAL_ERROR", "message": "Internal server error"}
        )
