"""Whole-database export service.

Reads every manifest table verbatim into one versioned document, reports
per-table row counts, and locates the SQLite file for binary snapshots.
"""

import logging
import os
from datetime import date, datetime, timezone
from typing import Dict, List, Optional, Union

from sqlalchemy import func, literal_column, select, table
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import config
from ..schemas.data_transfer import ExportDocument, ExportStatus
from .errors import ExportError
from .manifest import EXPORT_VERSION, TABLE_ORDER

logger = logging.getLogger(__name__)


def export_database(db: Session) -> ExportDocument:
    """Export every manifest table to an ExportDocument.

    Tables are read one after another in manifest order with a plain
    ``SELECT *``; there is no snapshot shared between tables, so concurrent
    writers can make tables disagree with each other.

    Args:
        db: SQLAlchemy database session

    Returns:
        ExportDocument holding the rows of each table exactly as stored

    Raises:
        ExportError: If any table cannot be read. Nothing partial is returned.
    """
    logger.info(f"Starting export of {len(TABLE_ORDER)} tables")

    data: Dict[str, List[dict]] = {}
    for table_name in TABLE_ORDER:
        try:
            stmt = select(literal_column("*")).select_from(table(table_name))
            rows = db.execute(stmt).mappings().all()
        except SQLAlchemyError as e:
            logger.error(f"Error exporting table '{table_name}': {e}", exc_info=True)
            raise ExportError("EXPORT_ERROR", f"Failed to export table '{table_name}'") from e
        data[table_name] = [dict(row) for row in rows]
        logger.debug(f"Exported {len(data[table_name])} rows from '{table_name}'")

    total = sum(len(rows) for rows in data.values())
    logger.info(f"Successfully exported {total} rows across {len(data)} tables")
    return ExportDocument(
        version=EXPORT_VERSION,
        exported_at=datetime.now(timezone.utc),
        data=data,
    )


def get_export_status(db: Session) -> ExportStatus:
    """Count the rows of every manifest table.

    Raises:
        ExportError: If any table cannot be counted.
    """
    table_stats: Dict[str, int] = {}
    for table_name in TABLE_ORDER:
        try:
            stmt = select(func.count()).select_from(table(table_name))
            table_stats[table_name] = db.execute(stmt).scalar_one()
        except SQLAlchemyError as e:
            logger.error(f"Error counting rows of '{table_name}': {e}", exc_info=True)
            raise ExportError("STATUS_ERROR", f"Failed to read status of table '{table_name}'") from e

    return ExportStatus(
        version=EXPORT_VERSION,
        table_stats=table_stats,
        total_records=sum(table_stats.values()),
        supported_tables=list(TABLE_ORDER),
    )


def build_export_filename(today: Optional[date] = None) -> str:
    """Suggested download name for a JSON export, e.g. ``celestask-export-2024-05-01.json``."""
    today = today or datetime.now(timezone.utc).date()
    return f"{config.EXPORT_FILENAME_PREFIX}-export-{today.isoformat()}.json"


def build_snapshot_filename(today: Optional[date] = None) -> str:
    """Suggested download name for a raw SQLite snapshot."""
    today = today or datetime.now(timezone.utc).date()
    return f"{config.EXPORT_FILENAME_PREFIX}-backup-{today.isoformat()}.db"


def resolve_snapshot_path(db_url: Union[str, URL]) -> Optional[str]:
    """Return the absolute path of the SQLite file behind ``db_url``.

    Returns None for in-memory SQLite and for every other backend, since
    there is no single file to hand out.
    """
    url = make_url(db_url)
    if url.get_backend_name() != "sqlite":
        return None
    if not url.database or url.database == ":memory:":
        return None
    return os.path.abspath(url.database)
