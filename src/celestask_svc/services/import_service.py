"""Whole-database import service.

An import runs in one transaction and walks the manifest tables parents
first. ``replace`` wipes every manifest table (children first) before
inserting; ``merge`` upserts each row by its ``id``. Every row runs in its
own savepoint: a row the store rejects is rolled back on its own, counted
and described in the result, and the import carries on. Only a failure
outside a single row aborts and rolls back the whole import.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import column, delete, insert, select, table, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import config
from ..schemas.data_transfer import ImportMode, ImportResult, RowErrorDetail, TableOutcome
from .errors import ImportTransactionError, ImportValidationError
from .manifest import EXPORT_VERSION, IDENTITY_COLUMN, TABLE_ORDER, resolve_table_order
from .schema_introspector import SchemaIntrospector

logger = logging.getLogger(__name__)


class RowOutcome(Enum):
    """How a single row ended up."""
    IMPORTED = "imported"
    SKIPPED = "skipped"
    FAILED = "failed"


class MalformedRowError(ValueError):
    """Raised for a row that is not a JSON object."""


@dataclass
class RowResult:
    """Result of applying one row: an outcome, plus the error when it failed."""
    outcome: RowOutcome
    error: Optional[RowErrorDetail] = None


class ErrorLog:
    """Collects row errors, keeping details for the first ``limit`` only."""

    def __init__(self, limit: int):
        self.limit = limit
        self.details: List[RowErrorDetail] = []
        self.total = 0

    def record(self, detail: RowErrorDetail) -> None:
        self.total += 1
        if len(self.details) < self.limit:
            self.details.append(detail)


def validate_import_request(mode: Any, payload: Any) -> Tuple[ImportMode, Dict[str, list]]:
    """Check mode and payload shape before anything touches the store.

    Args:
        mode: Requested reconciliation mode, must be exactly 'merge' or 'replace'
        payload: Decoded request body

    Returns:
        Tuple of (ImportMode, {table: rows}) holding only manifest tables
        whose value is a list

    Raises:
        ImportValidationError: With code INVALID_MODE or INVALID_PAYLOAD
    """
    try:
        import_mode = ImportMode(mode)
    except ValueError:
        raise ImportValidationError("INVALID_MODE", "Mode must be 'merge' or 'replace'")

    if not isinstance(payload, dict):
        raise ImportValidationError("INVALID_PAYLOAD", "Import payload must be a JSON object")

    data = payload.get("data")
    if not isinstance(data, dict):
        raise ImportValidationError("INVALID_PAYLOAD", "Import payload must contain a 'data' object")

    tables = {name: data[name] for name in TABLE_ORDER if isinstance(data.get(name), list)}
    if not tables:
        raise ImportValidationError(
            "INVALID_PAYLOAD",
            f"Import data must contain at least one table array. Supported tables: {', '.join(TABLE_ORDER)}"
        )

    ignored = sorted(set(data) - set(tables))
    if ignored:
        logger.info(f"Ignoring unsupported or non-array tables in import data: {ignored}")

    return import_mode, tables


def import_database(db: Session, payload: Any, mode: Any = "merge") -> ImportResult:
    """Import an export document into the store.

    Args:
        db: SQLAlchemy database session. When it is already inside a
            transaction the import runs in a savepoint and committing the
            outer transaction is left to the caller.
        payload: Decoded import document, ``{"version"?: str, "data": {table: [row]}}``
        mode: 'merge' (upsert by id) or 'replace' (wipe, then insert)

    Returns:
        ImportResult with per-table outcomes, totals and, when rows failed,
        the first error details plus the total error count

    Raises:
        ImportValidationError: When mode or payload shape is invalid. Nothing is written.
        ImportTransactionError: When the import fails as a whole. Everything is rolled back.
    """
    import_mode, tables = validate_import_request(mode, payload)

    source_version = _source_version(payload)
    if source_version is not None and source_version != EXPORT_VERSION:
        logger.warning(
            f"Importing document version '{source_version}' into format version '{EXPORT_VERSION}'"
        )

    row_count = sum(len(rows) for rows in tables.values())
    logger.info(
        f"Starting {import_mode.value} import of {row_count} rows across {len(tables)} tables"
    )

    summary: Dict[str, TableOutcome] = {}
    error_log = ErrorLog(config.ERROR_DETAIL_LIMIT)

    transaction = db.begin_nested() if db.in_transaction() else db.begin()
    try:
        with transaction:
            introspector = SchemaIntrospector(db.connection())
            order = resolve_table_order(db.connection(), introspector)

            if import_mode is ImportMode.REPLACE:
                _clear_tables(db, reversed(order))

            for table_name in order:
                summary[table_name] = _import_table(
                    db, introspector, table_name, tables.get(table_name), import_mode, error_log
                )
    except Exception as e:
        logger.error(f"Import failed, all changes rolled back: {e}", exc_info=True)
        raise ImportTransactionError(f"Import failed and was rolled back: {e}") from e

    totals = TableOutcome()
    for outcome in summary.values():
        totals.add(outcome)

    logger.info(
        f"Import completed: {totals.imported} imported, {totals.skipped} skipped, "
        f"{totals.errors} errors"
    )

    result = ImportResult(
        mode=import_mode,
        summary=summary,
        totals=totals,
        imported_at=datetime.now(timezone.utc),
        source_version=source_version,
    )
    if error_log.total:
        result.error_details = error_log.details
        result.total_errors = error_log.total
    return result


def _source_version(payload: dict) -> Optional[str]:
    """Version the document claims, as text. Numeric versions are stringified."""
    version = payload.get("version")
    if version is None or isinstance(version, str):
        return version
    return str(version)


def _clear_tables(db: Session, table_names: Iterable[str]) -> None:
    """Delete all rows of each table, tolerating tables that cannot be cleared."""
    for table_name in table_names:
        try:
            with db.begin_nested():
                deleted = db.execute(delete(table(table_name))).rowcount
            logger.info(f"Cleared {deleted} rows from '{table_name}'")
        except SQLAlchemyError as e:
            logger.warning(f"Could not clear table '{table_name}', continuing: {e}")


def _import_table(
    db: Session,
    introspector: SchemaIntrospector,
    table_name: str,
    rows: Optional[list],
    mode: ImportMode,
    error_log: ErrorLog,
) -> TableOutcome:
    """Apply every row of one table and fold the row results into its outcome."""
    outcome = TableOutcome()
    if not rows:
        return outcome

    if not introspector.has_table(table_name):
        logger.warning(f"Table '{table_name}' does not exist, skipping {len(rows)} rows")
        outcome.skipped = len(rows)
        return outcome

    for row in rows:
        result = _apply_row(db, introspector, table_name, row, mode)
        if result.outcome is RowOutcome.IMPORTED:
            outcome.imported += 1
        elif result.outcome is RowOutcome.SKIPPED:
            outcome.skipped += 1
        else:
            outcome.errors += 1
            error_log.record(result.error)

    logger.info(
        f"Table '{table_name}': {outcome.imported} imported, {outcome.skipped} skipped, "
        f"{outcome.errors} errors"
    )
    return outcome


def _apply_row(
    db: Session,
    introspector: SchemaIntrospector,
    table_name: str,
    row: Any,
    mode: ImportMode,
) -> RowResult:
    """Reconcile one row inside its own savepoint.

    Store errors, malformed rows and values the driver cannot bind (out of
    range integers, unsupported types) become a FAILED result. Anything else
    propagates and aborts the import.
    """
    try:
        with db.begin_nested():
            return RowResult(_reconcile_row(db, introspector, table_name, row, mode))
    except (SQLAlchemyError, MalformedRowError, OverflowError, TypeError, ValueError) as e:
        message = str(getattr(e, "orig", None) or e)
        row_id = _row_identifier(row)
        logger.debug(f"Row {row_id} of '{table_name}' rejected: {message}")
        return RowResult(
            RowOutcome.FAILED,
            RowErrorDetail(table=table_name, row_id=row_id, message=message),
        )


def _reconcile_row(
    db: Session,
    introspector: SchemaIntrospector,
    table_name: str,
    row: Any,
    mode: ImportMode,
) -> RowOutcome:
    if not isinstance(row, dict):
        raise MalformedRowError(f"Row must be an object, got {type(row).__name__}")

    values = introspector.filter_known_columns(table_name, row)
    if not values:
        return RowOutcome.SKIPPED

    target = table(table_name, *(column(name) for name in values))

    if mode is ImportMode.MERGE and IDENTITY_COLUMN in values:
        identity_column = target.c[IDENTITY_COLUMN]
        existing = db.execute(
            select(identity_column).where(identity_column == values[IDENTITY_COLUMN])
        ).first()
        if existing is not None:
            changes = {name: value for name, value in values.items() if name != IDENTITY_COLUMN}
            if not changes:
                return RowOutcome.SKIPPED
            db.execute(
                update(target).where(identity_column == values[IDENTITY_COLUMN]).values(changes)
            )
            return RowOutcome.IMPORTED

    db.execute(insert(target).values(values))
    return RowOutcome.IMPORTED


def _row_identifier(row: Any) -> Any:
    if isinstance(row, dict) and row.get(IDENTITY_COLUMN) is not None:
        return row[IDENTITY_COLUMN]
    return "unknown"
