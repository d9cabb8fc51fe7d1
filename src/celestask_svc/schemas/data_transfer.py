"""Pydantic schemas for whole-database import/export documents.

All models serialize with camelCase keys (``exportedAt``, ``errorDetails``)
and accept either camelCase or snake_case on input.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class ImportMode(str, Enum):
    """Reconciliation policy for an import."""
    MERGE = "merge"
    REPLACE = "replace"


class CamelModel(BaseModel):
    """Base model emitting camelCase field names."""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class ExportDocument(CamelModel):
    """Portable snapshot of every manifest table."""
    version: str = Field(..., description="Export format version")
    exported_at: datetime = Field(..., description="When the export was produced (UTC)")
    data: Dict[str, List[Dict[str, Any]]] = Field(
        ..., description="Rows per table, keyed by table name, as read from the store"
    )


class TableOutcome(CamelModel):
    """Counters for one table, or the totals across all tables."""
    imported: int = Field(0, description="Rows inserted or updated")
    skipped: int = Field(0, description="Rows with nothing to write")
    errors: int = Field(0, description="Rows the store rejected")

    def add(self, other: "TableOutcome") -> None:
        self.imported += other.imported
        self.skipped += other.skipped
        self.errors += other.errors


class RowErrorDetail(CamelModel):
    """One rejected row."""
    table: str = Field(..., description="Table the row was addressed to")
    row_id: Any = Field("unknown", description="Identity of the row, or 'unknown' when it has none")
    message: str = Field(..., description="Why the row was rejected")

    model_config = {
        "json_schema_extra": {
            "example": {
                "table": "tasks",
                "rowId": 42,
                "message": "NOT NULL constraint failed: tasks.title"
            }
        }
    }


class ImportResult(CamelModel):
    """Outcome of an import, returned even when some rows failed."""
    mode: ImportMode = Field(..., description="Reconciliation policy that was applied")
    summary: Dict[str, TableOutcome] = Field(..., description="Per-table outcome in processing order")
    totals: TableOutcome = Field(..., description="Sum of all per-table outcomes")
    imported_at: datetime = Field(..., description="When the import committed (UTC)")
    source_version: Optional[str] = Field(None, description="Version declared by the imported document")
    error_details: Optional[List[RowErrorDetail]] = Field(
        None, description="First rejected rows, present only when errors occurred"
    )
    total_errors: Optional[int] = Field(
        None, description="Count of all rejected rows, present only when errors occurred"
    )


class ExportStatus(CamelModel):
    """Row counts per manifest table, for pre-import diagnostics."""
    version: str = Field(..., description="Export format version")
    table_stats: Dict[str, int] = Field(..., description="Row count per manifest table")
    total_records: int = Field(..., description="Sum of all row counts")
    supported_tables: List[str] = Field(..., description="Manifest tables in processing order")
