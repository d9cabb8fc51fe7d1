"""Pydantic schemas for the celestask_svc application.

This package contains all Pydantic models for request/response validation
and serialization.
"""

from .data_transfer import (
    ExportDocument,
    ExportStatus,
    ImportMode,
    ImportResult,
    RowErrorDetail,
    TableOutcome,
)

__all__ = [
    "ExportDocument",
    "ExportStatus",
    "ImportMode",
    "ImportResult",
    "RowErrorDetail",
    "TableOutcome",
]
