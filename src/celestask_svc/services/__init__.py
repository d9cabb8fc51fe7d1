"""Service layer for the celestask_svc application.

This package contains the whole-database import/export engine: the table
manifest, live schema introspection, the exporter and the importer.
"""

from .errors import (
    CyclicDependencyError,
    DataTransferError,
    ExportError,
    ImportTransactionError,
    ImportValidationError,
    UnknownTableError,
)
from .manifest import EXPORT_VERSION, TABLE_ORDER, resolve_table_order
from .schema_introspector import SchemaIntrospector
from .export_service import export_database, get_export_status
from .import_service import import_database, validate_import_request

__all__ = [
    "CyclicDependencyError",
    "DataTransferError",
    "ExportError",
    "ImportTransactionError",
    "ImportValidationError",
    "UnknownTableError",
    "EXPORT_VERSION",
    "TABLE_ORDER",
    "resolve_table_order",
    "SchemaIntrospector",
    "export_database",
    "get_export_status",
    "import_database",
    "validate_import_request",
]
