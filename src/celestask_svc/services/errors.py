"""Exceptions raised by the data transfer services.

Every error that reaches the HTTP layer carries a machine-readable ``code``,
a human-readable ``message`` and the status code the route should answer
with. Row-level failures never show up here: the importer folds them into
its result.
"""


class DataTransferError(Exception):
    """Base class for import/export failures surfaced to the caller."""

    status_code = 500

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class ImportValidationError(DataTransferError):
    """Raised when mode or payload shape is rejected before any mutation."""

    status_code = 400


class ImportTransactionError(DataTransferError):
    """Raised when the import transaction itself fails and is rolled back."""

    def __init__(self, message: str):
        super().__init__("IMPORT_FAILED", message)


class ExportError(DataTransferError):
    """Raised when reading the store fails during an export or status query."""


class CyclicDependencyError(ValueError):
    """Raised when the foreign-key graph between manifest tables has a cycle."""

    def __init__(self, tables):
        self.tables = sorted(tables)
        super().__init__(f"Circular foreign-key dependency between tables: {', '.join(self.tables)}")


class UnknownTableError(LookupError):
    """Raised when a table is not present in the live store."""

    def __init__(self, table: str):
        self.table = table
        super().__init__(f"Table '{table}' does not exist")
