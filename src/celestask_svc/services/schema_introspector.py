"""Live schema reflection for the import/export engine.

Incoming rows are trusted for values only, never for shape: before a row
touches the store its keys are intersected with the columns the store
actually has, so fields from an older or newer export are dropped instead
of failing the statement.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Set

from sqlalchemy import inspect
from sqlalchemy.engine import Connection, Engine

from .errors import UnknownTableError

logger = logging.getLogger(__name__)


class SchemaIntrospector:
    """Read-only view of table and column names in the live store.

    Column lists are cached for the lifetime of the instance. Create one per
    import so that schema changes between requests are picked up.
    """

    def __init__(self, bind: Connection | Engine):
        self._inspector = inspect(bind)
        self._columns: Dict[str, List[str]] = {}

    def has_table(self, table: str) -> bool:
        if table in self._columns:
            return True
        return self._inspector.has_table(table)

    def get_column_names(self, table: str) -> List[str]:
        """Return the table's column names in declared order.

        Raises:
            UnknownTableError: If the table does not exist.
        """
        if table not in self._columns:
            if not self._inspector.has_table(table):
                raise UnknownTableError(table)
            self._columns[table] = [col["name"] for col in self._inspector.get_columns(table)]
            logger.debug(f"Reflected {len(self._columns[table])} columns for table '{table}'")
        return self._columns[table]

    def filter_known_columns(self, table: str, row: Mapping[str, Any]) -> Dict[str, Any]:
        """Keep only the entries of ``row`` whose key is a live column of ``table``.

        The result follows the table's column order. It is empty when the row
        shares no column with the table.
        """
        return {name: row[name] for name in self.get_column_names(table) if name in row}

    def get_foreign_key_dependencies(self, tables: Iterable[str]) -> Dict[str, Set[str]]:
        """Map each existing table to the set of tables its foreign keys reference.

        Tables missing from the store map to an empty set.
        """
        dependencies: Dict[str, Set[str]] = {}
        for table in tables:
            if not self.has_table(table):
                dependencies[table] = set()
                continue
            dependencies[table] = {
                fk["referred_table"]
                for fk in self._inspector.get_foreign_keys(table)
                if fk.get("referred_table")
            }
        return dependencies
