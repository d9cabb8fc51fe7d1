"""Table manifest: which tables are transferred and in what order.

``TABLE_ORDER`` is part of the export format. Parents come before the
tables that reference them, so inserts run forward and deletes run in
reverse. ``resolve_table_order`` re-derives the same order from the live
foreign-key graph and refuses to run against a cyclic schema.
"""

import heapq
import logging
from typing import Dict, Iterable, List, Mapping, Optional, Set

from sqlalchemy.engine import Connection, Engine

from .errors import CyclicDependencyError
from .schema_introspector import SchemaIntrospector

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.6.0"
IDENTITY_COLUMN = "id"

TABLE_ORDER: tuple = (
    "projects",
    "people",
    "tags",
    "tasks",
    "task_assignees",
    "task_tags",
    "project_assignees",
    "notes",
    "custom_fields",
    "custom_field_values",
    "saved_views",
)


def build_dependency_graph(
    tables: Iterable[str], foreign_keys: Mapping[str, Iterable[str]]
) -> Dict[str, Set[str]]:
    """Build ``{table: tables it references}`` restricted to ``tables``.

    Self references and references to tables outside the set are dropped;
    they cannot influence the relative order of the given tables.
    """
    table_set = set(tables)
    graph: Dict[str, Set[str]] = {}
    for name in tables:
        referenced = set(foreign_keys.get(name, ()))
        graph[name] = {ref for ref in referenced if ref in table_set and ref != name}
    return graph


def topological_order(tables: List[str], graph: Mapping[str, Set[str]]) -> List[str]:
    """Order ``tables`` so every table follows the tables it references.

    Kahn's algorithm. Among tables that are ready at the same time the one
    listed first in ``tables`` wins, so an already valid order comes back
    unchanged.

    Raises:
        CyclicDependencyError: If some tables can never become ready.
    """
    position = {name: index for index, name in enumerate(tables)}
    remaining: Dict[str, int] = {}
    dependents: Dict[str, List[str]] = {name: [] for name in tables}
    for name in tables:
        refs = {ref for ref in graph.get(name, ()) if ref in position and ref != name}
        remaining[name] = len(refs)
        for ref in refs:
            dependents[ref].append(name)

    ready = [(position[name], name) for name, count in remaining.items() if count == 0]
    heapq.heapify(ready)

    ordered: List[str] = []
    while ready:
        _, name = heapq.heappop(ready)
        ordered.append(name)
        for dependent in dependents[name]:
            remaining[dependent] -= 1
            if remaining[dependent] == 0:
                heapq.heappush(ready, (position[dependent], dependent))

    if len(ordered) != len(tables):
        raise CyclicDependencyError(name for name in tables if name not in ordered)
    return ordered


def resolve_table_order(
    bind: Connection | Engine, introspector: Optional[SchemaIntrospector] = None
) -> List[str]:
    """Compute the processing order of the manifest tables from the live schema.

    Args:
        bind: Engine or connection to reflect foreign keys from.
        introspector: Existing introspector to reuse instead of creating one.

    Returns:
        Manifest tables, parents first.

    Raises:
        CyclicDependencyError: If the live foreign keys form a cycle.
    """
    if introspector is None:
        introspector = SchemaIntrospector(bind)
    foreign_keys = introspector.get_foreign_key_dependencies(TABLE_ORDER)
    order = topological_order(list(TABLE_ORDER), build_dependency_graph(TABLE_ORDER, foreign_keys))
    if order != list(TABLE_ORDER):
        logger.warning(f"Live schema reorders manifest tables: {order}")
    return order
