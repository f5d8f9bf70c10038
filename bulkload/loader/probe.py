"""
Post-load row counts.

Purely diagnostic: a failing count query (table missing, unusable name) is
recorded as None and never touches the LoadResult.
"""

import logging
import re
from typing import Dict, Iterable, List, Optional

from .classifier import StatementKind, classify, extract_target_identifier
from .executor import ExecutionError, ScalarExecutor
from .models import Statement

logger = logging.getLogger(__name__)

# plain or "quoted" parts joined by dots, quotes inside doubled
_PART = r'(?:[A-Za-z_][\w$]*|"(?:[^"]|"")+")'
_IDENTIFIER = re.compile(r"^" + _PART + r"(?:\." + _PART + r")*$")


def quote_ident(name: str) -> str:
    """Identifier usable in a query: kept as written when already valid, quoted otherwise."""
    if not name or not name.strip():
        raise ValueError(f"Empty table name: {name!r}")
    if _IDENTIFIER.match(name):
        return name
    return '"' + name.replace('"', '""') + '"'


def count_query(table: str) -> str:
    return f"SELECT COUNT(*) AS cnt FROM {quote_ident(table)}"


def verify(executor: ScalarExecutor, table_names: Iterable[str]) -> Dict[str, Optional[int]]:
    counts: Dict[str, Optional[int]] = {}
    for table in table_names:
        try:
            value = executor.scalar(count_query(table))
        except ValueError as e:
            logger.warning("%r: Not available (%s)", table, e)
            counts[table] = None
            continue
        except ExecutionError as e:
            logger.info("%s: Not available (%s)", table, e.message)
            counts[table] = None
            continue
        counts[table] = int(value) if value is not None else 0
        logger.info("%s: %d", table, counts[table])
    return counts


def created_tables(statements: Iterable[Statement]) -> List[str]:
    """Tables created by a script, in order, without duplicates, quoted as in the script."""
    seen: List[str] = []
    for stmt in statements:
        if classify(stmt.text) is not StatementKind.TABLE_CREATE:
            continue
        name = extract_target_identifier(stmt.text)
        if name and name not in seen:
            seen.append(name)
    return seen
