"""
Classify one SQL statement by its leading keywords.

- Pure functions of the statement text: same text -> same kind, always.
- Schema kinds (zone/table/index create, drop) run in the first pass,
  everything else in the second.
- Tolerance decides how a failure of each kind is reported.
"""

import re
from enum import Enum
from typing import NamedTuple, Optional


class StatementKind(str, Enum):
    ZONE_CREATE = "CREATE ZONE"
    TABLE_CREATE = "CREATE TABLE"
    INDEX_CREATE = "CREATE INDEX"
    DROP = "DROP"
    INSERT = "INSERT"
    OTHER_DML = "DML"
    UNKNOWN = "SQL"


class Tolerance(str, Enum):
    SOFT = "soft"
    HARD = "hard"


SCHEMA_KINDS = frozenset({
    StatementKind.ZONE_CREATE,
    StatementKind.TABLE_CREATE,
    StatementKind.INDEX_CREATE,
    StatementKind.DROP,
})

TOLERANCE = {
    StatementKind.ZONE_CREATE: Tolerance.SOFT,
    StatementKind.DROP: Tolerance.SOFT,
    StatementKind.INDEX_CREATE: Tolerance.SOFT,
    StatementKind.TABLE_CREATE: Tolerance.HARD,
    StatementKind.INSERT: Tolerance.HARD,
    StatementKind.OTHER_DML: Tolerance.HARD,
    StatementKind.UNKNOWN: Tolerance.HARD,
}

SOFT_NOTES = {
    StatementKind.ZONE_CREATE: "Zone may already exist",
    StatementKind.DROP: "Drop may have failed due to dependencies or a missing object",
    StatementKind.INDEX_CREATE: "Index may already exist",
}

# identifier: plain or "quoted" parts joined by dots, e.g. music."Order Items"
_PART = r'(?:"(?:[^"]|"")+"|[\w$]+)'
_IDENT = r"(" + _PART + r"(?:\." + _PART + r")*)"
_IF_NOT_EXISTS = r"(?:IF\s+NOT\s+EXISTS\s+)?"

_KIND_PATTERNS = [
    (re.compile(r"^CREATE\s+ZONE\b", re.I), StatementKind.ZONE_CREATE),
    (re.compile(r"^CREATE\s+TABLE\b", re.I), StatementKind.TABLE_CREATE),
    (re.compile(r"^CREATE\s+(?:UNIQUE\s+)?INDEX\b", re.I), StatementKind.INDEX_CREATE),
    (re.compile(r"^DROP\b", re.I), StatementKind.DROP),
    (re.compile(r"^INSERT\s+INTO\b", re.I), StatementKind.INSERT),
    (re.compile(r"^(?:UPDATE|DELETE|MERGE|UPSERT|REPLACE|TRUNCATE)\b", re.I), StatementKind.OTHER_DML),
]

_ZONE_NAME = re.compile(r"^CREATE\s+ZONE\s+" + _IF_NOT_EXISTS + _IDENT, re.I)
_TABLE_NAME = re.compile(r"^CREATE\s+TABLE\s+" + _IF_NOT_EXISTS + _IDENT, re.I)
_INDEX_NAME = re.compile(r"^CREATE\s+(?:UNIQUE\s+)?INDEX\s+" + _IF_NOT_EXISTS + _IDENT, re.I)
_INDEX_TABLE = re.compile(r"\bON\s+" + _IDENT, re.I)
_DROP_NAME = re.compile(r"^DROP\s+\w+\s+(?:IF\s+EXISTS\s+)?" + _IDENT, re.I)
_DML_TABLE = re.compile(r"\b(?:INTO|FROM|UPDATE)\s+" + _IDENT, re.I)


class IndexTarget(NamedTuple):
    index: str
    table: str


def classify(text: str) -> StatementKind:
    head = text.strip()
    for pattern, kind in _KIND_PATTERNS:
        if pattern.match(head):
            return kind
    return StatementKind.UNKNOWN


def is_schema(kind: StatementKind) -> bool:
    return kind in SCHEMA_KINDS


def statement_type(text: str) -> str:
    """Short label used in progress lines."""
    kind = classify(text)
    if kind is StatementKind.OTHER_DML:
        return text.strip().split(None, 1)[0].upper()
    return kind.value


_QUOTED_PART = re.compile(r'"((?:[^"]|"")+)"')


def _unquote(name: str) -> str:
    return _QUOTED_PART.sub(lambda m: m.group(1).replace('""', '"'), name)


def extract_index_target(text: str) -> IndexTarget:
    head = text.strip()
    m = _INDEX_NAME.match(head)
    index = _unquote(m.group(1)) if m else "unknown_index"
    # search after the index name so an index called "on_x" is not mistaken for the clause
    t = _INDEX_TABLE.search(head, m.end() if m else 0)
    table = _unquote(t.group(1)) if t else "unknown_table"
    return IndexTarget(index, table)


def extract_target_identifier(text: str) -> Optional[str]:
    """Like extract_target_name, but with any "quoted" parts left as written."""
    head = text.strip()
    kind = classify(head)
    if kind is StatementKind.INDEX_CREATE:
        m = _INDEX_NAME.match(head)
        t = _INDEX_TABLE.search(head, m.end() if m else 0)
        return t.group(1) if t else None
    pattern = {
        StatementKind.ZONE_CREATE: _ZONE_NAME,
        StatementKind.TABLE_CREATE: _TABLE_NAME,
        StatementKind.DROP: _DROP_NAME,
    }.get(kind)
    if pattern is not None:
        m = pattern.match(head)
    else:
        m = _DML_TABLE.search(head)
    return m.group(1) if m else None


def extract_target_name(text: str) -> Optional[str]:
    """Entity a statement acts on: the table for DML and CREATE INDEX, the object otherwise."""
    name = extract_target_identifier(text)
    return _unquote(name) if name else None


def preview(text: str, width: int = 70) -> str:
    if len(text) <= width:
        return text
    return text[: max(width - 3, 0)] + "..."


def describe(text: str, width: int = 70) -> str:
    """`<index> ON <table>` for CREATE INDEX, a cut-off preview otherwise."""
    if classify(text) is StatementKind.INDEX_CREATE:
        target = extract_index_target(text)
        return f"{target.index} ON {target.table}"
    return preview(text, width)
