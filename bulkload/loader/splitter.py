"""
Re-batch oversized multi-row INSERT statements.

    INSERT INTO t (a, b) VALUES (1, 'x'), (2, 'y'), (3, 'z')

with max_rows_per_batch=2 becomes

    INSERT INTO t (a, b) VALUES (1, 'x'), (2, 'y')
    INSERT INTO t (a, b) VALUES (3, 'z')

Value groups are kept whole and in order. A trailing clause after the last
group (e.g. ON CONFLICT ... DO NOTHING) is repeated on every batch.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .classifier import StatementKind, classify

logger = logging.getLogger(__name__)

_VALUES = re.compile(r"\bVALUES\b", re.I)


@dataclass(frozen=True)
class Batch:
    prefix: str
    groups: Tuple[str, ...]
    suffix: str = ""

    def render(self) -> str:
        sql = f"{self.prefix} {', '.join(self.groups)}"
        return f"{sql} {self.suffix}" if self.suffix else sql


@dataclass(frozen=True)
class ValuesClause:
    prefix: str
    groups: Tuple[str, ...]
    suffix: str = ""


def _scan_groups(body: str) -> Optional[Tuple[Tuple[str, ...], str]]:
    """Top-level (...) groups of a VALUES body plus any trailing clause; None if unbalanced."""
    groups: List[str] = []
    depth = 0
    in_quote = False
    start = 0
    suffix = ""

    for i, c in enumerate(body):
        if c == "'" and (i == 0 or body[i - 1] != "\\"):
            in_quote = not in_quote
            continue
        if in_quote:
            continue
        if depth == 0:
            if c == "(":
                start = i
                depth = 1
            elif c == "," or c.isspace():
                continue
            elif c == ")":
                return None
            else:
                suffix = body[i:].strip()
                break
            continue
        if c == "(":
            depth += 1
        elif c == ")":
            depth -= 1
            if depth == 0:
                groups.append(body[start:i + 1].strip())

    if in_quote or depth != 0:
        return None
    return tuple(groups), suffix


def parse_values(text: str) -> Optional[ValuesClause]:
    """Prefix (through VALUES), value groups and trailing clause of an INSERT."""
    if classify(text) is not StatementKind.INSERT:
        return None
    m = _VALUES.search(text)
    if m is None:
        return None
    scanned = _scan_groups(text[m.end():])
    if scanned is None:
        logger.warning("Unbalanced VALUES list, leaving statement as-is: %.70s", text)
        return None
    groups, suffix = scanned
    if not groups:
        return None
    return ValuesClause(prefix=text[:m.end()].rstrip(), groups=groups, suffix=suffix)


def count_rows(text: str) -> int:
    """Exact number of top-level value groups; 0 when there is no VALUES list."""
    clause = parse_values(text)
    return len(clause.groups) if clause else 0


def make_batches(text: str, max_rows_per_batch: int) -> List[Batch]:
    if max_rows_per_batch < 1:
        raise ValueError(f"max_rows_per_batch must be >= 1, got {max_rows_per_batch}")
    clause = parse_values(text)
    if clause is None:
        return []
    return [
        Batch(clause.prefix, clause.groups[i:i + max_rows_per_batch], clause.suffix)
        for i in range(0, len(clause.groups), max_rows_per_batch)
    ]


def split(text: str, max_rows_per_batch: int) -> List[str]:
    """
    Split an INSERT into statements of at most max_rows_per_batch rows each.

    Non-INSERTs, INSERTs without a parsable VALUES list, and INSERTs already
    within the limit come back unchanged as a single-element list.
    """
    batches = make_batches(text, max_rows_per_batch)
    if len(batches) <= 1:
        return [text]
    return [b.render() for b in batches]
