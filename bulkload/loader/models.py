"""
Value types shared by the loader modules.

- Statement: one executable SQL text with its 1-based position in the script
- Outcome:   what happened to one executed (sub-)statement
- LoadResult: frozen summary returned by the orchestrator
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

import pandas as pd

from .classifier import StatementKind, Tolerance, preview


@dataclass(frozen=True)
class Statement:
    text: str
    ordinal: int

    def preview(self, width: int = 70) -> str:
        return preview(self.text, width)


@dataclass(frozen=True)
class Outcome:
    statement: Statement
    kind: StatementKind
    sql: str
    ok: bool
    error: Optional[str] = None
    tolerance: Tolerance = Tolerance.HARD
    note: Optional[str] = None
    batch: int = 1
    batches: int = 1

    @property
    def soft(self) -> bool:
        return not self.ok and self.tolerance is Tolerance.SOFT


@dataclass(frozen=True)
class LoadResult:
    total: int
    succeeded: int
    failed: int
    outcomes: Tuple[Outcome, ...] = field(default_factory=tuple)

    @property
    def failures(self) -> Tuple[Outcome, ...]:
        return tuple(o for o in self.outcomes if not o.ok)

    @property
    def logical_succeeded(self) -> int:
        """Original statements whose every executed part succeeded."""
        status: dict = {}
        for o in self.outcomes:
            key = o.statement.ordinal
            status[key] = status.get(key, True) and o.ok
        return sum(1 for ok in status.values() if ok)

    def to_frame(self, width: int = 70) -> pd.DataFrame:
        rows = [
            {
                "ordinal": o.statement.ordinal,
                "kind": o.kind.value,
                "batch": o.batch,
                "batches": o.batches,
                "ok": o.ok,
                "tolerance": o.tolerance.value,
                "error": o.error,
                "preview": o.statement.preview(width),
            }
            for o in self.outcomes
        ]
        columns = ["ordinal", "kind", "batch", "batches", "ok", "tolerance", "error", "preview"]
        return pd.DataFrame(rows, columns=columns)


class LoadAccumulator:
    """Mutable builder owned by one execute() call; freeze() hands out the result."""

    def __init__(self, total: int):
        self.total = total
        self.succeeded = 0
        self.failed = 0
        self._outcomes: list = []

    def add(self, outcome: Outcome) -> None:
        self._outcomes.append(outcome)
        if outcome.ok:
            self.succeeded += 1
        else:
            self.failed += 1

    def freeze(self) -> LoadResult:
        return LoadResult(
            total=self.total,
            succeeded=self.succeeded,
            failed=self.failed,
            outcomes=tuple(self._outcomes),
        )
