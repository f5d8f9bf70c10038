"""
Two-pass load of a scanned SQL script.

Pass 1 runs schema statements (zones, tables, indexes, drops) in file order,
pass 2 runs everything else in file order, splitting oversized INSERTs.
Failures are recorded and the load continues; only ConnectionLost ends it.
The script itself must list zones before the tables that use them, and
tables before their indexes.
"""

import logging
from pathlib import Path
from typing import List, Sequence, Union

from . import config
from .classifier import (
    SOFT_NOTES,
    TOLERANCE,
    StatementKind,
    Tolerance,
    classify,
    describe,
    extract_target_name,
    is_schema,
    statement_type,
)
from .executor import ExecutionError, Executor
from .models import LoadAccumulator, LoadResult, Outcome, Statement
from .scanner import read_script, scan
from .splitter import make_batches

logger = logging.getLogger(__name__)


def _submit(executor: Executor, acc: LoadAccumulator, stmt: Statement, kind: StatementKind,
            sql: str, batch: int = 1, batches: int = 1) -> bool:
    tolerance = TOLERANCE[kind]
    try:
        executor.run(sql)
    except ExecutionError as e:
        if tolerance is Tolerance.SOFT:
            note = SOFT_NOTES.get(kind)
            logger.warning("  Note: %s, continuing: %s", note, e.message)
        else:
            note = None
            logger.error("  Error executing statement: %s", e.message)
        acc.add(Outcome(stmt, kind, sql, ok=False, error=e.message, tolerance=tolerance,
                        note=note, batch=batch, batches=batches))
        return False
    acc.add(Outcome(stmt, kind, sql, ok=True, tolerance=tolerance, batch=batch, batches=batches))
    return True


def _run_schema(executor: Executor, acc: LoadAccumulator, stmt: Statement, kind: StatementKind,
                width: int) -> None:
    logger.info("[%d/%d] Executing: %s %s", stmt.ordinal, acc.total, statement_type(stmt.text),
                describe(stmt.text, width))
    if _submit(executor, acc, stmt, kind, stmt.text):
        logger.info("  Success!")


def _run_data(executor: Executor, acc: LoadAccumulator, stmt: Statement, kind: StatementKind,
              max_rows_per_batch: int) -> None:
    label = statement_type(stmt.text)
    target = extract_target_name(stmt.text) or "unknown"

    if kind is StatementKind.INSERT:
        batches = make_batches(stmt.text, max_rows_per_batch)
        rows = sum(len(b.groups) for b in batches)
        logger.info("[%d/%d] Found %s for table %s with %d rows",
                    stmt.ordinal, acc.total, label, target, rows)
        if len(batches) > 1:
            logger.info("  Splitting large INSERT into %d batches", len(batches))
            failed = 0
            for n, b in enumerate(batches, start=1):
                logger.info("  Executing batch %d/%d", n, len(batches))
                if not _submit(executor, acc, stmt, kind, b.render(), batch=n, batches=len(batches)):
                    failed += 1
            if not failed:
                logger.info("  All batches executed successfully!")
            else:
                logger.error("  %d of %d batches failed for table %s", failed, len(batches), target)
            return

    logger.info("[%d/%d] Executing %s for table %s", stmt.ordinal, acc.total, label, target)
    if _submit(executor, acc, stmt, kind, stmt.text):
        logger.info("  Success!")


def execute(statements: Sequence[Statement], executor: Executor,
            max_rows_per_batch: int = config.DEFAULT_MAX_ROWS_PER_BATCH,
            preview_width: int = config.DEFAULT_PREVIEW_CHARS) -> LoadResult:
    """
    Run statements against executor, schema first, then data.

    Args:
        statements: scanner output, in file order.
        executor: anything with run(sql) raising ExecutionError on rejection.
        max_rows_per_batch: INSERTs with more value groups are split.
        preview_width: width of statement previews in the log.

    Returns:
        LoadResult. total counts original statements; succeeded/failed count
        executed sub-statements, so one split INSERT may add several.

    Raises:
        ConnectionLost: the database went away; nothing after it was run.
    """
    if max_rows_per_batch < 1:
        raise ValueError(f"max_rows_per_batch must be >= 1, got {max_rows_per_batch}")

    acc = LoadAccumulator(total=len(statements))
    tagged = [(stmt, classify(stmt.text)) for stmt in statements]
    schema = [(s, k) for s, k in tagged if is_schema(k)]
    data = [(s, k) for s, k in tagged if not is_schema(k)]

    logger.info("=== Processing distribution zones, table definitions, and indexes ===")
    for stmt, kind in schema:
        _run_schema(executor, acc, stmt, kind, preview_width)

    logger.info("=== Loading data (DML statements) ===")
    for stmt, kind in data:
        _run_data(executor, acc, stmt, kind, max_rows_per_batch)

    result = acc.freeze()
    logger.info("Bulk load completed: %d succeeded, %d failed, %d statements",
                result.succeeded, result.failed, result.total)
    return result


def load_script(script: str, executor: Executor,
                max_rows_per_batch: int = config.DEFAULT_MAX_ROWS_PER_BATCH) -> LoadResult:
    statements: List[Statement] = scan(script)
    logger.info("Parsed %d SQL statements", len(statements))
    return execute(statements, executor, max_rows_per_batch)


def load_file(path: Union[str, Path], executor: Executor,
              max_rows_per_batch: int = config.DEFAULT_MAX_ROWS_PER_BATCH,
              encoding: str = "utf-8") -> LoadResult:
    statements = read_script(path, encoding=encoding)
    logger.info("Parsed %d SQL statements from %s", len(statements), path)
    return execute(statements, executor, max_rows_per_batch)
