#!/usr/bin/env python3
# mod2_execute_sql_file.py
# Bulk-load a .sql file: schema statements first, then data, big INSERTs re-batched.

import os, argparse, sys

from bulkload.loader import config
from bulkload.loader.executor import ConnectionLost, SqlAlchemyExecutor, get_engine
from bulkload.loader.pipeline import execute
from bulkload.loader.probe import created_tables, verify
from bulkload.loader.scanner import read_script

def confirm(prompt: str, stdin=None) -> bool:
  stdin = stdin or sys.stdin
  print(prompt)
  answer = stdin.readline().strip().upper()
  return answer == "Y"

def main(argv=None, stdin=None):
  ap = argparse.ArgumentParser(description="Bulk-load a SQL script.")
  ap.add_argument("--dsn", default=None, help="SQLAlchemy URL (default: DATABASE_URL or DB_* env)")
  ap.add_argument("--sql", required=True, help="Path to .sql file")
  ap.add_argument("--encoding", default="utf-8")
  ap.add_argument("--batch-size", type=int, default=None,
                  help="max rows per INSERT (default: LOAD_MAX_ROWS_PER_BATCH or 1000)")
  ap.add_argument("--verify", nargs="*", default=None,
                  help="tables to count afterwards (default: tables created by the script)")
  ap.add_argument("--yes", action="store_true", help="do not ask for confirmation")
  args = ap.parse_args(argv)

  config.make_logger()

  if not os.path.exists(args.sql):
    print(f"[ERR] SQL file not found: {args.sql}", file=sys.stderr)
    return 2

  try:
    batch_size = args.batch_size if args.batch_size is not None else config.max_rows_per_batch()
    width = config.preview_chars()
  except ValueError as e:
    print(f"[ERR] {e}", file=sys.stderr)
    return 2
  if batch_size < 1:
    print(f"[ERR] --batch-size must be >= 1, got {batch_size}", file=sys.stderr)
    return 2

  statements = read_script(args.sql, encoding=args.encoding)
  print(f"[INFO] Parsed {len(statements)} SQL statements from {args.sql}")
  if not statements:
    print("[OK] nothing to execute")
    return 0

  if not args.yes and not confirm("This will create tables and load data from the SQL file. Proceed? (Y/N)", stdin):
    print("[INFO] Operation cancelled by user.")
    return 0

  engine = get_engine(args.dsn)
  executor = SqlAlchemyExecutor(engine)
  try:
    result = execute(statements, executor, batch_size, width)
  except ConnectionLost as e:
    print(f"[ERR] database connection lost: {e}", file=sys.stderr)
    return 1

  print(f"[OK] executed {args.sql}: {result.logical_succeeded} of {result.total} statements "
        f"({result.succeeded} calls ok, {result.failed} failed)")
  report = result.to_frame(width)
  failed = report[~report["ok"].astype(bool)]
  for row in failed.itertuples(index=False):
    tag = "WARN" if row.tolerance == "soft" else "ERR"
    print(f"[{tag}] #{row.ordinal} {row.preview}: {row.error}", file=sys.stderr)

  tables = args.verify if args.verify is not None else (config.verify_tables() or created_tables(statements))
  if tables:
    print("[INFO] Verifying row counts")
    try:
      counts = verify(executor, tables)
    except ConnectionLost as e:
      print(f"[ERR] verification failed: {e}", file=sys.stderr)
      counts = {}
    for table, count in counts.items():
      print(f"  {table}: {'Not available' if count is None else count}")

  hard = failed[failed["tolerance"] == "hard"]
  return 1 if len(hard) else 0

if __name__ == "__main__":
  sys.exit(main())
