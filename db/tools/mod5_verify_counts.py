#!/usr/bin/env python3
# mod5_verify_counts.py
# Count rows of loaded tables (after mod2) and print them.

import os, argparse, sys

from bulkload.loader import config
from bulkload.loader.executor import ConnectionLost, SqlAlchemyExecutor, get_engine
from bulkload.loader.probe import created_tables, verify
from bulkload.loader.scanner import read_script

def main(argv=None):
  ap = argparse.ArgumentParser()
  ap.add_argument("--dsn", default=None, help="SQLAlchemy URL (default: DATABASE_URL or DB_* env)")
  ap.add_argument("--tables", nargs="*", default=None, help="tables to count (default: LOAD_VERIFY_TABLES)")
  ap.add_argument("--sql", default=None, help="count the tables this script creates")
  args = ap.parse_args(argv)

  config.make_logger()

  if args.sql and not os.path.exists(args.sql):
    print(f"[ERR] SQL file not found: {args.sql}", file=sys.stderr)
    return 2

  tables = list(args.tables or [])
  if args.sql:
    tables += [t for t in created_tables(read_script(args.sql)) if t not in tables]
  if not tables:
    tables = config.verify_tables()
  if not tables:
    print("[ERR] no tables given (use --tables, --sql or LOAD_VERIFY_TABLES)", file=sys.stderr)
    return 2

  executor = SqlAlchemyExecutor(get_engine(args.dsn))
  try:
    counts = verify(executor, tables)
  except ConnectionLost as e:
    print(f"[ERR] database connection lost: {e}", file=sys.stderr)
    return 1

  print("=== Verifying loaded data ===")
  for table, count in counts.items():
    print(f"{table}: {'Not available' if count is None else count}")
  return 0

if __name__ == "__main__":
  sys.exit(main())
