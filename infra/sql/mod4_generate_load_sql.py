#!/usr/bin/env python3
# mod4_generate_load_sql.py
# Create a single SQL load script from a CSV:
#  - optional CREATE ZONE for the table
#  - CREATE TABLE matching CSV columns (types inferred with pandas)
#  - multi-row INSERT statements, --insert-batch rows each
#  - optional CREATE INDEX per --index column

import os, argparse, sys, math, re
import pandas as pd

def sql_literal(v):
  if v is None: return "NULL"
  if isinstance(v, float) and math.isnan(v): return "NULL"
  if isinstance(v, bool): return "TRUE" if v else "FALSE"
  if isinstance(v, (int, float)):
    return str(v)
  s = str(v).replace("'", "''")
  return f"'{s}'"

def infer_sql_type(series):
  if pd.api.types.is_bool_dtype(series): return "BOOLEAN"
  if pd.api.types.is_integer_dtype(series): return "BIGINT"
  if pd.api.types.is_float_dtype(series): return "DOUBLE"
  return "VARCHAR"

def q_ident(col):
  return f'"{col}"' if (not col.isidentifier() or col[0].isdigit() or col.lower() != col) else col

def table_name_from(path):
  name = os.path.splitext(os.path.basename(path))[0].lower()
  name = re.sub(r"[^0-9a-z_]", "_", name)
  if name and name[0].isdigit():
    name = "t_" + name
  return name or "data"

def build_script(df, table, insert_batch=500, zone=None, primary_key=None, indexes=()):
  if insert_batch < 1:
    raise ValueError(f"insert_batch must be >= 1, got {insert_batch}")
  cols = list(df.columns)
  for c in [primary_key, *indexes]:
    if c is not None and c not in cols:
      raise ValueError(f"unknown column: {c}")

  parts = [f"-- {table} load script (generated)"]

  # 1) zone
  if zone:
    parts.append(f"CREATE ZONE IF NOT EXISTS {zone} STORAGE PROFILES ['default'];")

  # 2) DDL
  col_defs = [f"  {q_ident(c)} {infer_sql_type(df[c])}" for c in cols]
  if primary_key:
    col_defs.append(f"  PRIMARY KEY ({q_ident(primary_key)})")
  ddl = f"CREATE TABLE IF NOT EXISTS {table} (\n" + ",\n".join(col_defs) + "\n)"
  if zone:
    ddl += f" ZONE {zone}"
  parts.append(ddl + ";")

  # 3) INSERT batches
  col_list = ", ".join(q_ident(c) for c in cols)
  for start in range(0, len(df), insert_batch):
    chunk = df.iloc[start:start + insert_batch].astype(object)
    values_rows = []
    for row in chunk.itertuples(index=False, name=None):
      vals = [sql_literal(None if pd.isna(v) else v) for v in row]
      values_rows.append("(" + ", ".join(vals) + ")")
    parts.append(f"INSERT INTO {table} ({col_list}) VALUES\n  " + ",\n  ".join(values_rows) + ";")

  # 4) indexes
  for c in indexes:
    suffix = re.sub(r"[^0-9a-z_]", "_", str(c).lower())
    parts.append(f"CREATE INDEX IF NOT EXISTS idx_{table}_{suffix} ON {table} ({q_ident(c)});")

  return "\n".join(parts) + "\n"

def main(argv=None):
  ap = argparse.ArgumentParser()
  ap.add_argument("--csv", default=os.getenv("CSV_PATH", "Data.csv"))
  ap.add_argument("--out", default="load_from_csv.sql")
  ap.add_argument("--table", default=None, help="table name (default: from csv filename)")
  ap.add_argument("--zone", default=None, help="distribution zone to create and place the table in")
  ap.add_argument("--primary-key", default=None)
  ap.add_argument("--index", action="append", default=[], help="column to index (repeatable)")
  ap.add_argument("--insert-batch", type=int, default=500, help="rows per INSERT VALUES batch")
  args = ap.parse_args(argv)

  if not os.path.exists(args.csv):
    print(f"[ERR] CSV not found: {args.csv}", file=sys.stderr)
    return 2

  df = pd.read_csv(args.csv, low_memory=False)
  table = args.table or table_name_from(args.csv)
  try:
    script = build_script(df, table, args.insert_batch, args.zone, args.primary_key, args.index)
  except ValueError as e:
    print(f"[ERR] {e}", file=sys.stderr)
    return 2

  with open(args.out, "w", encoding="utf-8") as f:
    f.write(script)

  print(f"[OK] wrote {args.out} (table={table}, rows={len(df)}, cols={len(df.columns)})")
  return 0

if __name__ == "__main__":
  sys.exit(main())
