import io

import pandas as pd

from bulkload.loader.classifier import StatementKind, classify, is_schema
from bulkload.loader.pipeline import load_script
from bulkload.loader.scanner import scan
from db.tools import mod1_generate_schema_sql, mod5_verify_counts
from infra.sql import mod2_execute_sql_file, mod4_generate_load_sql


def test_schema_script_order():
    stmts = scan(mod1_generate_schema_sql.build_schema())
    kinds = [classify(s.text) for s in stmts]
    assert all(is_schema(k) for k in kinds)
    assert kinds[0] is StatementKind.ZONE_CREATE
    assert kinds.count(StatementKind.TABLE_CREATE) == 5
    assert kinds[-3:] == [StatementKind.INDEX_CREATE] * 3


def test_schema_script_with_drops_and_no_zone():
    stmts = scan(mod1_generate_schema_sql.build_schema(with_zone=False, with_drops=True))
    kinds = [classify(s.text) for s in stmts]
    assert kinds[:5] == [StatementKind.DROP] * 5
    assert StatementKind.ZONE_CREATE not in kinds
    assert len(stmts) == 13


def test_generate_load_sql_round_trips_into_sqlite(sqlite_executor):
    df = pd.DataFrame({
        "id": [1, 2, 3],
        "name": ["Rock", "it's; jazz", None],
        "price": [0.99, 1.29, float("nan")],
    })
    script = mod4_generate_load_sql.build_script(df, "genre", insert_batch=2, indexes=["name"])
    stmts = scan(script)
    assert [classify(s.text) for s in stmts] == [
        StatementKind.TABLE_CREATE,
        StatementKind.INSERT,
        StatementKind.INSERT,
        StatementKind.INDEX_CREATE,
    ]

    result = load_script(script, sqlite_executor)
    assert result.failed == 0
    assert sqlite_executor.scalar("SELECT COUNT(*) FROM genre") == 3
    assert sqlite_executor.scalar("SELECT name FROM genre WHERE id = 2") == "it's; jazz"
    assert sqlite_executor.scalar("SELECT COUNT(*) FROM genre WHERE price IS NULL") == 1


def test_generate_load_sql_with_zone():
    df = pd.DataFrame({"id": [1]})
    script = mod4_generate_load_sql.build_script(df, "t", zone="Z", primary_key="id")
    kinds = [classify(s.text) for s in scan(script)]
    assert kinds == [StatementKind.ZONE_CREATE, StatementKind.TABLE_CREATE, StatementKind.INSERT]
    assert "PRIMARY KEY (id)" in script


def test_generate_load_sql_cli(tmp_path, capsys):
    csv_path = tmp_path / "2024 Sales.csv"
    pd.DataFrame({"id": [1, 2], "amount": [10.5, 20.0]}).to_csv(csv_path, index=False)
    out = tmp_path / "load.sql"

    code = mod4_generate_load_sql.main(["--csv", str(csv_path), "--out", str(out)])
    assert code == 0
    assert "table=t_2024_sales" in capsys.readouterr().out
    assert "INSERT INTO t_2024_sales (id, amount) VALUES" in out.read_text(encoding="utf-8")


def test_generate_load_sql_missing_csv(tmp_path, capsys):
    code = mod4_generate_load_sql.main(["--csv", str(tmp_path / "nope.csv")])
    assert code == 2
    assert "[ERR] CSV not found" in capsys.readouterr().err


def test_execute_sql_file_cli(tmp_path, capsys, artist_script):
    sql_path = tmp_path / "artist.sql"
    sql_path.write_text(artist_script, encoding="utf-8")
    dsn = f"sqlite+pysqlite:///{tmp_path / 'music.db'}"

    code = mod2_execute_sql_file.main(["--dsn", dsn, "--sql", str(sql_path), "--batch-size", "2", "--yes"])
    out = capsys.readouterr().out
    assert code == 0
    assert "Parsed 3 SQL statements" in out
    assert "3 of 3 statements" in out
    assert "Artist: 5" in out

    code = mod5_verify_counts.main(["--dsn", dsn, "--sql", str(sql_path)])
    assert code == 0
    assert "Artist: 5" in capsys.readouterr().out


def test_execute_sql_file_cli_reports_hard_failures(tmp_path, capsys):
    sql_path = tmp_path / "bad.sql"
    sql_path.write_text("CREATE TABLE A (x INT);\nINSERT INTO Missing VALUES (1);\n", encoding="utf-8")
    dsn = f"sqlite+pysqlite:///{tmp_path / 'bad.db'}"

    code = mod2_execute_sql_file.main(["--dsn", dsn, "--sql", str(sql_path), "--yes", "--verify"])
    captured = capsys.readouterr()
    assert code == 1
    assert "[ERR] #2" in captured.err


def test_execute_sql_file_cli_cancelled(tmp_path, capsys, artist_script):
    sql_path = tmp_path / "artist.sql"
    sql_path.write_text(artist_script, encoding="utf-8")
    db_path = tmp_path / "music.db"

    code = mod2_execute_sql_file.main(
        ["--dsn", f"sqlite+pysqlite:///{db_path}", "--sql", str(sql_path)],
        stdin=io.StringIO("n\n"),
    )
    assert code == 0
    assert "Operation cancelled by user" in capsys.readouterr().out
    assert not db_path.exists()


def test_execute_sql_file_cli_missing_file(tmp_path, capsys):
    code = mod2_execute_sql_file.main(["--sql", str(tmp_path / "nope.sql"), "--yes"])
    assert code == 2
    assert "[ERR] SQL file not found" in capsys.readouterr().err


def test_verify_counts_cli_needs_tables(monkeypatch, capsys):
    monkeypatch.delenv("LOAD_VERIFY_TABLES", raising=False)
    code = mod5_verify_counts.main(["--dsn", "sqlite+pysqlite:///:memory:"])
    assert code == 2
    assert "no tables given" in capsys.readouterr().err


def test_execute_sql_file_cli_counts_quoted_tables(tmp_path, capsys):
    sql_path = tmp_path / "orders.sql"
    sql_path.write_text(
        'CREATE TABLE "Order Items" (x INT);\nCREATE TABLE Artist (x INT);\n'
        'INSERT INTO "Order Items" VALUES (1), (2);\nINSERT INTO Artist VALUES (1);\n',
        encoding="utf-8",
    )
    dsn = f"sqlite+pysqlite:///{tmp_path / 'orders.db'}"

    code = mod2_execute_sql_file.main(["--dsn", dsn, "--sql", str(sql_path), "--yes"])
    captured = capsys.readouterr()
    assert code == 0
    assert '"Order Items": 2' in captured.out
    assert "Artist: 1" in captured.out
    assert "verification failed" not in captured.err

    code = mod5_verify_counts.main(["--dsn", dsn, "--tables", "Order Items", "Nope;", "Artist"])
    out = capsys.readouterr().out
    assert code == 0
    assert "Order Items: 2" in out
    assert "Nope;: Not available" in out
    assert "Artist: 1" in out


def test_generate_load_sql_indexes_columns_that_need_quoting(sqlite_executor):
    df = pd.DataFrame({"id": [1, 2], "Unit Price": [0.99, 1.99], "sku-code": ["a", "b"]})
    script = mod4_generate_load_sql.build_script(df, "track", indexes=["Unit Price", "sku-code"])
    assert 'CREATE INDEX IF NOT EXISTS idx_track_unit_price ON track ("Unit Price");' in script
    assert 'CREATE INDEX IF NOT EXISTS idx_track_sku_code ON track ("sku-code");' in script

    result = load_script(script, sqlite_executor)
    assert result.failed == 0
    assert sqlite_executor.scalar(
        "SELECT COUNT(*) FROM sqlite_master WHERE type = 'index' AND tbl_name = 'track'"
    ) == 2


def test_execute_sql_file_cli_soft_failures_only_warn(tmp_path, capsys):
    sql_path = tmp_path / "zone.sql"
    sql_path.write_text("CREATE ZONE IF NOT EXISTS Z WITH replicas=1;\nCREATE TABLE A (x INT);\n", encoding="utf-8")
    dsn = f"sqlite+pysqlite:///{tmp_path / 'zone.db'}"

    code = mod2_execute_sql_file.main(["--dsn", dsn, "--sql", str(sql_path), "--yes", "--verify"])
    captured = capsys.readouterr()
    assert code == 0
    assert "[WARN] #1 CREATE ZONE IF NOT EXISTS Z WITH replicas=1:" in captured.err
    assert "[ERR]" not in captured.err
