import logging
import os

from dotenv import load_dotenv

load_dotenv()

DEFAULT_MAX_ROWS_PER_BATCH = 1000
DEFAULT_PREVIEW_CHARS = 70


def database_url() -> str:
    # DATABASE_URL 우선, 없으면 개별 변수로 조합
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    host = os.getenv("DB_HOST") or "127.0.0.1"
    port = os.getenv("DB_PORT") or "5432"
    name = os.getenv("DB_NAME") or "appdb"
    user = os.getenv("DB_USER") or "app"
    pw   = os.getenv("DB_PASSWORD") or "apppw"
    return f"postgresql+psycopg://{user}:{pw}@{host}:{port}/{name}"


def _positive_int(key: str, default: int) -> int:
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ValueError(f"{key} must be >= 1, got {value}")
    return value


def max_rows_per_batch() -> int:
    return _positive_int("LOAD_MAX_ROWS_PER_BATCH", DEFAULT_MAX_ROWS_PER_BATCH)


def preview_chars() -> int:
    return _positive_int("LOAD_PREVIEW_CHARS", DEFAULT_PREVIEW_CHARS)


def verify_tables() -> list[str]:
    raw = os.getenv("LOAD_VERIFY_TABLES", "")
    return [t.strip() for t in raw.split(",") if t.strip()]


# 사용법: LOGLEVEL=DEBUG python infra/sql/mod2_execute_sql_file.py ...
def make_logger() -> logging.Logger:
    level_name = os.getenv("LOGLEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")
    return logging.getLogger("bulkload")
