# Statement execution service on top of SQLAlchemy.
# One call = one statement = one transaction.
from typing import Any, Optional, Protocol

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError

from .config import database_url


class LoaderError(Exception):
    pass


class ExecutionError(LoaderError):
    """The database rejected a statement. Recorded, the load goes on."""

    def __init__(self, sql: str, message: str):
        super().__init__(message)
        self.sql = sql
        self.message = message


class ConnectionLost(LoaderError):
    """The database is unreachable. Ends the load."""


class Executor(Protocol):
    def run(self, sql: str) -> None: ...


class ScalarExecutor(Executor, Protocol):
    def scalar(self, sql: str) -> Any: ...


def get_engine(dsn: Optional[str] = None) -> Engine:
    return create_engine(dsn or database_url(), pool_pre_ping=True, future=True)


def ping(engine: Engine) -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except DBAPIError:
        return False


def _message(err: DBAPIError) -> str:
    return str(err.orig).strip() if err.orig is not None else str(err)


class SqlAlchemyExecutor:
    def __init__(self, engine: Engine):
        self.engine = engine

    def _execute(self, sql: str, fetch: bool) -> Any:
        try:
            conn = self.engine.connect()
        except DBAPIError as e:
            raise ConnectionLost(_message(e)) from e

        with conn:
            try:
                # raw text: no bind-parameter parsing of ':name' or '%' inside literals
                result = conn.execution_options(no_parameters=True).exec_driver_sql(sql)
                value = result.scalar() if fetch else None
                conn.commit()
            except DBAPIError as e:
                if e.connection_invalidated:
                    raise ConnectionLost(_message(e)) from e
                raise ExecutionError(sql, _message(e)) from e
        return value

    def run(self, sql: str) -> None:
        self._execute(sql, fetch=False)

    def scalar(self, sql: str) -> Any:
        return self._execute(sql, fetch=True)
