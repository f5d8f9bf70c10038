from functools import lru_cache

from sqlalchemy.engine import Engine

from bulkload.loader.executor import SqlAlchemyExecutor, get_engine


# 엔진은 프로세스당 하나, 첫 요청 때 생성
@lru_cache(maxsize=1)
def engine() -> Engine:
    return get_engine()


def executor() -> SqlAlchemyExecutor:
    return SqlAlchemyExecutor(engine())
