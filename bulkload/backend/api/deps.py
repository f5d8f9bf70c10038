from bulkload.backend.services.db import executor
from bulkload.loader.executor import SqlAlchemyExecutor


def get_executor() -> SqlAlchemyExecutor:
    return executor()
