from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from bulkload.loader import config
from bulkload.loader.executor import ConnectionLost
from bulkload.loader.pipeline import load_script
from bulkload.loader.probe import verify
from .deps import get_executor

router = APIRouter()


class LoadRequest(BaseModel):
    script: str
    max_rows_per_batch: Optional[int] = Field(default=None, ge=1)


class FailureOut(BaseModel):
    ordinal: int
    kind: str
    batch: int
    error: Optional[str]
    soft: bool
    preview: str


class LoadResponse(BaseModel):
    total: int
    succeeded: int
    failed: int
    logical_succeeded: int
    failures: List[FailureOut]


@router.post("/load", response_model=LoadResponse)
def load(req: LoadRequest, executor=Depends(get_executor)):
    max_rows = req.max_rows_per_batch or config.max_rows_per_batch()
    try:
        result = load_script(req.script, executor, max_rows)
    except ConnectionLost as e:
        raise HTTPException(status_code=503, detail=f"Database connection lost: {e}")

    return LoadResponse(
        total=result.total,
        succeeded=result.succeeded,
        failed=result.failed,
        logical_succeeded=result.logical_succeeded,
        failures=[
            FailureOut(
                ordinal=o.statement.ordinal,
                kind=o.kind.value,
                batch=o.batch,
                error=o.error,
                soft=o.soft,
                preview=o.statement.preview(config.preview_chars()),
            )
            for o in result.failures
        ],
    )


@router.get("/verify")
def verify_counts(tables: List[str] = Query(default=[]), executor=Depends(get_executor)):
    names = tables or config.verify_tables()
    try:
        counts = verify(executor, names)
    except ConnectionLost as e:
        raise HTTPException(status_code=503, detail=f"Database connection lost: {e}")
    return {"counts": counts}
