from fastapi import APIRouter, Depends, HTTPException
from bulkload.loader.executor import ping
from .deps import get_executor

router = APIRouter()

@router.get("/health/live")
def live():
    return {"status": "alive"}

@router.get("/health/db")
def db_health(executor=Depends(get_executor)):
    if not ping(executor.engine):
        raise HTTPException(status_code=503, detail="Database not reachable")
    return {"status": "ok"}
