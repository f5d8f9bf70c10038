from fastapi import FastAPI
from bulkload.backend.api.routers_health import router as health_router
from bulkload.backend.api.routers_load import router as load_router
from bulkload.loader.config import make_logger

make_logger()

app = FastAPI(title="SQL Bulk Loader")
app.include_router(health_router)
app.include_router(load_router)
