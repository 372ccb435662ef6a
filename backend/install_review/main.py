import logging
import sqlite3
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from install_review.config import settings
from install_review.database import init_db
from install_review.exceptions import WorkflowError
from install_review.routers import applications, attachments, history, requirements, resolutions
from install_review.utils.cache import TTLCache
from install_review.utils.filesystem import ensure_storage_dirs

logger = logging.getLogger("install_review")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create storage folders, apply schema and migrations, check integrity
    ensure_storage_dirs(settings.storage_path)
    init_db(settings.db_path)
    conn = sqlite3.connect(str(settings.db_path))
    try:
        result = conn.execute("PRAGMA integrity_check").fetchone()
    finally:
        conn.close()
    if result and result[0] == "ok":
        logger.info("Database integrity check passed.")
    else:
        logger.error("DATABASE INTEGRITY CHECK FAILED: %s", result)
    yield


app = FastAPI(
    title="Installation Review",
    description="Installation application review workflow with versioned resolution documents",
    version="0.1.0",
    lifespan=lifespan,
)
app.state.catalog_cache = TTLCache(settings.catalog_cache_ttl_seconds)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://127.0.0.1:3000",
        "http://localhost:3000",
    ],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(WorkflowError)
async def workflow_error_handler(request: Request, exc: WorkflowError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": type(exc).__name__},
    )


app.include_router(applications.router, prefix=settings.api_prefix)
app.include_router(attachments.router, prefix=settings.api_prefix)
app.include_router(history.router, prefix=settings.api_prefix)
app.include_router(resolutions.router, prefix=settings.api_prefix)
app.include_router(requirements.router, prefix=settings.api_prefix)


@app.get("/health")
async def health():
    return {"status": "ok", "version": "0.1.0"}
