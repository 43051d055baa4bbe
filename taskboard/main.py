import logging
from datetime import datetime, UTC

import fastapi
from fastapi import FastAPI

import taskboard.config as _cfg
from taskboard.database import init_db
from taskboard.errors import ServiceError
from taskboard.logging_config import setup_logging
from taskboard.routers import auth, comments, projects, tasks, workspaces

setup_logging(_cfg.LOG_LEVEL, _cfg.LOG_FILE)
logger = logging.getLogger("taskboard.main")

init_db()

app = FastAPI(title="Taskboard")

# API routers; comments first, its /workspaces/tasks/... paths must not be
# read as a workspace id
app.include_router(auth.router)
app.include_router(comments.router)
app.include_router(workspaces.router)
app.include_router(projects.router)
app.include_router(tasks.router)


@app.get("/health")
def health():
    return {"status": "ok", "timestamp": datetime.now(UTC).isoformat()}


@app.exception_handler(ServiceError)
async def service_error_handler(request, exc: ServiceError):
    return fastapi.responses.JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Generic error handler to return JSON errors for unexpected exceptions
@app.exception_handler(Exception)
async def generic_exception_handler(request, exc):
    # Keep HTTPException behavior
    from fastapi import HTTPException
    if isinstance(exc, HTTPException):
        raise exc
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return fastapi.responses.JSONResponse(status_code=500, content={"detail": "Internal server error"})
