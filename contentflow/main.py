"""FastAPI entry-point exposing the content generation service."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from contentflow.api.generation import router as generation_router
from contentflow.api.routes import router as agents_router
from contentflow.config import config
from contentflow.core.errors import ContentFlowError
from contentflow.log import configure_logging
from contentflow.runtime import get_orchestrator, get_queue_worker

SERVICE_NAME = "contentflow-api"
SERVICE_VERSION = "1.0.0"

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle manager for FastAPI application."""
    configure_logging(config.log_level)
    orchestrator = get_orchestrator()
    for snapshot in orchestrator.get_all_agent_status():
        agent = orchestrator.get_agent(snapshot.agent_id)
        if agent is not None and not agent.validate_config():
            logger.warning("Agent %s started with an incomplete configuration", snapshot.agent_id)
    worker = get_queue_worker()
    await worker.start()
    yield
    await worker.stop()


app = FastAPI(title="Content Flow Agent Orchestrator", version=SERVICE_VERSION, lifespan=lifespan)
app.include_router(generation_router)
app.include_router(agents_router)


@app.exception_handler(ContentFlowError)
async def handle_contentflow_error(request: Request, exc: ContentFlowError) -> JSONResponse:
    logger.error("API error on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": {"message": exc.message, "code": exc.code}},
    )


@app.get("/health")
async def health() -> dict:
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
    }
