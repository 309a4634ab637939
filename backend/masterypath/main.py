"""FastAPI application entry point."""
from __future__ import annotations
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from masterypath.api import concepts, learning
from masterypath.container import get_concept_graph_service
from masterypath.core.config import CONCEPT_GRAPH_PATH, LOG_FORMAT, LOG_LEVEL
from masterypath.core.logging_config import configure_logging, get_logger
from masterypath.domain.common.errors import (
    ConceptNotFound,
    CycleDetected,
    GoalUnreachable,
    InvalidConcept,
    InvalidScore,
    MasteryEngineError,
    StoreUnavailable,
)
from masterypath.persistence.db import init_db

logger = get_logger(__name__)

_STATUS_BY_ERROR = {
    ConceptNotFound: 404,
    GoalUnreachable: 409,
    InvalidScore: 422,
    InvalidConcept: 422,
    CycleDetected: 422,
    StoreUnavailable: 503,
}

# ------------------------------------------------------------------
# App creation
# ------------------------------------------------------------------
app = FastAPI(
    title="Mastery Path Engine API",
    description="Prerequisite-graph unlocks and learning path recommendations",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ------------------------------------------------------------------
# Error mapping
# ------------------------------------------------------------------
@app.exception_handler(MasteryEngineError)
def handle_engine_error(request: Request, exc: MasteryEngineError) -> JSONResponse:
    status_code = next(
        (code for cls, code in _STATUS_BY_ERROR.items() if isinstance(exc, cls)), 400
    )
    if status_code >= 500:
        logger.error("Engine failure on %s: %s", request.url.path, exc.message)
    body = {"error": exc.code, "detail": exc.message}
    if isinstance(exc, GoalUnreachable):
        body["blocked"] = exc.blocked
    return JSONResponse(status_code=status_code, content=body)


# ------------------------------------------------------------------
# Startup: logging, DB schema, optional graph seed
# ------------------------------------------------------------------
@app.on_event("startup")
def on_startup():
    configure_logging(log_level=LOG_LEVEL, log_format=LOG_FORMAT)
    init_db()
    if CONCEPT_GRAPH_PATH and os.path.isfile(CONCEPT_GRAPH_PATH):
        get_concept_graph_service().ingest_file(CONCEPT_GRAPH_PATH)


# ------------------------------------------------------------------
# Routers
# ------------------------------------------------------------------
app.include_router(concepts.router)
app.include_router(learning.router)
