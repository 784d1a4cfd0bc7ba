"""
FastAPI Service for Project Symposium

Provides REST endpoints for consulting engines, deliberating dilemmas and
inspecting the engine registry.
"""

import os
from contextlib import asynccontextmanager
from datetime import datetime, UTC
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from engines.shared.errors import (
    CircularDependencyError,
    EngineError,
    EngineFailureError,
    EngineNotFoundError,
    EngineTimeoutError,
    InvalidConfigurationError,
    MissingDependencyError,
)
from engines.shared.file_logger import setup_file_logger
from engines.shared.schemas import ConsultationResult, DeliberationResult, Insight
from orchestrator.consultation import EngineOrchestrator
from orchestrator.main import build_orchestrator, load_settings
from orchestrator.synthesis import SynthesisStrategy

# Initialize file logging
log_level = os.getenv("LOG_LEVEL", "INFO")
logger = setup_file_logger("api", log_level=log_level, attach=["orchestrator", "engines"])

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown"""
    logger.info("Starting up...")

    # Tests may inject an orchestrator before startup
    if getattr(app.state, "orchestrator", None) is None:
        app.state.orchestrator = build_orchestrator(load_settings())

    logger.info(f"Serving {len(app.state.orchestrator.registry)} engines")

    yield

    logger.info("Shutting down...")


# FastAPI app
app = FastAPI(
    title="Symposium API",
    version=API_VERSION,
    description="Consult multiple engines and synthesize their insights",
    lifespan=lifespan
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify allowed origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Pydantic models
class ConsultRequest(BaseModel):
    """Request model for /consult endpoint"""
    question: str = Field(..., min_length=1, max_length=10000, description="Question to consult on")
    domains: Optional[List[str]] = None
    capabilities: Optional[List[str]] = None
    engines: Optional[List[str]] = None
    strategy: Optional[SynthesisStrategy] = None
    max_engines: Optional[int] = Field(default=None, ge=0)
    timeout: Optional[float] = Field(default=None, gt=0, description="Per-engine timeout in seconds")


class DeliberateRequest(BaseModel):
    """Request model for /deliberate endpoint"""
    dilemma: str = Field(..., min_length=1, max_length=10000, description="Dilemma to deliberate")
    traditions: Optional[List[str]] = None
    timeout: Optional[float] = Field(default=None, gt=0)


class EvaluateRequest(BaseModel):
    """Request model for /engines/{engine_id}/evaluate endpoint"""
    input: Any = Field(..., description="Question or structured input")
    context: Dict[str, Any] = Field(default_factory=dict)
    timeout: Optional[float] = Field(default=None, gt=0)


def get_orchestrator(request: Request) -> EngineOrchestrator:
    """Orchestrator built at startup."""
    return request.app.state.orchestrator


def to_http_error(error: EngineError) -> HTTPException:
    """
    Translate an engine error into an HTTP error.

    Args:
        error: Raised engine, registry or orchestration error

    Returns:
        HTTPException with the matching status code
    """
    if isinstance(error, (EngineNotFoundError, MissingDependencyError)):
        status_code = 404
    elif isinstance(error, CircularDependencyError):
        status_code = 409
    elif isinstance(error, InvalidConfigurationError):
        status_code = 422
    elif isinstance(error, EngineTimeoutError):
        status_code = 504
    elif isinstance(error, EngineFailureError):
        status_code = 502
    else:
        status_code = 500

    return HTTPException(status_code=status_code, detail=str(error))


# Endpoints
@app.get("/")
async def root():
    """Root endpoint - API info"""
    return {
        "message": "Symposium API",
        "version": API_VERSION,
        "endpoints": {
            "health": "/health",
            "engines": "/engines",
            "engine": "/engines/{engine_id}",
            "dependencies": "/engines/{engine_id}/dependencies",
            "evaluate": "/engines/{engine_id}/evaluate",
            "consult": "/consult",
            "deliberate": "/deliberate"
        }
    }


@app.get("/health")
async def health_check(request: Request):
    """Health check endpoint"""
    orchestrator = get_orchestrator(request)
    return {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "engines": len(orchestrator.registry)
    }


@app.get("/engines")
async def list_engines(request: Request, domain: Optional[str] = None, capability: Optional[str] = None):
    """
    List registered engines, optionally filtered by domain and capability.

    Returns engine definitions with current status, plus registry stats.
    """
    registry = get_orchestrator(request).registry
    engines = registry.query(domain=domain, capabilities=[capability] if capability else None)

    return {
        "engines": [
            {**engine.get_definition().model_dump(), "status": engine.status.value}
            for engine in engines
        ],
        "stats": registry.get_stats().model_dump()
    }


@app.get("/engines/{engine_id}")
async def get_engine(engine_id: str, request: Request):
    """Get one engine's definition and running statistics."""
    engine = get_orchestrator(request).registry.get(engine_id)
    if engine is None:
        raise to_http_error(EngineNotFoundError(engine_id))

    return {
        "definition": engine.get_definition().model_dump(),
        "stats": engine.get_stats().model_dump(mode="json")
    }


@app.get("/engines/{engine_id}/dependencies")
async def get_dependencies(engine_id: str, request: Request):
    """Resolve an engine's load order and list the engines depending on it."""
    registry = get_orchestrator(request).registry
    try:
        order = registry.resolve_dependencies(engine_id)
    except EngineError as e:
        logger.warning(f"Dependency resolution failed for {engine_id}: {e}")
        raise to_http_error(e)

    return {
        "engine_id": engine_id,
        "load_order": order,
        "dependents": registry.get_dependents(engine_id)
    }


@app.post("/engines/{engine_id}/evaluate", response_model=Insight)
async def evaluate_engine(engine_id: str, body: EvaluateRequest, request: Request):
    """
    Evaluate an input with a single engine.

    Unlike /consult, engine failures and timeouts are returned as errors.
    """
    orchestrator = get_orchestrator(request)
    try:
        return await orchestrator.evaluate_with(
            engine_id,
            body.input,
            context=body.context,
            timeout=body.timeout or orchestrator.timeout
        )
    except EngineError as e:
        logger.warning(f"Evaluation with {engine_id} failed: {e}")
        raise to_http_error(e)


@app.post("/consult", response_model=ConsultationResult)
async def consult(body: ConsultRequest, request: Request):
    """
    Consult engines on a question and synthesize their insights.

    Individual engine failures are reported in the result metadata, not as errors.
    """
    logger.info(f"Consultation: {body.question[:50]}...")
    try:
        return await get_orchestrator(request).consult(
            body.question,
            domains=body.domains,
            capabilities=body.capabilities,
            engines=body.engines,
            strategy=body.strategy,
            max_engines=body.max_engines,
            timeout=body.timeout
        )
    except EngineError as e:
        logger.error(f"Consultation failed: {e}")
        raise to_http_error(e)


@app.post("/deliberate", response_model=DeliberationResult)
async def deliberate(body: DeliberateRequest, request: Request):
    """Deliberate a dilemma across traditions."""
    logger.info(f"Deliberation: {body.dilemma[:50]}...")
    try:
        return await get_orchestrator(request).deliberate(
            body.dilemma,
            traditions=body.traditions,
            timeout=body.timeout
        )
    except EngineError as e:
        logger.error(f"Deliberation failed: {e}")
        raise to_http_error(e)


# For running with uvicorn
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=os.getenv("API_HOST", "0.0.0.0"), port=int(os.getenv("API_PORT", "8000")))
