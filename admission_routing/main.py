from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
import logging

from admission_routing.api.v1.router import router as api_v1_router
from admission_routing.core.config import settings as app_settings
from admission_routing.core.database import dispose_engine
from admission_routing.core.exceptions import (
    AgentNotFoundError,
    DuplicateCheckError,
    InvalidLeadDataError,
    LeadPersistenceError,
    MissingActorError,
)
from admission_routing.core.rate_limit import limiter

# Configure logging
logging.basicConfig(level=app_settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Release pooled database connections on shutdown."""
    logger.info("Admission routing service starting")
    yield
    await dispose_engine()
    logger.info("Database engine disposed")


app = FastAPI(
    title="Admission Lead Routing",
    description="Lead capture and weighted routing for the admissions team",
    version="0.1.0",
    lifespan=lifespan,
)


# Attach rate limiter state so slowapi middleware can find it
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


# CORS middleware – restricted to configured origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip() for o in app_settings.CORS_ORIGINS.split(",") if o.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(api_v1_router)


@app.exception_handler(MissingActorError)
async def missing_actor_handler(request: Request, exc: MissingActorError):
    logger.warning("Rejected request without caller id on %s", request.url.path)
    return JSONResponse(
        status_code=401,
        content={"detail": exc.detail, "type": "missing_actor"},
    )


@app.exception_handler(AgentNotFoundError)
async def agent_not_found_handler(request: Request, exc: AgentNotFoundError):
    logger.warning("Agent not found: %s", exc.detail)
    return JSONResponse(
        status_code=404,
        content={"detail": exc.detail, "type": "agent_not_found"},
    )


@app.exception_handler(InvalidLeadDataError)
async def invalid_lead_data_handler(request: Request, exc: InvalidLeadDataError):
    logger.warning("Invalid lead data: %s", exc.detail)
    return JSONResponse(
        status_code=422,
        content={"detail": exc.detail, "type": "invalid_lead_data"},
    )


@app.exception_handler(DuplicateCheckError)
async def duplicate_check_handler(request: Request, exc: DuplicateCheckError):
    logger.error("Duplicate check unavailable: %s", exc.detail)
    return JSONResponse(
        status_code=503,
        content={"detail": exc.detail, "type": "duplicate_check_unavailable"},
    )


@app.exception_handler(LeadPersistenceError)
async def lead_persistence_handler(request: Request, exc: LeadPersistenceError):
    logger.error("Lead write rolled back: %s", exc.detail)
    return JSONResponse(
        status_code=503,
        content={"detail": exc.detail, "type": "lead_persistence_failed"},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning("Request validation error: %s", exc.errors())
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Request validation failed",
            "errors": jsonable_encoder(exc.errors(), custom_encoder={Exception: str}),
            "type": "validation_error",
        },
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Catch-all handler for unexpected/unhandled exceptions.

    Returns a generic 500 response so that raw stack traces are never
    leaked to the client.
    """
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected internal error occurred. Please try again later.",
            "type": "internal_server_error",
        },
    )
