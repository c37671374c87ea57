import os
import time
from contextlib import asynccontextmanager
from typing import Any

from dotenv import load_dotenv

load_dotenv()

from fastapi import Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from api.schemas import (
    ErrorResponse,
    HealthResponse,
    HistoryResponse,
    RationaleResponse,
    ValidationErrorResponse,
)
from esa_rationale.config.logger import configure_logging, get_logger
from esa_rationale.config.settings import settings
from esa_rationale.errors import PersistenceError, RationaleError, ValidationError
from esa_rationale.pipeline.context import RationaleContext, build_context
from esa_rationale.pipeline.rationale import generate_rationale, get_history
from esa_rationale.pipeline.validation import error_details

configure_logging()
logger = get_logger(__name__)

GENERIC_FAILURE = "Failed to generate rationale"


def get_context(request: Request) -> RationaleContext:
    return request.app.state.context


async def log_requests(request, call_next):
    start = time.perf_counter()
    logger.info("[request.start] %s %s", request.method, request.url.path)
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "[request.end] %s %s status=%s elapsed=%.1fms",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
    )
    return response


async def invalid_inputs_handler(_request: Request, exc: ValidationError) -> JSONResponse:
    body = ValidationErrorResponse(details=exc.details)
    return JSONResponse(status_code=400, content=body.model_dump())


async def malformed_body_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    body = ValidationErrorResponse(details=error_details(exc.errors()))
    return JSONResponse(status_code=400, content=body.model_dump())


async def pipeline_failure_handler(_request: Request, exc: RationaleError) -> JSONResponse:
    # Provider and storage internals stay in the logs.
    logger.error("[rationale] request failed: %s", exc.__class__.__name__)
    return JSONResponse(status_code=500, content=ErrorResponse(error=GENERIC_FAILURE).model_dump())


async def health(context: RationaleContext = Depends(get_context)) -> HealthResponse:
    return HealthResponse(ok=True, auditing=context.auditing_enabled)


async def kdigo_rationale(
    payload: Any = Body(None),
    context: RationaleContext = Depends(get_context),
) -> RationaleResponse:
    explanation = await generate_rationale(context, payload)
    return RationaleResponse(explanation=explanation)


async def history(context: RationaleContext = Depends(get_context)):
    try:
        records = await get_history(context)
    except PersistenceError as exc:
        logger.exception("[history] read failed")
        return JSONResponse(status_code=500, content=ErrorResponse(error=str(exc)).model_dump())
    return HistoryResponse(data=records)


def create_app(context: RationaleContext | None = None) -> FastAPI:
    context = context or build_context(settings)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        try:
            await context.startup()
        except PersistenceError:
            logger.exception("[startup] audit store unavailable; rationales will not be audited")
        logger.info("[startup] auditing=%s", context.auditing_enabled)
        yield

    app = FastAPI(title="KDIGO ESA Rationale Service", lifespan=lifespan)
    app.state.context = context
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(log_requests)

    app.add_exception_handler(ValidationError, invalid_inputs_handler)
    app.add_exception_handler(RequestValidationError, malformed_body_handler)
    app.add_exception_handler(RationaleError, pipeline_failure_handler)

    app.add_api_route("/api/health", health, methods=["GET"], response_model=HealthResponse)
    app.add_api_route(
        "/api/kdigo-rationale",
        kdigo_rationale,
        methods=["POST"],
        response_model=RationaleResponse,
        responses={400: {"model": ValidationErrorResponse}, 500: {"model": ErrorResponse}},
    )
    if context.auditing_enabled:
        app.add_api_route(
            "/api/history",
            history,
            methods=["GET"],
            response_model=HistoryResponse,
            responses={500: {"model": ErrorResponse}},
        )

    # Serve frontend static files (mount last so API routes take priority)
    if os.path.isdir(context.settings.WEB_DIR):
        app.mount("/", StaticFiles(directory=context.settings.WEB_DIR, html=True), name="static")
    else:
        logger.info("[static] skip mount: '%s' directory not found (API-only mode)", context.settings.WEB_DIR)

    return app


app = create_app()
