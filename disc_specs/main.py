import logging
import uuid

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from disc_specs.core.config import settings
from disc_specs.core.errors import DiscSpecsError, InvalidSourceUrlError
from disc_specs.routers import jobs, specs

logger = logging.getLogger(__name__)

app = FastAPI(title="disc-specs", version="0.1.0")

# ---------------------------------------------------------------------------
# Middleware: request-id injection
# ---------------------------------------------------------------------------


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# ---------------------------------------------------------------------------
# Global exception handlers
# ---------------------------------------------------------------------------


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


def _error_body(request: Request, error: str, message: str, detail=None) -> dict:
    return {
        "error": error,
        "message": message,
        "detail": detail,
        "request_id": _request_id(request),
    }


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content=_error_body(
            request, "validation_error", "Request validation failed", jsonable_errors(exc)
        ),
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=422,
        content=_error_body(
            request, "validation_error", "Request validation failed", jsonable_errors(exc)
        ),
    )


@app.exception_handler(InvalidSourceUrlError)
async def invalid_source_url_handler(request: Request, exc: InvalidSourceUrlError):
    return JSONResponse(
        status_code=422,
        content=_error_body(request, "invalid_source_url", str(exc)),
    )


@app.exception_handler(DiscSpecsError)
async def pipeline_error_handler(request: Request, exc: DiscSpecsError):
    logger.error("Pipeline error: %s", exc, extra={"request_id": _request_id(request)})
    return JSONResponse(
        status_code=502,
        content=_error_body(request, "pipeline_error", str(exc)),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, "http_error", str(exc.detail)),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception", extra={"request_id": _request_id(request)})
    return JSONResponse(
        status_code=500,
        content=_error_body(
            request,
            "internal_error",
            "An unexpected error occurred",
            str(exc) if settings.DEBUG else None,
        ),
    )


def jsonable_errors(exc: RequestValidationError | ValidationError) -> list[dict]:
    """Validation errors without the raw ``ctx`` objects, which may not serialize."""
    return [{k: v for k, v in err.items() if k != "ctx"} for err in exc.errors()]


# ---------------------------------------------------------------------------
# Public endpoints (no auth)
# ---------------------------------------------------------------------------


@app.get("/health")
async def health():
    return {"status": "healthy", "service": "disc-specs", "version": "0.1.0"}


app.include_router(jobs.router)
app.include_router(specs.router)
