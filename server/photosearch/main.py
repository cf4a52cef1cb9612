import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi import Request as FastAPIRequest
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from photosearch.api import api_router
from photosearch.core.config import get_settings
from photosearch.core.exceptions import ClientInputError, UpstreamError
from photosearch.core.rate_limit import limiter, rate_limit_exceeded_handler
from photosearch.core.security_headers import SecurityHeadersMiddleware
from photosearch.schemas.common import ErrorResponse, StatusResponse
from photosearch.services.search_proxy import SearchProxy

settings = get_settings()

# Module loggers (cache, upstream) inherit this level instead of Python's default WARNING.
logging.getLogger("photosearch").setLevel(settings.log_level.upper())

# The API is read-only
CORS_ALLOW_METHODS = ["GET", "OPTIONS"]

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    proxy = SearchProxy.from_settings(settings)
    app.state.search_proxy = proxy
    logger.info(
        "Search proxy ready (upstream=%s, cache ttl=%ss, max entries=%d)",
        settings.upstream_base_url,
        settings.cache_ttl_seconds,
        settings.cache_max_entries,
    )
    try:
        yield
    finally:
        await proxy.aclose()
        logger.info("Search proxy closed")


app = FastAPI(
    title="Photo Search API",
    description="Credential-hiding, caching proxy for photo search",
    version="0.1.0",
    lifespan=lifespan,
    # Disable API docs in production
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
    openapi_url=None if settings.is_production else "/openapi.json",
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


@app.exception_handler(UpstreamError)
async def upstream_exception_handler(request: FastAPIRequest, exc: UpstreamError) -> JSONResponse:
    """Map upstream failures to a generic error body; upstream details stay in the logs."""
    logger.warning(
        "Upstream failure on %s %s: %s",
        request.method,
        request.url.path,
        type(exc).__name__,
    )
    body = ErrorResponse(error=exc.message, retryable=exc.retryable)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.exception_handler(ClientInputError)
async def client_input_exception_handler(
    request: FastAPIRequest, exc: ClientInputError
) -> JSONResponse:
    body = ErrorResponse(error=str(exc), retryable=False)
    return JSONResponse(status_code=400, content=body.model_dump())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: FastAPIRequest, exc: RequestValidationError
) -> JSONResponse:
    """Report which parameters were invalid without echoing their values."""
    fields = sorted({str(err["loc"][-1]) for err in exc.errors() if err.get("loc")})
    logger.info("Rejected %s %s: invalid %s", request.method, request.url.path, fields)
    message = "Invalid request parameters"
    if fields:
        message = f"{message}: {', '.join(fields)}"
    body = ErrorResponse(error=message, retryable=False)
    return JSONResponse(status_code=422, content=body.model_dump())


@app.exception_handler(Exception)
async def global_exception_handler(request: FastAPIRequest, exc: Exception) -> JSONResponse:
    """Catch unhandled exceptions and return a generic 500 response."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    content = {"error": "Internal server error", "retryable": False}
    if not settings.is_production:
        content["debug"] = type(exc).__name__
    return JSONResponse(status_code=500, content=content)


# Security headers (added first, runs last in middleware chain)
app.add_middleware(SecurityHeadersMiddleware)

# CORS
if settings.cors_origins.strip() == "*":
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=CORS_ALLOW_METHODS,
        allow_headers=["*"],
    )
else:
    origins = [origin.strip() for origin in settings.cors_origins.split(",")]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=False,
        allow_methods=CORS_ALLOW_METHODS,
        allow_headers=["Content-Type"],
    )

app.include_router(api_router, prefix="/api")


@app.get("/health", response_model=StatusResponse)
def health_check() -> StatusResponse:
    return StatusResponse(status="ok")
