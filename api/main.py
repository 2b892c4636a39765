"""
api/main.py -- FastAPI application entry point for OrderDesk.

Run with:  uvicorn api.main:app --reload

Middleware stack (outermost to innermost, i.e. reverse of registration):
  1. access_log            -- one log line per request
  2. SlowAPIMiddleware     -- enforces per-route rate limits from api.limiter
  3. CORSMiddleware        -- adds CORS headers for allowed browser origins

Settings are loaded at import, so a missing or short SECRET_KEY stops the
process before uvicorn binds. Lifespan builds the stores, the token issuer
and the services once and parks them on app.state; shutdown closes the
stores.

Error mapping (one envelope for everything):
  NotFoundError            -> 404
  BusinessRuleError family -> 400 (InvalidCredentialsError -> 401)
  RequestValidationError   -> 422
  HTTPException            -> its own status
  RateLimitExceeded        -> 429 with Retry-After
  anything else            -> 500, detail written to the log only
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.limiter import limiter
from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.v1.auth import router as auth_router
from api.routes.v1.clients import router as clients_router
from api.routes.v1.orders import router as orders_router
from auth.service import AuthService
from auth.store import UserStore
from auth.tokens import TokenIssuer
from core.config import get_settings
from core.errors import DomainError
from sales.service import ClientService, OrderService
from sales.store import SalesStore

__version__ = "0.1.0"

_settings = get_settings()

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=getattr(logging, _settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("orderdesk.api")


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build application-level resources on startup and release them on shutdown.

    The signing secret is read once from Settings and handed to TokenIssuer.
    Nothing else holds or mutates it.
    """
    logger.info("OrderDesk API starting up")
    app.state.settings = _settings
    app.state.token_issuer = TokenIssuer(_settings.secret_key)
    app.state.user_store = UserStore(_settings.auth_db_url)
    app.state.sales_store = SalesStore(_settings.sales_db_url)
    app.state.auth_service = AuthService(app.state.user_store, app.state.token_issuer)
    app.state.client_service = ClientService(app.state.sales_store)
    app.state.order_service = OrderService(app.state.sales_store)
    logger.info("Stores and services initialized")

    yield

    app.state.user_store.close()
    app.state.sales_store.close()
    logger.info("OrderDesk API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="OrderDesk API",
    description="Clients, orders, and JWT authentication.",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)

app.add_middleware(SlowAPIMiddleware)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


# ---------------------------------------------------------------------------
# Access log
# ---------------------------------------------------------------------------


@app.middleware("http")
async def access_log(request: Request, call_next):
    """One line per request: method, path, status, latency, peer."""
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    peer = request.client.host if request.client else "-"
    logger.info(
        "%s %s -> %d in %.1fms from %s",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
        peer,
    )
    return response


app.include_router(auth_router, prefix="/api/v1", tags=["Auth"])
app.include_router(clients_router, prefix="/api/v1", tags=["Clients"])
app.include_router(orders_router, prefix="/api/v1", tags=["Orders"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# Every failure leaves the API as {"error": {"code", "message", "detail"}}.
# ---------------------------------------------------------------------------


def _error_response(
    status_code: int,
    code: str,
    message: str,
    detail: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    envelope = ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail))
    return JSONResponse(status_code=status_code, content=envelope.model_dump(), headers=headers)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Render service-layer failures.

    Status and code are class attributes on the exception (core/errors.py),
    so a new rule needs no change here.
    """
    logger.warning("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    return _error_response(exc.http_status, exc.code, exc.message)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("Rate limit hit on %s %s", request.method, request.url.path)
    retry_after = int(getattr(exc, "retry_after", 60))
    return _error_response(
        429,
        "rate_limited",
        "Too many requests.",
        detail=str(exc.detail),
        headers={"Retry-After": str(retry_after)},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed body or path parameter. Field rules live on the api/models.py classes."""
    return _error_response(422, "validation_error", "Request validation failed.", detail=str(exc.errors()))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Routes and auth dependencies raise HTTPException with a {"code", "message"} dict."""
    if isinstance(exc.detail, dict):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)
    return _error_response(exc.status_code, f"http_{exc.status_code}", str(exc.detail), headers=exc.headers)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # Traceback goes to the log; the client only sees a generic message.
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error_response(500, "internal_error", "An unexpected error occurred.")


# ---------------------------------------------------------------------------
# Health
#
# Lives on the app, outside the routers: public, not rate limited. A store
# that fails SELECT 1 flips components.database, never the status code.
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", response_model=HealthResponse, tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return API liveness, version, and per-store database status."""
    db_ok = request.app.state.user_store.ping() and request.app.state.sales_store.ping()
    return HealthResponse(
        status="healthy",
        version=__version__,
        components={"app": "ok", "database": "ok" if db_ok else "error"},
    )
