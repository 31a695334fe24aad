"""
ChapterDesk FastAPI Application - Main entry point.

ChapterDesk runs the back office of a chapter-based business network:

- Membership: Packages, memberships (purchases with GST invoices), members
  and their HO / venue expiry tracks
- Finance: Chapter cash and bank ledgers with recomputed closing balances

Endpoints are served under /api/v1/{module}/ paths; /api/health is the
health check.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from app.core.config import settings
from app.core.errors import ConflictError, DomainError, integrity_error_field
from app.core.logging import setup_logging
from app.db.base import init_db
from app.schemas.common import HealthResponse

from app.api.v1.membership import membership_router
from app.api.v1.finance import finance_router

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    # Startup: Initialize database
    # Note: In production, use Alembic migrations instead
    await init_db()
    logger.info("%s started (%s)", settings.APP_NAME, settings.APP_ENV)
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    description="""
ChapterDesk - membership and chapter ledger back office.

## Modules

- **Membership**: Packages, memberships and invoices, member expiry status
- **Finance**: Chapter cash and bank transactions
    """,
    lifespan=lifespan,
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url="/api/redoc" if settings.DEBUG else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# HEALTH CHECK
# ============================================================================

@app.get("/api/health", response_model=HealthResponse, tags=["health"])
async def health_check():
    """Health check endpoint."""
    return HealthResponse(code=200, message="API is healthy.")


# ============================================================================
# V1 API ENDPOINTS
# ============================================================================

# Membership module - /api/v1/memberships, /api/v1/members, /api/v1/packages
app.include_router(
    membership_router,
    prefix=settings.API_V1_PREFIX,
)

# Finance module - /api/v1/chapters/{id}/transactions, /api/v1/transactions
app.include_router(
    finance_router,
    prefix=settings.API_V1_PREFIX,
)


# ============================================================================
# ERROR HANDLERS
# ============================================================================

@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError):
    """Business rule, not-found and forbidden errors raised by the services."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "errors": exc.errors}
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed input is a 400 with one message per field."""
    errors = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        errors[".".join(loc) or "body"] = error.get("msg", "Invalid value")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Validation failed", "errors": errors}
    )


@app.exception_handler(IntegrityError)
async def integrity_exception_handler(request: Request, exc: IntegrityError):
    """Unique constraint violations are conflicts on the named field."""
    field = integrity_error_field(str(exc.orig))
    message = f"A record with that {field} already exists."
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    conflict = ConflictError(message, errors={field: {"type": "unique", "message": message}})
    return await domain_exception_handler(request, conflict)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
