"""
Top-up Storefront — FastAPI Application

Credit top-up requests, credit-for-product redemption with atomic balance
deduction, and an admin-managed product catalog.
"""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi import HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from domain.errors import DomainError
from domain.responses import error_response
from routes import health, orders, products

# ── Logging ─────────────────────────────────────────────────────────

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: validate settings, create DB tables."""
    # Ensure data/ directory exists for SQLite
    os.makedirs("data", exist_ok=True)

    settings.validate_production_settings()

    from database import init_db
    await init_db()
    logger.info("Database initialized")

    yield  # app runs here

    from database import engine
    await engine.dispose()
    logger.info("Shutting down")


# ── App Factory ─────────────────────────────────────────────────────

app = FastAPI(
    title="Top-up Storefront API",
    description="Credit purchases, credit-for-product orders, and catalog administration",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routes ──────────────────────────────────────────────────────────

app.include_router(health.router)
app.include_router(products.router)
app.include_router(orders.router)


# ── Exception Handlers ──────────────────────────────────────────────


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """
    Catch-all for unhandled exceptions.

    Never return raw exception details to clients; the full traceback is
    logged server-side.
    """
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=error_response("internal_server_error", "Internal server error"),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc: RequestValidationError):
    """Malformed bodies, params and paths are reported as invalid_input (400)."""
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", "invalid value"),
        }
        for err in exc.errors()
    ]
    message = errors[0]["message"] if errors else "Invalid request"
    return JSONResponse(
        status_code=400,
        content=error_response("invalid_input", message, {"errors": errors}),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    """
    Standardize HTTPException responses for frontend consumers.

    Keeps the HTTP status code, but wraps the payload.
    """
    if isinstance(exc, DomainError):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(exc.code, exc.message, exc.details),
            headers=exc.headers,
        )

    detail = exc.detail
    message = detail if isinstance(detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(
            "rate_limited" if exc.status_code == 429 else "http_error",
            message,
            detail if not isinstance(detail, str) else None,
        ),
        headers=exc.headers,
    )


# ── Entrypoint ──────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")
