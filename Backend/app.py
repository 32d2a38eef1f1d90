"""
WordCraft — FastAPI Application Entry Point.

Provides the writing-practice backend with:
  - AI prompt generation and scoring per writing style
  - Guest and account game saving with atomic guest creation
  - A recomputable leaderboard read model with short-lived caching
  - Typed JSON error bodies and per-IP rate limits
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text

import config
from database import create_indexes, create_tables, engine
from errors import WordCraftError
from limiter import limiter
from routes import router as api_router

# ── Logging ──────────────────────────────────────────────────────

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-7s │ %(name)s │ %(message)s",
)
logger = logging.getLogger(__name__)


# ── App Lifecycle ────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(application: FastAPI):
    """Startup / shutdown lifecycle handler."""
    # Startup
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("✓ Database connected successfully")
    except Exception as e:
        logger.error("✗ Database connection failed: %s", e)

    create_tables()
    create_indexes()

    yield  # ← app is running

    # Shutdown
    engine.dispose()
    logger.info("Database connections closed")


# ── New Relic (Monitoring) ───────────────────────────────────────

if config.NEW_RELIC_CONFIG_FILE and os.path.exists(config.NEW_RELIC_CONFIG_FILE):
    try:
        import newrelic.agent
        newrelic.agent.initialize(config.NEW_RELIC_CONFIG_FILE)
        logger.info("✓ New Relic agent initialized")
    except Exception:
        logger.warning("⚠ New Relic agent skipped (install the 'monitoring' extra)")


# ── FastAPI App ──────────────────────────────────────────────────

app = FastAPI(
    title="WordCraft API",
    description="Writing practice with AI prompts, AI scoring and a style leaderboard",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Error Boundary ───────────────────────────────────────────────

@app.exception_handler(WordCraftError)
async def wordcraft_error_handler(request: Request, exc: WordCraftError):
    if exc.status_code >= 500:
        logger.error("%s %s → %s: %s", request.method, request.url.path, type(exc).__name__, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    missing = any(err.get("type") == "missing" for err in errors)
    return JSONResponse(
        status_code=400,
        content={
            "error": "Missing required fields" if missing else "Invalid request",
            "fields": [".".join(str(part) for part in err.get("loc", ())) for err in errors],
        },
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# Register routes
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.include_router(api_router)


# ── Health Check ─────────────────────────────────────────────────

@app.get("/health", tags=["Health"])
def health_check():
    """Simple liveness probe."""
    return {"status": "ok", "service": "wordcraft"}


if __name__ == "__main__":
    import uvicorn
    # Run the app with auto-reload enabled
    uvicorn.run("app:app", host="127.0.0.1", port=8000, reload=True)
