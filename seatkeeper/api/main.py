import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from seatkeeper.api.deps import get_context, get_rules, get_settings
from seatkeeper.app_shell.config import configure_logging, validate_ops_rules

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules, validate and open the store on startup (fail-fast)
    try:
        rules = get_rules()
        configure_logging(rules.logging.level)
        validate_ops_rules(rules)
        get_context()
        logger.info("Rules loaded from %s", settings.rules_path)
    except (OSError, ValueError, RuntimeError) as e:
        logger.critical("Startup failed: %s", e)
        sys.exit(1)

    yield


app = FastAPI(
    title="Seatkeeper API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from seatkeeper.api.routes import clubs, invitations  # noqa: E402

app.include_router(clubs.router, prefix="/api/clubs", tags=["Clubs"])
app.include_router(invitations.router, prefix="/api", tags=["Invitations"])


# CORS (Allow the admin portal)
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "seatkeeper"}
