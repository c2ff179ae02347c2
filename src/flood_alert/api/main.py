import logging
import os
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from flood_alert import __version__
from flood_alert.adapters.sqlite.migrator import SQLiteMigrator
from flood_alert.api.deps import get_alert_config, get_db_path, get_rules, get_settings
from flood_alert.app_shell.config import validate_ops_rules

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules, validate and migrate on startup (fail-fast)
    try:
        rules = get_rules()
        validate_ops_rules(rules, os.environ)
        get_alert_config()
        SQLiteMigrator(get_db_path()).run_migrations()
        logger.info("Rules loaded from %s", settings.rules_path)
    except (FileNotFoundError, ValueError, RuntimeError) as e:
        logger.critical("Startup failed: %s", e)
        sys.exit(1)

    yield


app = FastAPI(
    title="Bike Path Flood Alert",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url=None,
)

# --- Routers ---
from flood_alert.api.routes import public, public_subscriptions  # noqa: E402

app.include_router(public.router, tags=["Public"])
app.include_router(public_subscriptions.router, tags=["Subscriptions"])


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "flood-alert"}
