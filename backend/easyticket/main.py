from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import logging
import os
from pathlib import Path
from fastapi.middleware.cors import CORSMiddleware

from easyticket.api.router import api_router
from easyticket.core.config import settings
from easyticket.db.init_db import seed_demo_data
from easyticket.db.session import engine
from easyticket.services.errors import ServiceError
from easyticket.services.payment_provider import StripeProvider

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("easyticket")

def _run_migrations_if_needed():
    """Apply Alembic migrations automatically in production if enabled.

    Controlled by env var AUTO_APPLY_MIGRATIONS (default: '1'). Safe to run repeatedly.
    """
    if settings.env.lower() != "prod":
        return
    if os.getenv("AUTO_APPLY_MIGRATIONS", "1") != "1":
        return
    from alembic import command
    from alembic.config import Config
    alembic_ini = Path(__file__).resolve().parents[1] / "alembic.ini"
    if not alembic_ini.exists():
        logger.warning("alembic.ini not found at %s, skipping auto-migrations", alembic_ini)
        return
    cfg = Config(str(alembic_ini))
    # Ensure script_location resolves correctly when launched from arbitrary CWD
    cfg.set_main_option("script_location", str(Path(__file__).resolve().parents[1] / "alembic"))
    logger.info("Applying Alembic migrations -> head")
    command.upgrade(cfg, "head")

app = FastAPI(title=settings.app_name, version="0.1.0")

origins = settings.cors_origins
logger.info("Resolved CORS origins: %s", origins)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

app.include_router(api_router)

@app.get("/")
def root():
    return {"message": "EasyTicket server is running"}

@app.on_event("startup")
def startup():
    _run_migrations_if_needed()
    if settings.env.lower() in {"dev", "development"}:
        seed_demo_data()
    app.state.payment_provider = StripeProvider(
        settings.stripe_secret_key,
        webhook_secret=settings.stripe_webhook_secret,
        timeout=settings.stripe_timeout_seconds,
    )

@app.on_event("shutdown")
def shutdown():
    engine.dispose()
