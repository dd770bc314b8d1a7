import logging

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from documind.api.session import router as session_router
from documind.config import Settings
from documind.logging_config import configure_logging
from documind.telemetry import emit_app_startup_event

_settings = Settings.from_env()
configure_logging(_settings.log_dir, _settings.log_level)

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="Documind API")
app.include_router(session_router)


@app.on_event("startup")
async def _startup() -> None:
    emit_app_startup_event()
    if _settings.llm_provider != "mock" and not _settings.api_key:
        LOGGER.warning("No API key configured; it must be supplied when confirming the outline")


@app.get("/", response_class=PlainTextResponse)
def read_root() -> str:
    """Healthcheck endpoint for the service."""
    return "ok"


@app.get("/healthz", response_class=PlainTextResponse)
def healthcheck() -> str:
    """Liveness probe used by container orchestrators."""
    return "ok"
