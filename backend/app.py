import logging
from collections.abc import Callable

from fastapi import FastAPI

from backend.routes import router
from backend.sessions import SessionRegistry
from gemini_studio.config import get_settings
from gemini_studio.llm import LLM, from_settings

logger = logging.getLogger(__name__)


def default_llm() -> LLM:
    settings = get_settings()
    logger.debug(
        "llm client format=%s url=%s", settings.provider_format, settings.provider_url
    )
    return from_settings(settings)


def create_app(llm_factory: Callable[[], LLM] | None = None) -> FastAPI:
    app = FastAPI(title="Gemini Studio")
    app.state.sessions = SessionRegistry(llm_factory or default_llm)
    app.include_router(router, prefix="/api")
    return app


# Default app instance for uvicorn
app = create_app()
