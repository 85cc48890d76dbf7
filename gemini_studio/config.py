"""Environment configuration.

Values come from the process environment; a .env file at the repo root is
loaded first (existing variables win). The API key is deliberately not part
of Settings: it is read at call time via require_api_key() so a missing
credential fails the call that needs it, before any network attempt.
"""

import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv(Path(__file__).parent.parent / ".env")

API_KEY_VAR = "API_KEY"
DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_PROVIDER_URL = "https://generativelanguage.googleapis.com"


class ConfigError(RuntimeError):
    """Raised when required configuration is missing."""


class Settings(BaseModel):
    model: str = DEFAULT_MODEL
    provider_url: str = DEFAULT_PROVIDER_URL
    provider_format: Literal["gemini", "openai"] = "gemini"
    timeout: float = 120.0
    thinking_budget: int | None = 2048


def get_settings() -> Settings:
    """Read settings from the environment, falling back to defaults."""
    budget = int(os.getenv("THINKING_BUDGET", "2048"))
    return Settings(
        model=os.getenv("LLM_MODEL", DEFAULT_MODEL),
        provider_url=os.getenv("LLM_PROVIDER_URL", DEFAULT_PROVIDER_URL),
        provider_format=os.getenv("LLM_PROVIDER_FORMAT", "gemini"),
        timeout=float(os.getenv("LLM_TIMEOUT", "120")),
        thinking_budget=budget or None,
    )


def require_api_key() -> str:
    api_key = os.getenv(API_KEY_VAR, "")
    if not api_key:
        raise ConfigError(f"{API_KEY_VAR} not found in environment variables")
    return api_key
