"""LLM client: HTTP connection to a structured-output generation backend.

The engine injects an LLM callable matching the protocol:

    async def __call__(self, stage: str, request: GenerationRequest) -> str: ...

`stage` identifies which engine call is running ("initialize" or "turn").
The implementation may use it for logging; the returned string is the raw
JSON text the model produced. Parsing and validation happen in the engine.

HttpLLM is the real client. It supports two wire formats, selected by
provider_format:

    "gemini": Google Generative Language REST API (generateContent)
    "openai": OpenAI-compatible chat completions with a json_schema
                response format

Tests use StubLLM (defined in tests/helpers.py) instead.
"""

from __future__ import annotations

import logging
from typing import Any, Literal, Protocol

import httpx
from pydantic import BaseModel

from gemini_studio.config import ConfigError, Settings, require_api_key

logger = logging.getLogger(__name__)

__all__ = [
    "ConfigError",
    "GenerationRequest",
    "HttpLLM",
    "LLM",
    "LLMError",
    "from_settings",
]


class GenerationRequest(BaseModel):
    """Everything one structured generation call needs."""

    model: str
    system_instruction: str
    contents: str
    response_schema: dict[str, Any]
    response_mime_type: str = "application/json"
    thinking_budget: int | None = None


# ---------------------------------------------------------------------------
# Protocol: every LLM implementation must match this signature
# ---------------------------------------------------------------------------

class LLM(Protocol):
    async def __call__(self, stage: str, request: GenerationRequest) -> str: ...


# ---------------------------------------------------------------------------
# HttpLLM: connects to a real backend
# ---------------------------------------------------------------------------

ProviderFormat = Literal["gemini", "openai"]


class HttpLLM:
    """Async HTTP client for structured-output generation backends.

    Supported formats:
      "gemini": POST /v1beta/models/{model}:generateContent
                  Response: {"candidates": [{"content": {"parts": [{"text": "..."}]}}]}
      "openai": POST /v1/chat/completions
                  Response: {"choices": [{"message": {"content": "..."}}]}

    The API key is read from the environment on every call, so a missing
    key raises ConfigError before anything is sent.

    Args:
        provider_url:    Base URL of the backend.
        provider_format: Wire format to use. Defaults to "gemini".
        timeout:         HTTP timeout in seconds. Defaults to 120.
    """

    def __init__(
        self,
        provider_url: str,
        provider_format: ProviderFormat = "gemini",
        timeout: float = 120.0,
    ) -> None:
        self._base_url = provider_url.rstrip("/")
        self._format = provider_format
        self._timeout = timeout

    def _headers(self, api_key: str) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self._format == "openai":
            headers["Authorization"] = f"Bearer {api_key}"
        else:
            headers["x-goog-api-key"] = api_key
        return headers

    def _build_request(self, stage: str, request: GenerationRequest) -> tuple[str, dict]:
        """Return (url, body) for the configured format."""
        if self._format == "openai":
            url = f"{self._base_url}/v1/chat/completions"
            body: dict[str, Any] = {
                "model": request.model,
                "messages": [
                    {"role": "system", "content": request.system_instruction},
                    {"role": "user", "content": request.contents},
                ],
                "response_format": {
                    "type": "json_schema",
                    "json_schema": {
                        "name": stage,
                        "schema": to_json_schema(request.response_schema),
                    },
                },
            }
            return url, body

        # gemini (default)
        url = f"{self._base_url}/v1beta/models/{request.model}:generateContent"
        generation_config: dict[str, Any] = {
            "responseMimeType": request.response_mime_type,
            "responseSchema": request.response_schema,
        }
        if request.thinking_budget is not None:
            generation_config["thinkingConfig"] = {"thinkingBudget": request.thinking_budget}
        body = {
            "systemInstruction": {"parts": [{"text": request.system_instruction}]},
            "contents": [{"role": "user", "parts": [{"text": request.contents}]}],
            "generationConfig": generation_config,
        }
        return url, body

    def _parse_response(self, data: Any) -> str:
        """Extract the generated text from the response body."""
        if self._format == "openai":
            choices = data.get("choices") if isinstance(data, dict) else None
            if (
                not isinstance(choices, list) or not choices
                or not isinstance(choices[0], dict)
                or not isinstance(choices[0].get("message"), dict)
            ):
                raise LLMError("Unexpected response format from OpenAI-compatible backend")
            content = choices[0]["message"].get("content") or ""
            if not isinstance(content, str):
                raise LLMError("Unexpected response format from OpenAI-compatible backend")
            return content

        candidates = data.get("candidates") if isinstance(data, dict) else None
        if (
            not isinstance(candidates, list) or not candidates
            or not isinstance(candidates[0], dict)
            or not isinstance(candidates[0].get("content"), dict)
        ):
            raise LLMError("Unexpected response format from Gemini backend")
        parts = candidates[0]["content"].get("parts") or []
        if not isinstance(parts, list):
            raise LLMError("Unexpected response format from Gemini backend")
        texts = []
        for part in parts:
            text = part.get("text") if isinstance(part, dict) else None
            if text is not None and not isinstance(text, str):
                raise LLMError("Unexpected response format from Gemini backend")
            texts.append(text or "")
        return "".join(texts)

    async def __call__(self, stage: str, request: GenerationRequest) -> str:
        api_key = require_api_key()
        url, body = self._build_request(stage, request)
        logger.debug(
            "llm call stage=%s url=%s contents_len=%d", stage, url, len(request.contents)
        )

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(url, json=body, headers=self._headers(api_key))
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise LLMError(f"Cannot connect to LLM backend at {self._base_url}") from e
        except httpx.HTTPStatusError as e:
            raise LLMError(
                f"LLM backend returned HTTP {e.response.status_code}"
            ) from e
        except httpx.TimeoutException as e:
            raise LLMError(f"LLM backend timed out after {self._timeout}s") from e
        except httpx.RequestError as e:
            raise LLMError(f"LLM request failed: {e}") from e
        except httpx.InvalidURL as e:
            raise LLMError(f"Invalid LLM backend URL: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise LLMError("LLM backend returned a non-JSON body") from e
        text = self._parse_response(data)
        if not text:
            raise LLMError("No response from AI")
        logger.debug("llm response stage=%s len=%d", stage, len(text))
        return text


def from_settings(settings: Settings) -> HttpLLM:
    return HttpLLM(
        provider_url=settings.provider_url,
        provider_format=settings.provider_format,
        timeout=settings.timeout,
    )


def to_json_schema(schema: dict[str, Any]) -> dict[str, Any]:
    """Convert a Gemini-style schema (upper-case type names) to JSON Schema."""
    converted: dict[str, Any] = {}
    for key, value in schema.items():
        if key == "type" and isinstance(value, str):
            converted[key] = value.lower()
        elif key == "properties":
            converted[key] = {name: to_json_schema(prop) for name, prop in value.items()}
        elif key == "items":
            converted[key] = to_json_schema(value)
        else:
            converted[key] = value
    return converted


# ---------------------------------------------------------------------------
# LLMError: raised by HttpLLM for all connection and protocol failures
# ---------------------------------------------------------------------------

class LLMError(RuntimeError):
    """Raised when the LLM backend cannot be reached or returns an error."""
