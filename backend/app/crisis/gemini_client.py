"""
gemini_client.py: Client for the structured-output generation service.

Calls the Gemini ``generateContent`` REST endpoint with a system
instruction, the incident prompt and a response schema, and returns the
raw JSON text of the first candidate. Parsing and schema validation are
left to the caller.

Error Handling Strategy
========================
Every failure surfaces as GenerationServiceError; nothing is retried.

    Missing API key            → fail before any request is made
    Timeout / connection error → fail with the transport error
    HTTP 4xx / 5xx             → fail with status code and service message
    Blocked prompt / no text   → fail, envelope had no usable candidate
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import httpx

from backend.app.core.config import Settings
from backend.app.core.errors import GenerationServiceError
from backend.app.crisis.prompt import GenerationRequest

logger = logging.getLogger(__name__)


class GeminiClient:
    """
    Async client with a lazily created, reusable httpx connection pool.

    Usage:
        client = GeminiClient.from_settings(settings)
        text = await client.generate(request)
        await client.close()
    """

    def __init__(
        self,
        api_key: Optional[str],
        *,
        model: str = "gemini-2.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiClient":
        return cls(
            settings.GEMINI_API_KEY,
            model=settings.GEMINI_MODEL,
            base_url=settings.GEMINI_BASE_URL,
            timeout=settings.GENERATION_TIMEOUT_SECONDS,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport,
            )
        return self._http_client

    async def close(self) -> None:
        if self._http_client and not self._http_client.is_closed:
            await self._http_client.aclose()

    @staticmethod
    def build_body(request: GenerationRequest) -> Dict[str, Any]:
        return {
            "systemInstruction": {"parts": [{"text": request.system_instruction}]},
            "contents": [{"role": "user", "parts": [{"text": request.prompt}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": request.response_schema,
            },
        }

    async def generate(self, request: GenerationRequest) -> str:
        """
        Request one structured briefing.

        Returns
        -------
        str
            The JSON text produced by the model (unparsed).

        Raises
        ------
        GenerationServiceError
        """
        if not self.is_configured:
            raise GenerationServiceError("GEMINI_API_KEY is not configured")

        client = await self._get_client()
        start = time.perf_counter()
        try:
            response = await client.post(
                self.endpoint,
                json=self.build_body(request),
                headers={"x-goog-api-key": self.api_key},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise GenerationServiceError(
                f"HTTP {e.response.status_code}: {_service_message(e.response)}",
                status=e.response.status_code,
            ) from e
        except httpx.TimeoutException as e:
            raise GenerationServiceError(f"Timed out after {self.timeout:.0f}s") from e
        except httpx.HTTPError as e:
            raise GenerationServiceError(f"Transport error: {e}") from e

        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "Generation reply from %s in %.0fms", self.model, duration_ms,
            extra={"duration_ms": duration_ms},
        )

        try:
            envelope = response.json()
        except ValueError as e:
            raise GenerationServiceError("Response envelope is not JSON") from e
        return extract_text(envelope)


def extract_text(envelope: Dict[str, Any]) -> str:
    """Pull the concatenated text parts of the first candidate."""
    if not isinstance(envelope, dict):
        raise GenerationServiceError("Response envelope is not an object")

    feedback = envelope.get("promptFeedback") or {}
    if not isinstance(feedback, dict):
        raise GenerationServiceError("Prompt feedback is not an object")
    if feedback.get("blockReason"):
        raise GenerationServiceError(f"Prompt blocked: {feedback['blockReason']}")

    candidates = envelope.get("candidates") or []
    if not isinstance(candidates, list):
        raise GenerationServiceError("Candidates is not a list")
    if not candidates:
        raise GenerationServiceError("Response contained no candidates")

    candidate = candidates[0]
    if not isinstance(candidate, dict):
        raise GenerationServiceError("Candidate is not an object")
    content = candidate.get("content") or {}
    if not isinstance(content, dict):
        raise GenerationServiceError("Candidate content is not an object")
    parts = content.get("parts") or []
    if not isinstance(parts, list):
        raise GenerationServiceError("Candidate parts is not a list")

    text = "".join(
        p["text"] for p in parts
        if isinstance(p, dict) and isinstance(p.get("text"), str)
    )
    if not text:
        reason = candidate.get("finishReason", "unknown")
        raise GenerationServiceError(f"Candidate had no text (finishReason={reason})")
    return text


def _service_message(response: httpx.Response) -> str:
    try:
        return response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return response.text[:200]
