"""Gemini text generation over the Generative Language REST API."""
from typing import Any, Dict, Optional

import httpx

from pathways.core.config import settings
from pathways.core.errors import ConnectivityError, MissingApiKeyError
from pathways.core.logging import get_logger
from pathways.utils.text import sanitize_text

logger = get_logger(__name__)


class GeminiClient:
    """Async client for ``models/{model}:generateContent``.

    The API key is bound to the instance; build one client per request key.

    Example:
        >>> client = GeminiClient(api_key="...")
        >>> text = await client.generate("Suggest study techniques for algebra")
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> None:
        self.api_key = api_key or settings.gemini_api_key
        if not self.api_key:
            raise MissingApiKeyError()
        self.model = model or settings.gemini_model
        base_url = (base_url or settings.gemini_base_url).rstrip("/")
        self.url = f"{base_url}/models/{self.model}:generateContent"
        self.timeout = timeout or settings.ai_timeout_seconds
        self._transport = transport

    async def generate(self, prompt: str) -> str:
        payload: Dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
        headers = {"x-goog-api-key": self.api_key, "Content-Type": "application/json"}

        logger.debug("Sending prompt to Gemini", extra={"provider": "gemini"})
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                r = await client.post(self.url, headers=headers, json=payload)
                r.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Gemini returned HTTP {e.response.status_code}",
                extra={"provider": "gemini", "status_code": e.response.status_code}
            )
            raise ConnectivityError(
                f"AI service error ({e.response.status_code}): {e.response.text}",
                service="ai",
                status_code=502
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Gemini request failed: {e}", extra={"provider": "gemini"}, exc_info=True)
            raise ConnectivityError(f"AI service unreachable: {e}", service="ai", status_code=502) from e

        try:
            data = r.json()
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ConnectivityError(
                f"Unexpected Gemini response: {r.text[:200]}",
                service="ai",
                status_code=502
            ) from e

        logger.debug("Gemini responded successfully", extra={"provider": "gemini"})
        return sanitize_text(text)
