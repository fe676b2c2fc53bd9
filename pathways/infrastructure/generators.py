"""Selects the text generator for a request."""
from typing import Optional

from pathways.core.config import settings
from pathways.infrastructure.gemini import GeminiClient


def get_text_generator(api_key: Optional[str] = None):
    """Build a generator for one request.

    A caller-supplied key always goes to the Gemini REST API. Without one,
    AI_PROVIDER=vertex uses Vertex AI credentials; otherwise the configured
    GEMINI_API_KEY is used.

    Raises:
        MissingApiKeyError: no request key, no configured key, provider gemini
    """
    if api_key:
        return GeminiClient(api_key=api_key)
    if settings.ai_provider == "vertex":
        from pathways.infrastructure.vertex import VertexTextGenerator
        return VertexTextGenerator()
    return GeminiClient()
