"""Vertex AI Gemini text generation.

The Vertex SDK is synchronous, so calls run in a thread pool to keep the
async handlers non-blocking.
"""
import asyncio
import concurrent.futures
from functools import lru_cache
from typing import Optional

from vertexai import init, generative_models

from pathways.core.config import get_vertex_credentials, settings
from pathways.core.errors import ConnectivityError
from pathways.core.logging import get_logger
from pathways.utils.text import sanitize_text

logger = get_logger(__name__)

# Thread pool for blocking Vertex AI calls
_executor: Optional[concurrent.futures.ThreadPoolExecutor] = None


def _get_executor() -> concurrent.futures.ThreadPoolExecutor:
    """Get or create thread pool executor for blocking calls."""
    global _executor
    if _executor is None:
        _executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=10,
            thread_name_prefix="vertex_ai"
        )
    return _executor


@lru_cache(maxsize=2)
def get_model(model_name: str) -> generative_models.GenerativeModel:
    """Initialize Vertex AI and return a cached Gemini model handle."""
    creds = get_vertex_credentials()
    init(project=settings.project_id, location=settings.region, credentials=creds)
    logger.info(f"[Model Cache] Initializing {model_name}")
    return generative_models.GenerativeModel(model_name)


class VertexTextGenerator:
    """Text generator backed by the Vertex AI SDK (service account or ADC)."""

    def __init__(self, model: Optional[str] = None, max_output_tokens: int = 2048):
        self.model = model or settings.gemini_model
        self.max_output_tokens = max_output_tokens

    def _generate(self, prompt: str) -> str:
        model = get_model(self.model)
        generation_config = generative_models.GenerationConfig(
            temperature=0.7,
            top_p=0.95,
            top_k=40,
            max_output_tokens=self.max_output_tokens
        )
        response = model.generate_content(prompt, generation_config=generation_config)
        return response.text

    async def generate(self, prompt: str) -> str:
        logger.debug("Sending prompt to Vertex AI", extra={"provider": "vertex"})
        loop = asyncio.get_running_loop()
        try:
            text = await asyncio.wait_for(
                loop.run_in_executor(_get_executor(), self._generate, prompt),
                timeout=settings.ai_timeout_seconds
            )
        except asyncio.TimeoutError as e:
            logger.error("Vertex AI generation timed out", extra={"provider": "vertex"})
            raise ConnectivityError("AI service timed out", service="ai", status_code=502) from e
        except Exception as e:
            logger.error(f"Vertex AI generation failed: {e}", extra={"provider": "vertex"}, exc_info=True)
            raise ConnectivityError(f"AI service unavailable: {e}", service="ai", status_code=502) from e

        logger.debug("Vertex AI responded successfully", extra={"provider": "vertex"})
        return sanitize_text(text)
