"""
Gemini Client

Thin async wrapper around google-generativeai for chat turns and one-shot
prompts, with client-side rate limiting.
"""

from typing import Any, Dict, List, Optional, Sequence

import google.generativeai as genai
import structlog

from ..errors import LLMError
from ..models.chat_models import Message
from .rate_limiter import UnifiedRateLimiter

logger = structlog.get_logger(__name__)

DEFAULT_MODEL = "gemini-2.0-flash"

# Sampling parameters for every call
GENERATION_CONFIG = {
    "temperature": 0.7,
    "top_p": 0.8,
    "top_k": 40,
    "max_output_tokens": 1024,
}


def to_gemini_history(history: Sequence[Message]) -> List[Dict[str, Any]]:
    """Convert our transcript into Gemini's role/parts format."""
    return [
        {
            "role": "user" if message.role == "user" else "model",
            "parts": [message.content],
        }
        for message in history
    ]


class GeminiClient:
    """
    Gemini generative model client.

    The model object is built once; pass ``model`` to inject a stub.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: str = DEFAULT_MODEL,
        rate_limiter: Optional[UnifiedRateLimiter] = None,
        model: Any = None
    ):
        """
        Initialize Gemini client.

        Args:
            api_key: Gemini API key (required unless ``model`` is given)
            model_name: Gemini model name
            rate_limiter: Rate limiter instance (defaults to Gemini limits)
            model: Pre-built GenerativeModel-compatible object
        """
        self.model_name = model_name
        self.rate_limiter = rate_limiter or UnifiedRateLimiter.for_gemini()
        self.logger = logger.bind(service="Gemini", model=model_name)

        if model is None:
            if not api_key:
                raise ValueError("Gemini API key is required")
            genai.configure(api_key=api_key)
            model = genai.GenerativeModel(
                model_name,
                generation_config=genai.GenerationConfig(**GENERATION_CONFIG)
            )

        self.model = model
        self.logger.info("Gemini client initialized")

    async def generate_chat_response(self, prompt: str, history: Sequence[Message]) -> str:
        """
        Send ``prompt`` as the next turn of a chat seeded with ``history``.

        Raises:
            LLMError: If the API call fails or returns no text
        """
        await self.rate_limiter.wait_if_needed()

        try:
            chat = self.model.start_chat(history=to_gemini_history(history))
            response = await chat.send_message_async(prompt)
            text = response.text
        except Exception as e:
            self.logger.error("Gemini chat call failed", error=str(e), error_type=type(e).__name__)
            raise LLMError("Failed to generate response from Gemini") from e

        self.logger.debug("Gemini chat response received", response_length=len(text))
        return text.strip()

    async def generate_content(self, prompt: str) -> str:
        """
        One-shot generation without chat history.

        Raises:
            LLMError: If the API call fails or returns no text
        """
        await self.rate_limiter.wait_if_needed()

        try:
            response = await self.model.generate_content_async(prompt)
            text = response.text
        except Exception as e:
            self.logger.error("Gemini generate call failed", error=str(e), error_type=type(e).__name__)
            raise LLMError("Failed to generate content from Gemini") from e

        return text
