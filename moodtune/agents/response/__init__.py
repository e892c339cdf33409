"""
Reply composition agents.

Use ``create_response_composer`` to pick the implementation once at start-up.
"""

from typing import Optional

from ...api.gemini_client import GeminiClient
from ...models.config_models import SystemConfig
from .gemini_response_composer import GeminiResponseComposer
from .response_composer import ComposeMode, ResponseComposer, TemplateResponseComposer


def create_response_composer(
    config: SystemConfig,
    gemini_client: Optional[GeminiClient] = None
) -> ResponseComposer:
    """Gemini-backed composer when enabled and available, templates otherwise."""
    if config.use_gemini and gemini_client is not None:
        return GeminiResponseComposer(gemini_client)
    return TemplateResponseComposer()


__all__ = [
    "ComposeMode",
    "GeminiResponseComposer",
    "ResponseComposer",
    "TemplateResponseComposer",
    "create_response_composer",
]
