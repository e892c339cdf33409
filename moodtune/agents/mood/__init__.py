"""
Mood detection agents.

Use ``create_mood_analyzer`` to pick the implementation once at start-up.
"""

from typing import Optional

from ...models.config_models import SystemConfig
from ..components.llm_utils import LLMUtils
from .gemini_mood_analyzer import GeminiMoodAnalyzer
from .mood_analyzer import KeywordMoodAnalyzer, MoodAnalyzer, MOOD_KEYWORDS


def create_mood_analyzer(config: SystemConfig, llm_utils: Optional[LLMUtils] = None) -> MoodAnalyzer:
    """Gemini-backed analyzer when enabled and available, keywords otherwise."""
    if config.use_gemini and llm_utils is not None:
        return GeminiMoodAnalyzer(llm_utils)
    return KeywordMoodAnalyzer()


__all__ = [
    "GeminiMoodAnalyzer",
    "KeywordMoodAnalyzer",
    "MoodAnalyzer",
    "MOOD_KEYWORDS",
    "create_mood_analyzer",
]
