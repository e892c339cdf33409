"""
Mood Analyzers

Base interface for mood detection and the local keyword-frequency
analyzer used when Gemini is disabled or fails.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Sequence

import structlog

from ...models.chat_models import Message, MoodAnalysis, NEUTRAL_MOOD

logger = structlog.get_logger(__name__)

MOOD_KEYWORDS: Dict[str, List[str]] = {
    "happy": ["happy", "joy", "excited", "great", "wonderful"],
    "sad": ["sad", "depressed", "down", "unhappy", "miserable"],
    "energetic": ["energetic", "pumped", "workout", "exercise", "active"],
    "relaxed": ["relaxed", "calm", "peaceful", "chill", "quiet"],
    "angry": ["angry", "frustrated", "annoyed", "mad"],
}

BASE_CONFIDENCE = 0.5
CONFIDENCE_PER_HIT = 0.1


class MoodAnalyzer(ABC):
    """Detects the user's mood and music preferences for one turn."""

    @abstractmethod
    async def detect(self, message: str, prior_history: Sequence[Message]) -> MoodAnalysis:
        """
        Analyse the current message in the light of earlier turns.

        Args:
            message: The user's current message
            prior_history: Turns before the current message

        Returns:
            Mood analysis; implementations never raise
        """


class KeywordMoodAnalyzer(MoodAnalyzer):
    """
    Keyword-frequency mood detection.

    Each mood scores one hit per keyword found in the lowercased message.
    Only mood classification is produced; genre, keyword and era hints are
    left empty.
    """

    def __init__(self, mood_keywords: Dict[str, List[str]] = None):
        self.mood_keywords = mood_keywords or MOOD_KEYWORDS
        self.logger = logger.bind(component="KeywordMoodAnalyzer")

    async def detect(self, message: str, prior_history: Sequence[Message] = ()) -> MoodAnalysis:
        return self.analyze(message)

    def analyze(self, message: str) -> MoodAnalysis:
        """Synchronous keyword analysis of a single message."""
        text = (message or "").lower()

        hits = {
            mood: sum(1 for keyword in keywords if keyword in text)
            for mood, keywords in self.mood_keywords.items()
        }
        highest = max(hits.values(), default=0)
        leaders = [mood for mood, count in hits.items() if count == highest]

        # Ties have no clear winner
        if highest > 0 and len(leaders) == 1:
            primary_mood = leaders[0]
        else:
            primary_mood = NEUTRAL_MOOD

        if highest > 0:
            confidence = min(1.0, BASE_CONFIDENCE + CONFIDENCE_PER_HIT * highest)
        else:
            confidence = BASE_CONFIDENCE

        total_hits = sum(hits.values())
        mood_scores = {
            mood: (count / total_hits if total_hits else 0.0)
            for mood, count in hits.items()
        }

        self.logger.debug(
            "Keyword mood detected",
            primary_mood=primary_mood,
            hits=hits,
            confidence=confidence
        )

        return MoodAnalysis(
            primary_mood=primary_mood,
            mood_scores=mood_scores,
            confidence=round(confidence, 2)
        )
