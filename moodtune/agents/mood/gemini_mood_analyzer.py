"""
Gemini Mood Analyzer

Structured mood and preference extraction with Gemini, degrading to the
keyword analyzer on any failure.
"""

from typing import Any, Dict, Optional, Sequence

import structlog

from ...models.chat_models import MOOD_VOCABULARY, Message, MoodAnalysis, NEUTRAL_MOOD
from ..components.llm_utils import LLMUtils
from .mood_analyzer import KeywordMoodAnalyzer, MoodAnalyzer

logger = structlog.get_logger(__name__)

MOOD_RESPONSE_FORMAT: Dict[str, Any] = {
    "primaryMood": "string (one of: happy, sad, energetic, relaxed, angry, neutral, or a more specific mood if detected)",
    "moodScores": {mood: "number (0-1)" for mood in MOOD_VOCABULARY},
    "confidence": "number (0-1, confidence in the overall analysis)",
    "moodKeywords": "string (comma-separated keywords describing the mood, e.g., 'upbeat', 'chill', 'melancholy')",
    "suggestedGenres": "string (comma-separated relevant music genres suggested by you based on mood/context, e.g., 'Pop', 'Electronic', 'Classical', 'Hip Hop')",
    "extractedKeywords": "string (comma-separated keywords or phrases directly extracted from the user's message relevant to music, e.g., 'workout playlist', 'song like X', 'music from the 80s')",
    "era": "string (detected music era if mentioned or implied, e.g., '80s', '90s', 'current hits')",
    "reasoning": "string (brief explanation for the analysis)",
}

MOOD_TASK_TEMPLATE = """
Analyze the user's mood and music preferences based on their messages in this conversation.
Extract the primary mood, and also suggest relevant music genres, keywords, or even a specific era that match their request and mood.
If the user mentions a specific artist, genre, song title, or era, extract that information explicitly.

Conversation History:
{conversation}
Current Message:
{message}

Provide your analysis in the following JSON format:
"""


def format_conversation(history: Sequence[Message]) -> str:
    return "\n".join(f"{message.role}: {message.content}" for message in history)


def _as_text(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item).strip() for item in value if str(item).strip())
    if value is None:
        return ""
    return str(value).strip()


def _as_unit_float(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return min(1.0, max(0.0, number))


class GeminiMoodAnalyzer(MoodAnalyzer):
    """
    Mood analyzer backed by a structured Gemini call.

    Missing fields default to neutral/empty values; any error (API failure,
    unparsable output) falls back to keyword analysis of the message.
    """

    def __init__(
        self,
        llm_utils: LLMUtils,
        fallback: Optional[KeywordMoodAnalyzer] = None
    ):
        self.llm_utils = llm_utils
        self.fallback = fallback or KeywordMoodAnalyzer()
        self.logger = logger.bind(component="GeminiMoodAnalyzer")

    async def detect(self, message: str, prior_history: Sequence[Message] = ()) -> MoodAnalysis:
        conversation = format_conversation(prior_history)

        try:
            data = await self.llm_utils.generate_structured_response(
                task=MOOD_TASK_TEMPLATE.format(conversation=conversation, message=message),
                context={"conversation": conversation, "currentMessage": message},
                output_format=MOOD_RESPONSE_FORMAT
            )
            analysis = self.to_mood_analysis(data)
        except Exception as e:
            self.logger.warning(
                "Gemini mood analysis failed, using keyword fallback",
                error=str(e),
                error_type=type(e).__name__
            )
            return self.fallback.analyze(message)

        self.logger.info(
            "Mood detected",
            primary_mood=analysis.primary_mood,
            confidence=analysis.confidence,
            suggested_genres=analysis.suggested_genres
        )
        return analysis

    def to_mood_analysis(self, data: Dict[str, Any]) -> MoodAnalysis:
        """Map the model's JSON object onto a MoodAnalysis."""
        raw_scores = data.get("moodScores")
        mood_scores = {}
        if isinstance(raw_scores, dict):
            for mood, score in raw_scores.items():
                value = _as_unit_float(score)
                if value is not None:
                    mood_scores[str(mood)] = value

        confidence = _as_unit_float(data.get("confidence"))
        if confidence is None:
            confidence = 0.5
        reasoning = _as_text(data.get("reasoning")) or None

        return MoodAnalysis(
            primary_mood=_as_text(data.get("primaryMood")).lower() or NEUTRAL_MOOD,
            mood_scores=mood_scores,
            confidence=confidence,
            mood_keywords=_as_text(data.get("moodKeywords")),
            suggested_genres=_as_text(data.get("suggestedGenres")),
            extracted_keywords=_as_text(data.get("extractedKeywords")),
            era=_as_text(data.get("era")),
            reasoning=reasoning
        )
