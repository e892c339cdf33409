"""
Response Composers

Interface for writing the assistant's reply and the fixed-template
implementation used when Gemini is disabled or fails.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional, Sequence

from ...models.chat_models import Message, MoodAnalysis, Recommendation, INITIAL_STAGE_MAX_LENGTH


class ComposeMode(str, Enum):
    """What the reply has to achieve."""
    ENGAGE = "engage"            # ask a question to learn more, no songs
    ACKNOWLEDGE = "acknowledge"  # say recommendations are on the way, no songs
    FINAL = "final"              # mention the mood, recommend the top song


FIRST_ENGAGE_TEMPLATE = (
    "Hi there! I'd love to find some music for you. "
    "How are you feeling today, and what have you been listening to lately?"
)
FOLLOW_UP_ENGAGE_TEMPLATE = (
    "Thanks for sharing! What kind of music do you usually reach for "
    "when you feel like this?"
)
ACKNOWLEDGE_TEMPLATE = "I'm analyzing your message to find the perfect music for you..."
ACKNOWLEDGE_FALLBACK = "I'm looking for some music recommendations for you..."
FINAL_TEMPLATE = (
    'Based on our conversation, I sense you\'re feeling {mood}. '
    'Here are some songs that might match your mood. '
    'My top recommendation is "{title}" by {artist}.'
)
FINAL_FALLBACK = 'I think you might enjoy "{title}" by {artist} based on your current mood.'


def is_first_interaction(history: Sequence[Message]) -> bool:
    return len(history) <= INITIAL_STAGE_MAX_LENGTH


class ResponseComposer(ABC):
    """Writes the assistant's reply for one turn."""

    @abstractmethod
    async def engage(self, history: Sequence[Message]) -> str:
        """A short question that draws out mood or taste. Mentions no songs."""

    @abstractmethod
    async def acknowledge(self, history: Sequence[Message]) -> str:
        """A short note that recommendations are being prepared. Mentions no songs."""

    @abstractmethod
    async def finalize(
        self,
        acknowledgement: str,
        mood: MoodAnalysis,
        recommendations: Sequence[Recommendation],
        history: Sequence[Message]
    ) -> str:
        """A reply that references the mood and recommends only the first song."""

    async def compose(
        self,
        mode: ComposeMode,
        history: Sequence[Message],
        mood: Optional[MoodAnalysis] = None,
        recommendations: Optional[Sequence[Recommendation]] = None,
        acknowledgement: str = ""
    ) -> str:
        """Dispatch to the method for ``mode``."""
        if mode is ComposeMode.ENGAGE:
            return await self.engage(history)
        if mode is ComposeMode.ACKNOWLEDGE:
            return await self.acknowledge(history)
        if mode is ComposeMode.FINAL:
            if mood is None or not recommendations:
                raise ValueError("Final replies need a mood and at least one recommendation")
            return await self.finalize(acknowledgement, mood, recommendations, history)
        raise ValueError(f"Unknown compose mode: {mode}")


class TemplateResponseComposer(ResponseComposer):
    """Fixed-text replies."""

    async def engage(self, history: Sequence[Message]) -> str:
        if is_first_interaction(history):
            return FIRST_ENGAGE_TEMPLATE
        return FOLLOW_UP_ENGAGE_TEMPLATE

    async def acknowledge(self, history: Sequence[Message]) -> str:
        return ACKNOWLEDGE_TEMPLATE

    async def finalize(
        self,
        acknowledgement: str,
        mood: MoodAnalysis,
        recommendations: Sequence[Recommendation],
        history: Sequence[Message]
    ) -> str:
        top = recommendations[0]
        return FINAL_TEMPLATE.format(mood=mood.primary_mood, title=top.title, artist=top.artist)

    def fallback_final(self, recommendations: Sequence[Recommendation]) -> str:
        top = recommendations[0]
        return FINAL_FALLBACK.format(title=top.title, artist=top.artist)
