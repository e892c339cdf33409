"""
Gemini Response Composer

Conversational replies generated by Gemini, with template replies when a
call fails.
"""

from typing import Optional, Sequence

import structlog

from ...api.gemini_client import GeminiClient
from ...errors import LLMError
from ...models.chat_models import Message, MoodAnalysis, Recommendation
from .response_composer import (
    ACKNOWLEDGE_FALLBACK,
    ResponseComposer,
    TemplateResponseComposer,
    is_first_interaction,
)

logger = structlog.get_logger(__name__)

ENGAGE_PROMPT = """
You are a friendly music recommendation assistant having a conversation with a user.
This is {interaction} with them.

Your goal is to engage them in a brief conversation to better understand their mood and music preferences.
Ask them a question about how they're feeling, what kind of day they're having, or what music they typically enjoy.
Keep your response conversational, friendly, and concise (2-3 sentences).
Don't make any specific music recommendations yet.
"""

ACKNOWLEDGE_PROMPT = """
You are a friendly music recommendation assistant. The user has just sent you this message.
Respond in a conversational way, acknowledging their message and indicating that you're
finding music recommendations for them. Keep your response friendly and concise (1-2 sentences).
Don't recommend any specific songs yet - just acknowledge their message and indicate you're finding music.
"""

FINAL_PROMPT = """
You are a friendly music recommendation assistant.
The user's current mood has been detected as: {mood} (confidence: {confidence}).
Based on this mood, you have the following song recommendations:
{songs}

You previously responded with: "{acknowledgement}"

Now, provide a more complete response that:
1. Builds on your initial response
2. Mentions their detected mood in a natural way
3. Recommends the first song in the list as your top pick
4. Keeps your response friendly and concise (2-3 sentences)
5. Doesn't list all songs, just mentions the top recommendation
"""


def format_song_list(recommendations: Sequence[Recommendation]) -> str:
    return "\n".join(
        f'{index}. "{rec.title}" by {rec.artist}'
        for index, rec in enumerate(recommendations, start=1)
    )


class GeminiResponseComposer(ResponseComposer):
    """Gemini-written replies; every mode has a template fallback."""

    def __init__(
        self,
        gemini_client: GeminiClient,
        templates: Optional[TemplateResponseComposer] = None
    ):
        self.gemini_client = gemini_client
        self.templates = templates or TemplateResponseComposer()
        self.logger = logger.bind(component="GeminiResponseComposer")

    async def engage(self, history: Sequence[Message]) -> str:
        interaction = "your first interaction" if is_first_interaction(history) else "an early interaction"
        try:
            return await self.gemini_client.generate_chat_response(
                ENGAGE_PROMPT.format(interaction=interaction), history
            )
        except LLMError as e:
            self.logger.warning("Engage reply failed, using template", error=str(e))
            return await self.templates.engage(history)

    async def acknowledge(self, history: Sequence[Message]) -> str:
        try:
            return await self.gemini_client.generate_chat_response(ACKNOWLEDGE_PROMPT, history)
        except LLMError as e:
            self.logger.warning("Acknowledgement failed, using template", error=str(e))
            return ACKNOWLEDGE_FALLBACK

    async def finalize(
        self,
        acknowledgement: str,
        mood: MoodAnalysis,
        recommendations: Sequence[Recommendation],
        history: Sequence[Message]
    ) -> str:
        prompt = FINAL_PROMPT.format(
            mood=mood.primary_mood,
            confidence=mood.confidence,
            songs=format_song_list(recommendations),
            acknowledgement=acknowledgement
        )
        try:
            return await self.gemini_client.generate_chat_response(prompt, history)
        except LLMError as e:
            self.logger.warning("Final reply failed, using template", error=str(e))
            return self.templates.fallback_final(recommendations)
