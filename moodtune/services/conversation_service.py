"""
Conversation Service

Orchestrates one chat turn: classifies the conversation stage, runs the
mood analyzer and response composer concurrently, fetches recommendations
and assembles the ChatResponse.
"""

import asyncio
from typing import Any, Awaitable, List, Optional, Sequence, Tuple

import structlog

from ..agents.components.llm_utils import LLMUtils
from ..agents.mood import MoodAnalyzer, create_mood_analyzer
from ..agents.response import ResponseComposer, create_response_composer
from ..api.gemini_client import GeminiClient
from ..api.youtube_client import YouTubeClient
from ..errors import ConversationError
from ..models.chat_models import (
    ChatResponse,
    ConversationStage,
    Message,
    MoodAnalysis,
    Recommendation,
    classify_stage,
)
from ..models.config_models import SystemConfig
from .recommendation_source import RecommendationSource

logger = structlog.get_logger(__name__)


async def fork_join(*aws: Awaitable[Any]) -> Tuple[Any, ...]:
    """
    Run awaitables concurrently and wait for all of them to settle.

    Nothing is cancelled when one branch fails; the first exception (in
    argument order) is re-raised once every branch has finished.
    """
    results = await asyncio.gather(*aws, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return tuple(results)


class ConversationService:
    """
    Conversation orchestrator.

    Stateless between turns: the caller owns the transcript and passes it
    in with every message.
    """

    def __init__(
        self,
        mood_analyzer: MoodAnalyzer,
        response_composer: ResponseComposer,
        recommendation_source: RecommendationSource
    ):
        self.mood_analyzer = mood_analyzer
        self.response_composer = response_composer
        self.recommendation_source = recommendation_source
        self.logger = logger.bind(component="ConversationService")

    async def process(self, message: str, history: Sequence[Message] = ()) -> ChatResponse:
        """
        Process one user message.

        Args:
            message: The user's new message
            history: Transcript before this message (not modified)

        Returns:
            ChatResponse whose history is ``history`` plus this turn's user
            and assistant messages

        Raises:
            ConversationError: If the turn could not be completed
        """
        working = list(history) + [Message.user(message)]
        stage = classify_stage(len(working))

        self.logger.info("Processing message", stage=stage.value, history_length=len(working))

        try:
            if stage is ConversationStage.RECOMMENDING:
                reply, mood, recommendations = await self._recommendation_path(message, working)
            else:
                reply, mood, recommendations = await self._gathering_path(message, working)
        except ConversationError:
            raise
        except Exception as e:
            self.logger.error(
                "Conversation turn failed",
                stage=stage.value,
                error=str(e),
                error_type=type(e).__name__
            )
            raise ConversationError(f"Failed to process message: {e}", stage=stage.value) from e

        assistant_message = Message.assistant(reply)

        self.logger.info(
            "Turn completed",
            stage=stage.value,
            mood=mood.primary_mood,
            recommendations_count=len(recommendations)
        )

        return ChatResponse(
            message=assistant_message,
            mood=mood,
            recommendations=recommendations,
            history=[*working, assistant_message]
        )

    async def _gathering_path(
        self,
        message: str,
        working: List[Message]
    ) -> Tuple[str, MoodAnalysis, List[Recommendation]]:
        """Engage the user and pre-fetch recommendations for a preliminary mood."""
        reply, mood = await fork_join(
            self.response_composer.engage(working),
            self.mood_analyzer.detect(message, working[:-1])
        )

        recommendations = await self.recommendation_source.get_recommendations(mood)

        return reply, mood, recommendations

    async def _recommendation_path(
        self,
        message: str,
        working: List[Message]
    ) -> Tuple[str, MoodAnalysis, List[Recommendation]]:
        """Acknowledge while detecting mood and searching, then write the final reply."""

        async def mood_then_recommendations() -> Tuple[MoodAnalysis, List[Recommendation]]:
            mood = await self.mood_analyzer.detect(message, working[:-1])
            recommendations = await self.recommendation_source.get_recommendations(mood)
            return mood, recommendations

        acknowledgement, (mood, recommendations) = await fork_join(
            self.response_composer.acknowledge(working),
            mood_then_recommendations()
        )

        if not recommendations:
            raise ConversationError("No recommendations found", stage=ConversationStage.RECOMMENDING.value)

        reply = await self.response_composer.finalize(acknowledgement, mood, recommendations, working)
        return reply, mood, recommendations


def create_conversation_service(
    config: SystemConfig,
    youtube_client: Optional[YouTubeClient] = None,
    gemini_client: Optional[GeminiClient] = None
) -> ConversationService:
    """
    Wire the agents and recommendation source for ``config``.

    Strategies are chosen here, once, from the feature flags.
    """
    llm_utils = LLMUtils(gemini_client) if gemini_client is not None else None

    service = ConversationService(
        mood_analyzer=create_mood_analyzer(config, llm_utils),
        response_composer=create_response_composer(config, gemini_client),
        recommendation_source=RecommendationSource(
            youtube_client=youtube_client,
            max_results=config.youtube_max_results,
            use_search=config.use_youtube_api
        )
    )

    logger.info(
        "Conversation service created",
        use_gemini=config.use_gemini and gemini_client is not None,
        use_youtube_api=config.use_youtube_api and youtube_client is not None
    )
    return service
