"""
Tests for template and Gemini response composers.
"""

import pytest
from unittest.mock import AsyncMock, Mock

from moodtune.agents.response import (
    ComposeMode,
    GeminiResponseComposer,
    TemplateResponseComposer,
    create_response_composer,
)
from moodtune.agents.response.response_composer import (
    ACKNOWLEDGE_FALLBACK,
    ACKNOWLEDGE_TEMPLATE,
    FIRST_ENGAGE_TEMPLATE,
    FOLLOW_UP_ENGAGE_TEMPLATE,
)
from moodtune.errors import LLMError
from moodtune.models.chat_models import Message, MoodAnalysis, Recommendation
from moodtune.models.config_models import SystemConfig


@pytest.fixture
def recommendations():
    return [
        Recommendation(title="Walking on Sunshine", artist="Katrina & The Waves", youtube_id="iPUmE-tne5U"),
        Recommendation(title="Happy", artist="Pharrell Williams", youtube_id="ZbZSe6N_BXs"),
    ]


@pytest.fixture
def happy_mood():
    return MoodAnalysis(primary_mood="happy", confidence=0.8)


class TestTemplateResponseComposer:

    @pytest.fixture
    def composer(self):
        return TemplateResponseComposer()

    @pytest.mark.asyncio
    async def test_engage_first_and_follow_up(self, composer):
        assert await composer.engage([Message.user("hi")]) == FIRST_ENGAGE_TEMPLATE

        history = [Message.user("hi"), Message.assistant("hello"), Message.user("tired")]
        assert await composer.engage(history) == FOLLOW_UP_ENGAGE_TEMPLATE

    @pytest.mark.asyncio
    async def test_acknowledge(self, composer):
        assert await composer.acknowledge([Message.user("hi")]) == ACKNOWLEDGE_TEMPLATE

    @pytest.mark.asyncio
    async def test_final_names_top_recommendation(self, composer, happy_mood, recommendations):
        reply = await composer.finalize(ACKNOWLEDGE_TEMPLATE, happy_mood, recommendations, [])

        assert "Walking on Sunshine" in reply
        assert "Katrina & The Waves" in reply
        assert "happy" in reply
        assert "Pharrell Williams" not in reply

    @pytest.mark.asyncio
    async def test_compose_dispatch(self, composer, happy_mood, recommendations):
        history = [Message.user("hi")]

        assert await composer.compose(ComposeMode.ACKNOWLEDGE, history) == ACKNOWLEDGE_TEMPLATE
        final = await composer.compose(
            ComposeMode.FINAL, history, mood=happy_mood, recommendations=recommendations
        )
        assert "Walking on Sunshine" in final

    @pytest.mark.asyncio
    async def test_final_requires_recommendations(self, composer, happy_mood):
        with pytest.raises(ValueError):
            await composer.compose(ComposeMode.FINAL, [], mood=happy_mood, recommendations=[])


class TestGeminiResponseComposer:

    @pytest.fixture
    def mock_gemini(self):
        client = Mock()
        client.generate_chat_response = AsyncMock(return_value="Tell me more about your day!")
        return client

    @pytest.fixture
    def composer(self, mock_gemini):
        return GeminiResponseComposer(mock_gemini)

    @pytest.mark.asyncio
    async def test_engage_uses_gemini(self, composer, mock_gemini):
        history = [Message.user("hi")]

        reply = await composer.engage(history)

        assert reply == "Tell me more about your day!"
        prompt, sent_history = mock_gemini.generate_chat_response.call_args.args
        assert "your first interaction" in prompt
        assert sent_history == history

    @pytest.mark.asyncio
    async def test_final_prompt_lists_songs(self, composer, mock_gemini, happy_mood, recommendations):
        await composer.finalize("On it!", happy_mood, recommendations, [])

        prompt = mock_gemini.generate_chat_response.call_args.args[0]
        assert '1. "Walking on Sunshine" by Katrina & The Waves' in prompt
        assert '2. "Happy" by Pharrell Williams' in prompt
        assert 'You previously responded with: "On it!"' in prompt
        assert "happy (confidence: 0.8)" in prompt

    @pytest.mark.asyncio
    async def test_failures_fall_back_to_templates(self, composer, mock_gemini, happy_mood, recommendations):
        mock_gemini.generate_chat_response.side_effect = LLMError("quota exceeded")

        assert await composer.engage([Message.user("hi")]) == FIRST_ENGAGE_TEMPLATE
        assert await composer.acknowledge([Message.user("hi")]) == ACKNOWLEDGE_FALLBACK

        final = await composer.finalize("", happy_mood, recommendations, [])
        assert final == 'I think you might enjoy "Walking on Sunshine" by Katrina & The Waves based on your current mood.'


def test_factory_selection():
    gemini = Mock()

    assert isinstance(create_response_composer(SystemConfig(use_gemini=True), gemini), GeminiResponseComposer)
    assert isinstance(create_response_composer(SystemConfig(use_gemini=True), None), TemplateResponseComposer)
    assert isinstance(create_response_composer(SystemConfig(use_gemini=False), gemini), TemplateResponseComposer)
