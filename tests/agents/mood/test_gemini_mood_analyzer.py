"""
Tests for the Gemini mood analyzer: field mapping and keyword fallback.
"""

import pytest
from unittest.mock import AsyncMock, Mock

from moodtune.agents.mood.gemini_mood_analyzer import GeminiMoodAnalyzer, format_conversation
from moodtune.errors import StructuredResponseError
from moodtune.models.chat_models import Message


@pytest.fixture
def mock_llm_utils():
    utils = Mock()
    utils.generate_structured_response = AsyncMock()
    return utils


@pytest.fixture
def analyzer(mock_llm_utils):
    return GeminiMoodAnalyzer(mock_llm_utils)


@pytest.mark.asyncio
async def test_maps_structured_response(analyzer, mock_llm_utils):
    mock_llm_utils.generate_structured_response.return_value = {
        "primaryMood": "Energetic",
        "moodScores": {"happy": 0.4, "energetic": 0.9, "sad": "n/a"},
        "confidence": 0.85,
        "moodKeywords": "upbeat, pumped",
        "suggestedGenres": "Rock, Electronic",
        "extractedKeywords": "workout playlist",
        "era": "90s",
        "reasoning": "Mentions the gym",
    }

    mood = await analyzer.detect("Need something for the gym", [Message.user("hey")])

    assert mood.primary_mood == "energetic"
    assert mood.mood_scores == {"happy": 0.4, "energetic": 0.9}
    assert mood.confidence == 0.85
    assert mood.first_genre == "Rock"
    assert mood.extracted_keywords == "workout playlist"
    assert mood.era == "90s"
    assert mood.reasoning == "Mentions the gym"


@pytest.mark.asyncio
async def test_missing_fields_default(analyzer, mock_llm_utils):
    mock_llm_utils.generate_structured_response.return_value = {}

    mood = await analyzer.detect("hello", [])

    assert mood.primary_mood == "neutral"
    assert mood.confidence == 0.5
    assert mood.mood_scores == {}
    assert mood.suggested_genres == ""
    assert mood.reasoning is None


@pytest.mark.asyncio
async def test_out_of_range_values_clamped(analyzer, mock_llm_utils):
    mock_llm_utils.generate_structured_response.return_value = {
        "primaryMood": "sad",
        "confidence": 3,
        "moodScores": {"sad": -1},
        "suggestedGenres": ["Blues", "Soul"],
    }

    mood = await analyzer.detect("rainy day", [])

    assert mood.confidence == 1.0
    assert mood.mood_scores == {"sad": 0.0}
    assert mood.suggested_genres == "Blues, Soul"


@pytest.mark.asyncio
async def test_falls_back_to_keywords_on_error(analyzer, mock_llm_utils):
    mock_llm_utils.generate_structured_response.side_effect = StructuredResponseError("no JSON")

    mood = await analyzer.detect("I am so happy and excited today", [])

    assert mood.primary_mood == "happy"
    assert mood.confidence == 0.7
    assert mood.reasoning is None


@pytest.mark.asyncio
async def test_prompt_contains_prior_turns(analyzer, mock_llm_utils):
    mock_llm_utils.generate_structured_response.return_value = {"primaryMood": "relaxed"}
    history = [Message.user("long week"), Message.assistant("Sorry to hear that")]

    await analyzer.detect("just want to unwind", history)

    kwargs = mock_llm_utils.generate_structured_response.call_args.kwargs
    assert "user: long week" in kwargs["task"]
    assert "assistant: Sorry to hear that" in kwargs["task"]
    assert "just want to unwind" in kwargs["task"]
    assert set(kwargs["output_format"]["moodScores"]) == {
        "happy", "sad", "energetic", "relaxed", "angry", "neutral"
    }


def test_format_conversation():
    history = [Message.user("a"), Message.assistant("b")]

    assert format_conversation(history) == "user: a\nassistant: b"
