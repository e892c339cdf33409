"""
Tests for the chat data models and conversation stage classification.
"""

import pytest
from pydantic import ValidationError

from moodtune.models.chat_models import (
    ChatResponse,
    ConversationStage,
    Message,
    MoodAnalysis,
    Recommendation,
    classify_stage,
    split_csv,
)


class TestClassifyStage:
    """Stage boundaries on the working transcript length."""

    @pytest.mark.parametrize("length,expected", [
        (0, ConversationStage.INITIAL),
        (1, ConversationStage.INITIAL),
        (2, ConversationStage.GATHERING),
        (5, ConversationStage.GATHERING),
        (6, ConversationStage.RECOMMENDING),
        (11, ConversationStage.RECOMMENDING),
    ])
    def test_stage_boundaries(self, length, expected):
        assert classify_stage(length) is expected


class TestMessage:

    def test_constructors_set_role(self):
        assert Message.user("hi").role == "user"
        assert Message.assistant("hello").role == "assistant"

    def test_message_is_frozen(self):
        message = Message.user("hi")
        with pytest.raises(ValidationError):
            message.content = "changed"

    def test_rejects_unknown_role(self):
        with pytest.raises(ValidationError):
            Message(role="system", content="hi")


class TestMoodAnalysis:

    def test_neutral_defaults(self):
        mood = MoodAnalysis.neutral()

        assert mood.primary_mood == "neutral"
        assert mood.confidence == 0.5
        assert mood.mood_scores == {}
        assert mood.suggested_genres == ""
        assert mood.reasoning is None

    def test_accepts_camel_case_payload(self):
        mood = MoodAnalysis.model_validate({
            "primaryMood": "happy",
            "moodScores": {"happy": 0.9},
            "confidence": 0.8,
            "suggestedGenres": "Pop, Dance",
            "extractedKeywords": "summer",
            "era": "80s",
        })

        assert mood.primary_mood == "happy"
        assert mood.mood_scores == {"happy": 0.9}
        assert mood.first_genre == "Pop"

    def test_serializes_with_aliases(self):
        data = MoodAnalysis(primary_mood="sad", confidence=0.6).model_dump(by_alias=True)

        assert data["primaryMood"] == "sad"
        assert "moodScores" in data
        assert "suggestedGenres" in data

    def test_confidence_bounds(self):
        with pytest.raises(ValidationError):
            MoodAnalysis(confidence=1.5)

    def test_first_genre_empty(self):
        assert MoodAnalysis(suggested_genres=" , ").first_genre is None


def test_recommendation_alias_round_trip():
    rec = Recommendation.model_validate({"title": "Song", "artist": "Band", "youtubeId": "abc123"})

    assert rec.youtube_id == "abc123"
    assert rec.model_dump(by_alias=True)["youtubeId"] == "abc123"


def test_chat_response_payload_shape():
    response = ChatResponse(
        message=Message.assistant("Hello"),
        mood=MoodAnalysis.neutral(),
        recommendations=[Recommendation(title="Song", artist="Band", youtube_id="abc123")],
        history=[Message.user("hi"), Message.assistant("Hello")]
    )

    data = response.model_dump(by_alias=True)

    assert data["message"] == {"role": "assistant", "content": "Hello"}
    assert data["mood"]["primaryMood"] == "neutral"
    assert data["recommendations"][0]["youtubeId"] == "abc123"
    assert len(data["history"]) == 2


def test_split_csv():
    assert split_csv(" Pop,  Rock ,,Jazz ") == ["Pop", "Rock", "Jazz"]
    assert split_csv("") == []
