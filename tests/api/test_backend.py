"""
Tests for FastAPI backend endpoints.

The conversation service and YouTube client are mocked to isolate
request handling and response formatting.
"""

import pytest
from unittest.mock import AsyncMock, Mock, patch
from fastapi.testclient import TestClient

from moodtune.api.backend import app
from moodtune.errors import ConversationError, NoResultsError
from moodtune.models.chat_models import ChatResponse, Message, MoodAnalysis, Recommendation


@pytest.fixture
def client():
    """Test client without lifespan; services are patched per test."""
    return TestClient(app)


@pytest.fixture
def sample_recommendation():
    return Recommendation(title="Lovely Day", artist="Bill Withers", youtube_id="bEeaS6fuUoA", mood="happy")


@pytest.fixture
def mock_conversation_service(sample_recommendation):
    service = Mock()
    service.process = AsyncMock(return_value=ChatResponse(
        message=Message.assistant("How are you feeling today?"),
        mood=MoodAnalysis(primary_mood="happy", confidence=0.7),
        recommendations=[sample_recommendation],
        history=[Message.user("hi"), Message.assistant("How are you feeling today?")]
    ))
    return service


@pytest.fixture
def mock_youtube_client(sample_recommendation):
    youtube = Mock()
    youtube.search_videos = AsyncMock(return_value=[sample_recommendation])
    youtube.search_specific_song = AsyncMock(return_value=sample_recommendation)
    return youtube


class TestHealth:

    def test_health_check(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["components"]["conversation_service"] == "inactive"


class TestChatEndpoint:

    def test_chat_success(self, client, mock_conversation_service):
        with patch("moodtune.api.backend.conversation_service", mock_conversation_service):
            response = client.post("/chat", json={"message": "hi", "history": []})

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == {"role": "assistant", "content": "How are you feeling today?"}
        assert data["mood"]["primaryMood"] == "happy"
        assert data["recommendations"][0]["youtubeId"] == "bEeaS6fuUoA"
        assert len(data["history"]) == 2
        mock_conversation_service.process.assert_awaited_once_with("hi", [])
        assert "X-Request-ID" in response.headers

    def test_chat_passes_history(self, client, mock_conversation_service):
        history = [
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "hello"},
        ]
        with patch("moodtune.api.backend.conversation_service", mock_conversation_service):
            client.post("/chat", json={"message": "feeling down", "history": history})

        message, sent_history = mock_conversation_service.process.await_args.args
        assert message == "feeling down"
        assert sent_history == [Message.user("hi"), Message.assistant("hello")]

    def test_chat_requires_message(self, client, mock_conversation_service):
        with patch("moodtune.api.backend.conversation_service", mock_conversation_service):
            response = client.post("/chat", json={"history": []})

        assert response.status_code == 400
        assert response.json()["error"] == "Message is required"
        mock_conversation_service.process.assert_not_awaited()

    def test_chat_failure(self, client, mock_conversation_service):
        mock_conversation_service.process.side_effect = ConversationError("search failed", stage="recommending")

        with patch("moodtune.api.backend.conversation_service", mock_conversation_service):
            response = client.post("/chat", json={"message": "play something"})

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to process message"

    def test_chat_service_unavailable(self, client):
        with patch("moodtune.api.backend.conversation_service", None):
            response = client.post("/chat", json={"message": "hi"})

        assert response.status_code == 503


class TestSearchEndpoints:

    def test_youtube_search(self, client, mock_youtube_client):
        with patch("moodtune.api.backend.youtube_client", mock_youtube_client):
            response = client.post("/search/youtube", json={"query": "chill beats", "maxResults": 3})

        assert response.status_code == 200
        assert response.json()["results"][0]["title"] == "Lovely Day"
        mock_youtube_client.search_videos.assert_awaited_once_with("chill beats", max_results=3)

    def test_youtube_search_default_max_results(self, client, mock_youtube_client):
        with patch("moodtune.api.backend.youtube_client", mock_youtube_client):
            client.post("/search/youtube", json={"query": "chill beats"})

        assert mock_youtube_client.search_videos.await_args.kwargs["max_results"] == 5

    def test_youtube_search_requires_query(self, client, mock_youtube_client):
        with patch("moodtune.api.backend.youtube_client", mock_youtube_client):
            response = client.post("/search/youtube", json={})

        assert response.status_code == 400

    def test_youtube_search_failure(self, client, mock_youtube_client):
        mock_youtube_client.search_videos.side_effect = NoResultsError("No valid videos found", query="x")

        with patch("moodtune.api.backend.youtube_client", mock_youtube_client):
            response = client.post("/search/youtube", json={"query": "x"})

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to search YouTube"

    def test_youtube_search_not_configured(self, client):
        with patch("moodtune.api.backend.youtube_client", None):
            response = client.post("/search/youtube", json={"query": "x"})

        assert response.status_code == 503

    def test_song_search(self, client, mock_youtube_client):
        with patch("moodtune.api.backend.youtube_client", mock_youtube_client):
            response = client.post("/search/song", json={"title": "Lovely Day", "artist": "Bill Withers"})

        assert response.status_code == 200
        assert response.json()["result"]["youtubeId"] == "bEeaS6fuUoA"
        mock_youtube_client.search_specific_song.assert_awaited_once_with("Lovely Day", "Bill Withers")

    def test_song_not_found(self, client, mock_youtube_client):
        mock_youtube_client.search_specific_song.return_value = None

        with patch("moodtune.api.backend.youtube_client", mock_youtube_client):
            response = client.post("/search/song", json={"title": "Nope"})

        assert response.status_code == 404

    def test_song_requires_title(self, client, mock_youtube_client):
        with patch("moodtune.api.backend.youtube_client", mock_youtube_client):
            response = client.post("/search/song", json={"artist": "Someone"})

        assert response.status_code == 400
