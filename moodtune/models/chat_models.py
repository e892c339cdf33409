"""
Chat Models for MoodTune

Pydantic models for the conversation transcript, mood analysis and song
recommendations exchanged between the agents and the HTTP layer.

Field names are snake_case in Python and camelCase on the wire
(``primaryMood``, ``youtubeId``...), matching the front-end payloads.
"""

from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# Mood vocabulary scored by the generative analyzer
MOOD_VOCABULARY = ["happy", "sad", "energetic", "relaxed", "angry", "neutral"]

NEUTRAL_MOOD = "neutral"

# Upper bounds (inclusive) of transcript length per stage
INITIAL_STAGE_MAX_LENGTH = 1
GATHERING_STAGE_MAX_LENGTH = 5


class Message(BaseModel):
    """A single chat turn. Never mutated once appended to a transcript."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"] = Field(..., description="Who sent the message")
    content: str = Field(..., description="Message text")

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role="user", content=content)

    @classmethod
    def assistant(cls, content: str) -> "Message":
        return cls(role="assistant", content=content)


class MoodAnalysis(BaseModel):
    """Mood classification of a user turn plus music-preference hints."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    primary_mood: str = Field(NEUTRAL_MOOD, alias="primaryMood", description="Dominant mood")
    mood_scores: Dict[str, float] = Field(
        default_factory=dict,
        alias="moodScores",
        description="Per-mood score in [0, 1]"
    )
    confidence: float = Field(0.5, ge=0.0, le=1.0, description="Confidence in the analysis")
    mood_keywords: str = Field("", alias="moodKeywords", description="Comma-separated mood descriptors")
    suggested_genres: str = Field("", alias="suggestedGenres", description="Comma-separated genres")
    extracted_keywords: str = Field(
        "",
        alias="extractedKeywords",
        description="Comma-separated music keywords taken from the user's own words"
    )
    era: str = Field("", description="Music era if mentioned or implied, e.g. '80s'")
    reasoning: Optional[str] = Field(None, description="Model explanation, generative analyzer only")

    @classmethod
    def neutral(cls) -> "MoodAnalysis":
        return cls()

    @property
    def first_genre(self) -> Optional[str]:
        genres = split_csv(self.suggested_genres)
        return genres[0] if genres else None


class Recommendation(BaseModel):
    """A candidate song. ``youtube_id`` is the natural key."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., description="Video title")
    artist: str = Field(..., description="Artist, taken from the channel name")
    youtube_id: str = Field(..., alias="youtubeId", description="YouTube video id")
    mood: Optional[str] = Field(None, description="Mood the song was picked for")
    genre: Optional[str] = Field(None, description="Genre the song was picked for")


class ChatResponse(BaseModel):
    """Result of one orchestrated conversation turn."""

    model_config = ConfigDict(populate_by_name=True)

    message: Message = Field(..., description="The assistant reply produced this turn")
    mood: MoodAnalysis = Field(..., description="Mood detected this turn")
    recommendations: List[Recommendation] = Field(default_factory=list)
    history: List[Message] = Field(
        default_factory=list,
        description="Full transcript including this turn's user and assistant messages"
    )


class ConversationStage(str, Enum):
    """Where the conversation is, derived from transcript length."""
    INITIAL = "initial"
    GATHERING = "gathering"
    RECOMMENDING = "recommending"


def classify_stage(history_length: int) -> ConversationStage:
    """
    Classify the conversation stage from the working transcript length.

    The length includes the user message of the current turn:
    ``<= 1`` is initial, ``<= 5`` is gathering, anything longer is
    recommending.
    """
    if history_length <= INITIAL_STAGE_MAX_LENGTH:
        return ConversationStage.INITIAL
    if history_length <= GATHERING_STAGE_MAX_LENGTH:
        return ConversationStage.GATHERING
    return ConversationStage.RECOMMENDING


def split_csv(value: str) -> List[str]:
    """Split a comma-separated model field into trimmed, non-empty items."""
    return [item.strip() for item in (value or "").split(",") if item.strip()]
