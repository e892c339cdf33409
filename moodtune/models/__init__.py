"""
Data models for MoodTune.
"""

from .chat_models import (
    MOOD_VOCABULARY,
    NEUTRAL_MOOD,
    ChatResponse,
    ConversationStage,
    Message,
    MoodAnalysis,
    Recommendation,
    classify_stage,
    split_csv,
)
from .config_models import SystemConfig

__all__ = [
    "MOOD_VOCABULARY",
    "NEUTRAL_MOOD",
    "ChatResponse",
    "ConversationStage",
    "Message",
    "MoodAnalysis",
    "Recommendation",
    "SystemConfig",
    "classify_stage",
    "split_csv",
]
