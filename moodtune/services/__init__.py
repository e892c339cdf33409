"""
Services Module

Conversation orchestration, recommendation lookup and search caching.
"""

from .cache_manager import CacheManager
from .conversation_service import ConversationService, create_conversation_service, fork_join
from .recommendation_source import RecommendationSource, build_search_query

__all__ = [
    "CacheManager",
    "ConversationService",
    "RecommendationSource",
    "build_search_query",
    "create_conversation_service",
    "fork_join",
]
