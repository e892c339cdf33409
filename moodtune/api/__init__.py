"""
API Module

Outbound API clients (YouTube, Gemini) with shared HTTP handling and rate
limiting. The FastAPI app lives in ``moodtune.api.backend``.
"""

from .base_client import BaseAPIClient
from .client_factory import APIClientFactory
from .gemini_client import GeminiClient
from .rate_limiter import UnifiedRateLimiter
from .youtube_client import YouTubeClient, query_relaxations, relax_query

__all__ = [
    "APIClientFactory",
    "BaseAPIClient",
    "GeminiClient",
    "UnifiedRateLimiter",
    "YouTubeClient",
    "query_relaxations",
    "relax_query",
]
