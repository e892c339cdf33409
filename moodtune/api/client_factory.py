"""
API Client Factory

Creates the YouTube and Gemini clients from SystemConfig, sharing one rate
limiter per service and rate.
"""

from typing import Any, Dict, Optional, TYPE_CHECKING

import structlog

from ..models.config_models import SystemConfig
from .gemini_client import GeminiClient
from .rate_limiter import UnifiedRateLimiter
from .youtube_client import YouTubeClient

if TYPE_CHECKING:
    from ..services.cache_manager import CacheManager

logger = structlog.get_logger(__name__)


class APIClientFactory:
    """
    Factory for creating configured API clients.

    Clients of the same service and rate share a rate limiter.
    """

    def __init__(self, system_config: Optional[SystemConfig] = None):
        """
        Initialize client factory.

        Args:
            system_config: System configuration (defaults to the environment)
        """
        self.system_config = system_config or SystemConfig.from_env()
        self.logger = logger.bind(service="APIClientFactory")

        # Shared across clients of the same type
        self._rate_limiters: Dict[str, UnifiedRateLimiter] = {}

        self.logger.info("API Client Factory initialized")

    def create_youtube_client(
        self,
        api_key: Optional[str] = None,
        cache_manager: Optional["CacheManager"] = None
    ) -> YouTubeClient:
        """
        Create configured YouTube client.

        Raises:
            ValueError: If no API key is configured
        """
        api_key = api_key or self.system_config.youtube_api_key
        if not api_key:
            raise ValueError("YouTube API key is required")

        rate = self.system_config.youtube_calls_per_second
        client = YouTubeClient(
            api_key=api_key,
            rate_limiter=self._get_rate_limiter(f"youtube_{rate}", lambda: UnifiedRateLimiter.for_youtube(rate)),
            cache_manager=cache_manager
        )

        self.logger.info("YouTube client created", rate_limit=rate, cache_enabled=cache_manager is not None)
        return client

    def create_gemini_client(self, api_key: Optional[str] = None) -> GeminiClient:
        """
        Create configured Gemini client.

        Raises:
            ValueError: If no API key is configured
        """
        api_key = api_key or self.system_config.gemini_api_key
        if not api_key:
            raise ValueError("Gemini API key is required")

        client = GeminiClient(
            api_key=api_key,
            model_name=self.system_config.gemini_model,
            rate_limiter=self.create_gemini_rate_limiter()
        )

        self.logger.info("Gemini client created", model=self.system_config.gemini_model)
        return client

    def create_gemini_rate_limiter(self, calls_per_minute: Optional[int] = None) -> UnifiedRateLimiter:
        calls_per_minute = calls_per_minute or self.system_config.gemini_calls_per_minute
        return self._get_rate_limiter(
            f"gemini_{calls_per_minute}",
            lambda: UnifiedRateLimiter.for_gemini(calls_per_minute)
        )

    def _get_rate_limiter(self, key: str, build) -> UnifiedRateLimiter:
        if key not in self._rate_limiters:
            self._rate_limiters[key] = build()
        return self._rate_limiters[key]

    def get_rate_limiter_stats(self) -> Dict[str, Dict[str, Any]]:
        """Current usage of every rate limiter created so far."""
        return {key: limiter.get_current_usage() for key, limiter in self._rate_limiters.items()}
