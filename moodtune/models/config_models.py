"""
Configuration Models for MoodTune

Environment-driven system configuration, read once at process start.
"""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field


def _env_flag(env: Mapping[str, str], name: str) -> bool:
    """Flags are on only for the literal string 'true'."""
    return env.get(name, "").strip().lower() == "true"


class SystemConfig(BaseModel):
    """Configuration shared by the clients, agents and HTTP layer."""

    # API credentials
    gemini_api_key: Optional[str] = Field(default=None, description="Google Gemini API key")
    youtube_api_key: Optional[str] = Field(default=None, description="YouTube Data API v3 key")

    # Feature flags
    use_gemini: bool = Field(default=False, description="Generative mood detection and replies")
    use_youtube_api: bool = Field(default=False, description="Search YouTube for recommendations")

    # Gemini
    gemini_model: str = Field(default="gemini-2.0-flash", description="Gemini model name")
    gemini_calls_per_minute: int = Field(default=15, ge=1, description="Gemini rate limit")

    # YouTube
    youtube_calls_per_second: float = Field(default=5.0, gt=0, description="YouTube rate limit")
    youtube_max_results: int = Field(default=5, ge=1, le=50, description="Results per search")
    search_cache_dir: Optional[str] = Field(default=None, description="diskcache directory; unset disables caching")

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    log_dir: str = Field(default="logs", description="Directory for rotating log files")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "SystemConfig":
        """
        Build configuration from environment variables.

        Args:
            env: Mapping to read from (defaults to ``os.environ``)

        Returns:
            Populated SystemConfig
        """
        env = os.environ if env is None else env

        return cls(
            gemini_api_key=env.get("GEMINI_API_KEY") or None,
            youtube_api_key=env.get("YOUTUBE_API_KEY") or None,
            use_gemini=_env_flag(env, "USE_GEMINI"),
            use_youtube_api=_env_flag(env, "USE_YOUTUBE_API"),
            gemini_model=env.get("GEMINI_MODEL", "gemini-2.0-flash"),
            gemini_calls_per_minute=int(env.get("GEMINI_CALLS_PER_MINUTE", "15")),
            youtube_calls_per_second=float(env.get("YOUTUBE_CALLS_PER_SECOND", "5")),
            youtube_max_results=int(env.get("YOUTUBE_MAX_RESULTS", "5")),
            search_cache_dir=env.get("SEARCH_CACHE_DIR") or None,
            log_level=env.get("LOG_LEVEL", "INFO"),
            log_dir=env.get("LOG_DIR", "logs"),
        )
