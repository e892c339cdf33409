"""
Tests for SystemConfig environment loading.
"""

from moodtune.models.config_models import SystemConfig


def test_defaults_from_empty_environment():
    config = SystemConfig.from_env({})

    assert config.use_gemini is False
    assert config.use_youtube_api is False
    assert config.gemini_api_key is None
    assert config.gemini_model == "gemini-2.0-flash"
    assert config.gemini_calls_per_minute == 15
    assert config.youtube_calls_per_second == 5.0
    assert config.youtube_max_results == 5
    assert config.search_cache_dir is None
    assert config.log_level == "INFO"


def test_flags_only_accept_literal_true():
    assert SystemConfig.from_env({"USE_GEMINI": "TRUE"}).use_gemini is True
    assert SystemConfig.from_env({"USE_GEMINI": "1"}).use_gemini is False
    assert SystemConfig.from_env({"USE_YOUTUBE_API": "yes"}).use_youtube_api is False
    assert SystemConfig.from_env({"USE_YOUTUBE_API": "true"}).use_youtube_api is True


def test_reads_keys_and_limits():
    config = SystemConfig.from_env({
        "GEMINI_API_KEY": "g-key",
        "YOUTUBE_API_KEY": "y-key",
        "GEMINI_MODEL": "gemini-1.5-pro",
        "GEMINI_CALLS_PER_MINUTE": "30",
        "YOUTUBE_MAX_RESULTS": "10",
        "SEARCH_CACHE_DIR": "/tmp/moodtune-cache",
    })

    assert config.gemini_api_key == "g-key"
    assert config.youtube_api_key == "y-key"
    assert config.gemini_model == "gemini-1.5-pro"
    assert config.gemini_calls_per_minute == 30
    assert config.youtube_max_results == 10
    assert config.search_cache_dir == "/tmp/moodtune-cache"


def test_empty_keys_are_none():
    config = SystemConfig.from_env({"GEMINI_API_KEY": "", "YOUTUBE_API_KEY": ""})

    assert config.gemini_api_key is None
    assert config.youtube_api_key is None
