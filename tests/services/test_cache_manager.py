"""
Tests for the diskcache-backed search cache.
"""

import pytest

from moodtune.services.cache_manager import CacheManager


@pytest.fixture
def cache_manager(tmp_path):
    manager = CacheManager(cache_dir=str(tmp_path / "cache"))
    yield manager
    manager.close()


def test_search_results_keyed_by_options(cache_manager):
    results = [{"title": "Song", "artist": "Band", "youtubeId": "abc"}]

    assert cache_manager.cache_search_results("happy music", results, max_results=5, order="relevance")

    assert cache_manager.get_search_results("happy music", max_results=5, order="relevance") == results
    assert cache_manager.get_search_results("happy music", max_results=5, order=None) is None
    assert cache_manager.get_search_results("sad music", max_results=5, order="relevance") is None


def test_video_details(cache_manager):
    cache_manager.cache_video_details("abc", {"id": "abc"})

    assert cache_manager.get_video_details("abc") == {"id": "abc"}


def test_invalid_cache_type(cache_manager):
    assert cache_manager.set("playlists", "k", 1) is False
    assert cache_manager.get("playlists", "k", default="miss") == "miss"


def test_clear_and_stats(cache_manager):
    cache_manager.cache_video_details("abc", {"id": "abc"})
    assert cache_manager.get_stats()["videos"]["size"] == 1

    assert cache_manager.clear("videos") is True
    assert cache_manager.get_stats()["videos"]["size"] == 0
