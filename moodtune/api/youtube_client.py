"""
YouTube Data API Client

Searches YouTube's music category for candidate songs. Failed searches are
retried with progressively relaxed queries before giving up.
"""

import html
import re
from typing import Dict, List, Optional, Any, TYPE_CHECKING

import structlog

from ..errors import APIClientError, NoResultsError, YouTubeSearchError
from ..models.chat_models import Recommendation
from .base_client import BaseAPIClient
from .rate_limiter import UnifiedRateLimiter

if TYPE_CHECKING:
    from ..services.cache_manager import CacheManager

logger = structlog.get_logger(__name__)

MUSIC_CATEGORY_ID = "10"

# Words stripped (first occurrence, case-insensitive) when relaxing a query
QUALIFIER_PATTERNS = [
    re.compile(r"official", re.IGNORECASE),
    re.compile(r"explicit", re.IGNORECASE),
]
RELAXED_QUERY_MAX_WORDS = 5


def relax_query(query: str) -> str:
    """
    Make a search query more generic.

    Removes the qualifier words and keeps only the first five words.
    """
    relaxed = query
    for pattern in QUALIFIER_PATTERNS:
        relaxed = pattern.sub("", relaxed, count=1)
    return " ".join(relaxed.split()[:RELAXED_QUERY_MAX_WORDS])


def query_relaxations(query: str, max_relaxations: int) -> List[str]:
    """
    List the queries a search will try, original first.

    Stops early once relaxing no longer changes the query.
    """
    candidates = [query]
    current = query
    for _ in range(max_relaxations):
        relaxed = relax_query(current)
        if relaxed == " ".join(current.split()):
            break
        candidates.append(relaxed)
        current = relaxed
    return candidates


def parse_search_items(items: Any, query: str) -> List[Recommendation]:
    """
    Turn raw search items into recommendations.

    Items without a video id, title or channel title are dropped.

    Raises:
        YouTubeSearchError: If ``items`` is not a list
        NoResultsError: If no item survives filtering
    """
    if not isinstance(items, list):
        raise YouTubeSearchError("Invalid YouTube API response", query=query)

    recommendations = []
    for item in items:
        if not isinstance(item, dict):
            continue
        video_id = (item.get("id") or {}).get("videoId")
        snippet = item.get("snippet") or {}
        title = snippet.get("title")
        channel = snippet.get("channelTitle")
        if not (video_id and title and channel):
            continue

        recommendations.append(Recommendation(
            title=html.unescape(title),
            artist=html.unescape(channel),
            youtube_id=video_id
        ))

    if not recommendations:
        raise NoResultsError("No valid videos found", query=query)

    return recommendations


class YouTubeClient(BaseAPIClient):
    """
    YouTube Data API v3 client.

    Searches are restricted to the Music category with moderate safe-search.
    Inherits from BaseAPIClient for consistent HTTP handling.
    """

    BASE_URL = "https://www.googleapis.com/youtube/v3"

    def __init__(
        self,
        api_key: Optional[str],
        rate_limiter: Optional[UnifiedRateLimiter] = None,
        cache_manager: Optional["CacheManager"] = None,
        max_relaxations: int = 2,
        timeout: int = 10
    ):
        """
        Initialize YouTube client.

        Args:
            api_key: YouTube Data API key
            rate_limiter: Rate limiter instance (defaults to YouTube limits)
            cache_manager: Optional cache for search results
            max_relaxations: Relaxed retries after a failed search
            timeout: Request timeout in seconds
        """
        if rate_limiter is None:
            rate_limiter = UnifiedRateLimiter.for_youtube()

        super().__init__(
            base_url=self.BASE_URL,
            rate_limiter=rate_limiter,
            timeout=timeout,
            service_name="YouTube"
        )

        self.api_key = api_key
        self.cache_manager = cache_manager
        self.max_relaxations = max_relaxations

        self.logger.info(
            "YouTube client initialized",
            has_api_key=bool(api_key),
            cache_enabled=cache_manager is not None
        )

    def _default_params(self) -> Dict[str, Any]:
        return {"key": self.api_key}

    def _extract_api_error(self, data: Dict[str, Any]) -> Optional[str]:
        error = data.get("error") if isinstance(data, dict) else None
        if error:
            if isinstance(error, dict):
                return error.get("message", f"Error {error.get('code')}")
            return str(error)
        return None

    async def search_videos(
        self,
        query: str,
        max_results: int = 5,
        order: Optional[str] = None,
        published_after: Optional[str] = None,
        relax: bool = True
    ) -> List[Recommendation]:
        """
        Search YouTube music videos, relaxing the query on failure.

        The first attempt uses the given ordering and date filter; relaxed
        retries use the API defaults.

        Args:
            query: Free-text search query
            max_results: Maximum videos to request
            order: Optional ordering hint (e.g. 'relevance', 'viewCount')
            published_after: Optional RFC 3339 lower bound on publish date
            relax: Whether failed searches are retried with relaxed queries

        Returns:
            Non-empty list of recommendations

        Raises:
            YouTubeSearchError: When every attempt failed
        """
        if not self.api_key:
            raise YouTubeSearchError("YouTube API key is missing", query=query)

        candidates = query_relaxations(query, self.max_relaxations) if relax else [query]
        last_error: Optional[YouTubeSearchError] = None

        for attempt, candidate in enumerate(candidates):
            options = {"order": order, "published_after": published_after} if attempt == 0 else {}
            try:
                return await self._search_once(candidate, max_results, **options)
            except YouTubeSearchError as e:
                last_error = e
                self.logger.warning(
                    "YouTube search attempt failed",
                    query=candidate,
                    attempt=attempt + 1,
                    max_attempts=len(candidates),
                    error=str(e)
                )

        if relax and len(candidates) == 1:
            self.logger.warning("Relaxed query is the same as the original, not retrying", query=query)

        raise last_error

    async def _search_once(
        self,
        query: str,
        max_results: int,
        order: Optional[str] = None,
        published_after: Optional[str] = None
    ) -> List[Recommendation]:
        """Single search request, no relaxation."""
        cache_options = {
            "max_results": max_results,
            "order": order,
            "published_after": published_after
        }
        if self.cache_manager:
            cached = self.cache_manager.get_search_results(query, **cache_options)
            if cached:
                return [Recommendation.model_validate(item) for item in cached]

        params = {
            "part": "snippet",
            "maxResults": max_results,
            "q": query,
            "type": "video",
            "videoCategoryId": MUSIC_CATEGORY_ID,
            "safeSearch": "moderate",
        }
        if order:
            params["order"] = order
        if published_after:
            params["publishedAfter"] = published_after

        self.logger.info("Searching YouTube", query=query, options=cache_options)

        try:
            data = await self._make_request("search", params=params, retries=0)
        except YouTubeSearchError:
            raise
        except APIClientError as e:
            raise YouTubeSearchError(str(e), query=query, status=e.status) from e

        recommendations = parse_search_items(data.get("items"), query)

        if self.cache_manager:
            self.cache_manager.cache_search_results(
                query,
                [rec.model_dump(by_alias=True) for rec in recommendations],
                **cache_options
            )

        self.logger.info("YouTube search completed", query=query, results_count=len(recommendations))
        return recommendations

    async def search_specific_song(
        self,
        title: str,
        artist: Optional[str] = None
    ) -> Optional[Recommendation]:
        """
        Find one video for a known song.

        Tries query variations from most to least specific and returns the
        first hit, or None when none of them finds anything.
        """
        variations = [
            [title, artist, "official video"],
            [title, "official video"],
            [title, artist, "music video"],
            [title, "music video"],
            [title, artist],
            [title],
            [title, "full song"],
            [title, "audio"],
        ]
        queries = []
        for parts in variations:
            query = " ".join(part.strip() for part in parts if part and part.strip())
            if query and query not in queries:
                queries.append(query)

        self.logger.info("Searching for specific song", title=title, artist=artist or "any")

        for query in queries:
            try:
                results = await self.search_videos(query, max_results=1, order="relevance", relax=False)
            except YouTubeSearchError as e:
                self.logger.debug("Song query variation failed", query=query, error=str(e))
                continue
            if results:
                return results[0]

        self.logger.warning("Specific song not found", title=title, artist=artist or "any")
        return None

    async def get_video_details(self, video_id: str) -> Dict[str, Any]:
        """
        Fetch snippet, content details and statistics for one video.

        Raises:
            YouTubeSearchError: If the video does not exist or the request fails
        """
        if not self.api_key:
            raise YouTubeSearchError("YouTube API key is missing")

        if self.cache_manager:
            cached = self.cache_manager.get_video_details(video_id)
            if cached:
                return cached

        try:
            data = await self._make_request(
                "videos",
                params={"part": "snippet,contentDetails,statistics", "id": video_id},
                retries=2
            )
        except APIClientError as e:
            raise YouTubeSearchError(str(e), status=e.status) from e

        items = data.get("items") or []
        if not items:
            raise YouTubeSearchError(f"Video not found: {video_id}")

        details = items[0]
        if self.cache_manager:
            self.cache_manager.cache_video_details(video_id, details)
        return details
