"""
Recommendation Source

Turns a mood analysis into an ordered list of candidate songs, either by
searching YouTube or from a small curated catalogue when search is disabled.
"""

from typing import Dict, List, Optional

import structlog

from ..api.youtube_client import YouTubeClient
from ..errors import YouTubeSearchError
from ..models.chat_models import MoodAnalysis, NEUTRAL_MOOD, Recommendation, split_csv

logger = structlog.get_logger(__name__)

SEARCH_SUFFIX = "music"
FIRST_SEARCH_ORDER = "relevance"

# Curated tracks per mood, used when YouTube search is turned off
CURATED_TRACKS: Dict[str, List[Dict[str, str]]] = {
    "happy": [
        {"title": "Happy", "artist": "Pharrell Williams", "youtube_id": "ZbZSe6N_BXs"},
        {"title": "Walking on Sunshine", "artist": "Katrina & The Waves", "youtube_id": "iPUmE-tne5U"},
        {"title": "Good as Hell", "artist": "Lizzo", "youtube_id": "SmbmeOgWsqE"},
    ],
    "sad": [
        {"title": "Someone Like You", "artist": "Adele", "youtube_id": "hLQl3WQQoQ0"},
        {"title": "Fix You", "artist": "Coldplay", "youtube_id": "k4V3Mo61fJM"},
        {"title": "Hurt", "artist": "Johnny Cash", "youtube_id": "8AHCfZTRGiI"},
    ],
    "energetic": [
        {"title": "Eye of the Tiger", "artist": "Survivor", "youtube_id": "btPJPFnesV4"},
        {"title": "Don't Stop Me Now", "artist": "Queen", "youtube_id": "HgzGwKwLmgM"},
        {"title": "Titanium", "artist": "David Guetta ft. Sia", "youtube_id": "JRfuAukYTKg"},
    ],
    "relaxed": [
        {"title": "Weightless", "artist": "Marconi Union", "youtube_id": "UfcAVejslrU"},
        {"title": "Banana Pancakes", "artist": "Jack Johnson", "youtube_id": "OkyrIRyrRdY"},
        {"title": "Clair de Lune", "artist": "Claude Debussy", "youtube_id": "CvFH_6DNRCY"},
    ],
    "angry": [
        {"title": "Killing in the Name", "artist": "Rage Against the Machine", "youtube_id": "bWXazVhlyxQ"},
        {"title": "Break Stuff", "artist": "Limp Bizkit", "youtube_id": "ZpUYjpKg9KY"},
        {"title": "Chop Suey!", "artist": "System of a Down", "youtube_id": "CSvFpBOe8eY"},
    ],
    NEUTRAL_MOOD: [
        {"title": "Bohemian Rhapsody", "artist": "Queen", "youtube_id": "fJ9rUzIMcZQ"},
        {"title": "Billie Jean", "artist": "Michael Jackson", "youtube_id": "Zi_XLOBDo_Y"},
        {"title": "Mr. Brightside", "artist": "The Killers", "youtube_id": "gGdGFtwCNBE"},
    ],
}


def build_search_query(mood: MoodAnalysis) -> str:
    """
    Compose a YouTube search query from a mood analysis.

    Uses the user's own music keywords, the primary mood (unless neutral),
    the first suggested genre and the era, followed by ``music``.
    """
    parts = list(split_csv(mood.extracted_keywords))

    if mood.primary_mood and mood.primary_mood != NEUTRAL_MOOD:
        parts.append(mood.primary_mood)
    if mood.first_genre:
        parts.append(mood.first_genre)
    if mood.era:
        parts.append(mood.era)

    parts.append(SEARCH_SUFFIX)
    return " ".join(parts)


class RecommendationSource:
    """
    Produces recommendations for a detected mood.

    Search failures (after the client's relaxation budget) propagate as
    YouTubeSearchError; the orchestrator decides what to do with them.
    """

    def __init__(
        self,
        youtube_client: Optional[YouTubeClient] = None,
        max_results: int = 5,
        use_search: bool = True
    ):
        self.youtube_client = youtube_client
        self.max_results = max_results
        self.use_search = use_search and youtube_client is not None
        self.logger = logger.bind(component="RecommendationSource")

        self.logger.info(
            "Recommendation source initialized",
            mode="youtube" if self.use_search else "curated",
            max_results=max_results
        )

    async def get_recommendations(self, mood: MoodAnalysis) -> List[Recommendation]:
        """
        Get songs matching ``mood``, each tagged with the mood and first genre.

        Raises:
            YouTubeSearchError: When every search attempt failed
        """
        genre = mood.first_genre

        if not self.use_search:
            return self._curated_recommendations(mood.primary_mood, genre)

        query = build_search_query(mood)
        self.logger.info("Fetching recommendations", query=query, mood=mood.primary_mood)

        try:
            results = await self.youtube_client.search_videos(
                query,
                max_results=self.max_results,
                order=FIRST_SEARCH_ORDER
            )
        except YouTubeSearchError as e:
            self.logger.error("Recommendation search failed", query=query, error=str(e))
            raise

        return [
            rec.model_copy(update={"mood": mood.primary_mood, "genre": genre})
            for rec in results
        ]

    def _curated_recommendations(self, primary_mood: str, genre: Optional[str]) -> List[Recommendation]:
        tracks = CURATED_TRACKS.get(primary_mood, CURATED_TRACKS[NEUTRAL_MOOD])
        return [
            Recommendation(mood=primary_mood, genre=genre, **track)
            for track in tracks[:self.max_results]
        ]
