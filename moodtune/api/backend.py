"""
FastAPI Backend for MoodTune

REST endpoints for the mood-aware music chat: one conversation turn per
POST /chat, plus direct YouTube search helpers used by the front-end.
"""

import time
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any, Dict, List, Optional

import structlog
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from .. import __version__
from ..errors import ConversationError, YouTubeSearchError
from ..models.chat_models import Message
from ..models.config_models import SystemConfig
from ..services.cache_manager import CacheManager
from ..services.conversation_service import ConversationService, create_conversation_service
from ..utils.logging_config import log_error, setup_logging
from .client_factory import APIClientFactory
from .gemini_client import GeminiClient
from .logging_middleware import LoggingMiddleware
from .youtube_client import YouTubeClient

logger = structlog.get_logger(__name__)

# Global service instances, set up in the lifespan
conversation_service: Optional[ConversationService] = None
youtube_client: Optional[YouTubeClient] = None
cache_manager: Optional[CacheManager] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown."""
    global conversation_service, youtube_client, cache_manager

    config = SystemConfig.from_env()
    setup_logging(log_dir=config.log_dir, log_level=config.log_level)

    logger.info(
        "Initializing MoodTune services",
        use_gemini=config.use_gemini,
        use_youtube_api=config.use_youtube_api
    )

    factory = APIClientFactory(config)

    if config.search_cache_dir:
        cache_manager = CacheManager(cache_dir=config.search_cache_dir)

    gemini_client: Optional[GeminiClient] = None
    if config.use_gemini:
        try:
            gemini_client = factory.create_gemini_client()
        except ValueError as e:
            logger.warning("Gemini disabled, using template replies and keyword moods", error=str(e))

    async with AsyncExitStack() as stack:
        if config.youtube_api_key:
            youtube_client = await stack.enter_async_context(
                factory.create_youtube_client(cache_manager=cache_manager)
            )
        elif config.use_youtube_api:
            logger.warning("YouTube search enabled but YOUTUBE_API_KEY is missing, using curated tracks")

        conversation_service = create_conversation_service(
            config,
            youtube_client=youtube_client,
            gemini_client=gemini_client
        )
        logger.info("MoodTune services initialized")

        yield

        logger.info("Shutting down MoodTune services")

    if cache_manager:
        cache_manager.close()
    conversation_service = None
    youtube_client = None
    cache_manager = None


app = FastAPI(
    title="MoodTune API",
    description="Mood-aware conversational music recommendations",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(LoggingMiddleware, exclude_paths=["/health", "/docs", "/openapi.json"])


# Request/Response Models
class ChatRequest(BaseModel):
    """One chat turn. ``message`` is validated by the handler."""
    message: Optional[str] = Field(None, description="The user's new message")
    history: List[Message] = Field(default_factory=list, description="Transcript so far")


class YouTubeSearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    query: Optional[str] = Field(None, description="Free-text search query")
    max_results: int = Field(5, alias="maxResults", ge=1, le=50)


class SongSearchRequest(BaseModel):
    title: Optional[str] = Field(None, description="Song title")
    artist: Optional[str] = Field(None, description="Artist name")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    timestamp: float
    version: str
    components: Dict[str, str]
    services: Dict[str, Any] = Field(default_factory=dict)


# API Endpoints
@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    services: Dict[str, Any] = {}
    if youtube_client:
        services["youtube"] = youtube_client.get_service_info()
    if cache_manager:
        services["search_cache"] = cache_manager.get_stats()

    return HealthResponse(
        status="healthy",
        timestamp=time.time(),
        version=__version__,
        components={
            "conversation_service": "active" if conversation_service else "inactive",
            "youtube_client": "configured" if youtube_client else "not_configured",
            "search_cache": "enabled" if cache_manager else "disabled",
        },
        services=services
    )


@app.post("/chat")
async def chat(request: ChatRequest):
    """
    Process one conversation turn.

    Returns the assistant reply, detected mood, recommendations and the
    updated transcript.
    """
    if not request.message:
        raise HTTPException(status_code=400, detail="Message is required")

    if not conversation_service:
        raise HTTPException(status_code=503, detail="Conversation service not available")

    try:
        response = await conversation_service.process(request.message, request.history)
    except ConversationError as e:
        logger.error("Chat turn failed", error=str(e), stage=e.stage)
        raise HTTPException(status_code=500, detail="Failed to process message")

    return response.model_dump(by_alias=True)


@app.post("/search/youtube")
async def search_youtube(request: YouTubeSearchRequest):
    """Search YouTube music videos directly."""
    if not request.query:
        raise HTTPException(status_code=400, detail="Search query is required")

    if not youtube_client:
        raise HTTPException(status_code=503, detail="YouTube search not configured")

    try:
        results = await youtube_client.search_videos(request.query, max_results=request.max_results)
    except YouTubeSearchError as e:
        logger.error("YouTube search failed", query=request.query, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to search YouTube")

    return {"results": [rec.model_dump(by_alias=True) for rec in results]}


@app.post("/search/song")
async def search_song(request: SongSearchRequest):
    """Find a single video for a known title and optional artist."""
    if not request.title:
        raise HTTPException(status_code=400, detail="Song title is required")

    if not youtube_client:
        raise HTTPException(status_code=503, detail="YouTube search not configured")

    song = await youtube_client.search_specific_song(request.title, request.artist)
    if song is None:
        raise HTTPException(status_code=404, detail="Song not found")

    return {"result": song.model_dump(by_alias=True)}


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    """Custom HTTP exception handler."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.detail,
            "timestamp": time.time(),
            "path": str(request.url)
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    """General exception handler for unexpected errors."""
    log_error(exc, {"path": request.url.path, "method": request.method})
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "timestamp": time.time(),
            "path": str(request.url)
        }
    )
