"""
Exception hierarchy for MoodTune.

Generative failures are recovered inside the agents; search failures
surface once their retry budget is spent; ConversationError is what the
HTTP layer turns into a 500.
"""

from typing import Optional


class MoodTuneError(Exception):
    """Base class for all MoodTune errors."""


class APIClientError(MoodTuneError):
    """HTTP transport or status failure in an outbound API client."""

    def __init__(self, message: str, service: str = "api", status: Optional[int] = None):
        super().__init__(message)
        self.service = service
        self.status = status


class YouTubeSearchError(APIClientError):
    """A YouTube search returned an invalid payload or could not be made."""

    def __init__(self, message: str, query: Optional[str] = None, status: Optional[int] = None):
        super().__init__(message, service="YouTube", status=status)
        self.query = query


class NoResultsError(YouTubeSearchError):
    """A YouTube search returned no usable videos."""


class LLMError(MoodTuneError):
    """The generative model call failed."""


class StructuredResponseError(LLMError):
    """No parsable JSON could be extracted within the retry budget."""


class ConversationError(MoodTuneError):
    """A conversation turn could not be completed."""

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        self.stage = stage
