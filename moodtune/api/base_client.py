"""
Base API Client

Shared aiohttp request handling, rate limiting and retry/backoff for the
outbound REST clients.
"""

import asyncio
import random
from abc import ABC, abstractmethod
from typing import Dict, Optional, Any

import aiohttp
import structlog

from ..errors import APIClientError
from .rate_limiter import UnifiedRateLimiter

logger = structlog.get_logger(__name__)


class BaseAPIClient(ABC):
    """
    Base HTTP client with unified request handling, rate limiting and error handling.

    Subclasses provide the service-specific error extraction and default
    query parameters. Use as an async context manager so the aiohttp session
    is opened and closed with the owning component.
    """

    def __init__(
        self,
        base_url: str,
        rate_limiter: UnifiedRateLimiter,
        timeout: int = 10,
        service_name: str = "api"
    ):
        """
        Initialize base API client.

        Args:
            base_url: Base URL for the API
            rate_limiter: Rate limiter shared by clients of this service
            timeout: Request timeout in seconds
            service_name: Service name for logging and errors
        """
        self.base_url = base_url.rstrip('/')
        self.rate_limiter = rate_limiter
        self.timeout = timeout
        self.service_name = service_name
        self.session: Optional[aiohttp.ClientSession] = None

        self.logger = logger.bind(
            service=service_name,
            component="BaseAPIClient",
            base_url=base_url
        )

    async def __aenter__(self):
        self.session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.timeout)
        )
        self.logger.debug("API client session started")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self) -> None:
        if self.session:
            await self.session.close()
            self.session = None
            self.logger.debug("API client session closed")

    def _default_params(self) -> Dict[str, Any]:
        """Query parameters added to every request (API keys and such)."""
        return {}

    async def _make_request(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        method: str = "GET",
        headers: Optional[Dict[str, str]] = None,
        retries: int = 3
    ) -> Dict[str, Any]:
        """
        Make a rate-limited HTTP request with retries.

        Args:
            endpoint: API endpoint (relative to base_url)
            params: Query parameters
            method: HTTP method
            headers: Additional headers
            retries: Number of retry attempts after the first one

        Returns:
            Parsed JSON response data

        Raises:
            APIClientError: When the request cannot be completed
        """
        if not self.session:
            self.logger.error("Client not initialized")
            raise RuntimeError(
                f"{self.service_name} client not initialized. Use async context manager."
            )

        url = f"{self.base_url}/{endpoint.lstrip('/')}" if endpoint else self.base_url

        request_params = {**self._default_params(), **(params or {})}
        request_headers = dict(headers or {})
        request_headers.setdefault('User-Agent', f'MoodTune-{self.service_name}/1.0')

        for attempt in range(retries + 1):
            await self.rate_limiter.wait_if_needed()

            try:
                self.logger.debug(
                    "Making API request",
                    attempt=attempt + 1,
                    max_attempts=retries + 1,
                    method=method,
                    endpoint=endpoint
                )

                async with self.session.request(
                    method=method,
                    url=url,
                    params=request_params if method == "GET" else None,
                    json=request_params if method in ["POST", "PUT", "PATCH"] else None,
                    headers=request_headers
                ) as response:

                    if response.status == 200:
                        data = await self._parse_response(response)

                        error_info = self._extract_api_error(data)
                        if error_info:
                            self.logger.error(
                                "API error in response body",
                                error=error_info,
                                endpoint=endpoint
                            )
                            raise APIClientError(
                                f"{self.service_name} API error: {error_info}",
                                service=self.service_name,
                                status=response.status
                            )

                        return data

                    if response.status == 429:
                        wait_time = self._calculate_backoff_time(response, attempt)
                        self.logger.warning(
                            "Rate limited - backing off",
                            attempt=attempt + 1,
                            wait_time=wait_time,
                            endpoint=endpoint
                        )
                        if attempt < retries:
                            await asyncio.sleep(wait_time)
                            continue
                        raise APIClientError(
                            f"{self.service_name} rate limited",
                            service=self.service_name,
                            status=429
                        )

                    await self._handle_http_error(response, endpoint, attempt, retries)
                    if attempt < retries:
                        await self._exponential_backoff(attempt)
                        continue

                    self.logger.error(
                        "Request failed after all retries",
                        final_status=response.status,
                        endpoint=endpoint,
                        total_attempts=retries + 1
                    )
                    raise APIClientError(
                        f"{self.service_name} request failed after {retries + 1} attempts",
                        service=self.service_name,
                        status=response.status
                    )

            except asyncio.TimeoutError:
                self.logger.warning(
                    "Request timeout",
                    attempt=attempt + 1,
                    endpoint=endpoint,
                    timeout=self.timeout
                )
                if attempt == retries:
                    raise APIClientError(
                        f"{self.service_name} request timed out after {retries + 1} attempts",
                        service=self.service_name
                    )
                await self._exponential_backoff(attempt)

            except aiohttp.ClientError as e:
                self.logger.error(
                    "HTTP client error",
                    error=str(e),
                    error_type=type(e).__name__,
                    attempt=attempt + 1,
                    endpoint=endpoint
                )
                if attempt == retries:
                    raise APIClientError(
                        f"{self.service_name} client error: {e}",
                        service=self.service_name
                    ) from e
                await self._exponential_backoff(attempt)

        raise APIClientError(
            f"{self.service_name} request failed after {retries + 1} attempts",
            service=self.service_name
        )

    async def _parse_response(self, response: aiohttp.ClientResponse) -> Dict[str, Any]:
        try:
            return await response.json()
        except (aiohttp.ContentTypeError, ValueError) as e:
            self.logger.error("Invalid JSON response", error=str(e))
            raise APIClientError(
                f"{self.service_name} returned invalid JSON",
                service=self.service_name,
                status=response.status
            ) from e

    @abstractmethod
    def _extract_api_error(self, data: Dict[str, Any]) -> Optional[str]:
        """
        Extract API-specific error information from response data.

        Returns:
            Error message if found, None otherwise
        """

    def _calculate_backoff_time(
        self,
        response: aiohttp.ClientResponse,
        attempt: int
    ) -> float:
        retry_after = response.headers.get('Retry-After')
        if retry_after:
            try:
                return float(retry_after)
            except ValueError:
                pass

        return min(2 ** attempt, 60)

    async def _handle_http_error(
        self,
        response: aiohttp.ClientResponse,
        endpoint: str,
        attempt: int,
        max_retries: int
    ):
        """Log an HTTP error; 4xx responses are not retried."""
        self.logger.warning(
            f"{self.service_name} HTTP error",
            status=response.status,
            endpoint=endpoint,
            attempt=attempt + 1,
            max_retries=max_retries + 1
        )

        if 400 <= response.status < 500:
            raise APIClientError(
                f"{self.service_name} client error: {response.status}",
                service=self.service_name,
                status=response.status
            )

    async def _exponential_backoff(self, attempt: int, base_delay: float = 1.0):
        """Exponential backoff with jitter, capped at 60 seconds."""
        delay = base_delay * (2 ** attempt)
        jitter = random.uniform(0.1, 0.3) * delay
        total_delay = min(delay + jitter, 60.0)

        self.logger.debug(
            "Backing off before retry",
            attempt=attempt + 1,
            delay=total_delay
        )

        await asyncio.sleep(total_delay)

    def get_service_info(self) -> Dict[str, Any]:
        """Service configuration and status."""
        return {
            "service_name": self.service_name,
            "base_url": self.base_url,
            "timeout": self.timeout,
            "session_active": self.session is not None,
            "rate_limiter": self.rate_limiter.get_current_usage(),
        }
