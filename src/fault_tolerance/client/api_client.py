"""
Upstream HTTP API client.

Thin httpx AsyncClient wrapper that turns transport-level outcomes into the
toolkit's error taxonomy:

- httpx timeouts          -> RequestTimeoutError (408, "Request timed out")
- HTTP 429                -> RateLimitedError (Retry-After parsed when present)
- other 4xx/5xx responses -> ApiError(status)
- connection failures     -> ApiError(502)

`get_with_rate_limit_handling` runs a GET through a RateLimitAwareCaller so
429 responses are retried with exponential backoff.
"""

from typing import Any, Optional

import httpx
import structlog

from fault_tolerance.client.exceptions import ApiError, RateLimitedError, RequestTimeoutError
from fault_tolerance.config import Settings
from fault_tolerance.retry.rate_limit import (
    HTTP_TOO_MANY_REQUESTS,
    RateLimitAwareCaller,
    parse_retry_after,
)

logger = structlog.get_logger(__name__)


class ApiClient:
    """
    Async JSON API client with connection pooling.

    Attributes:
        base_url: Upstream base URL
        timeout: Per-request timeout in seconds
        rate_limit_caller: Caller used by get_with_rate_limit_handling
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        rate_limit_caller: Optional[RateLimitAwareCaller] = None,
        connection_limits: Optional[httpx.Limits] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize API client.

        Args:
            base_url: Upstream base URL
            timeout: Per-request timeout in seconds
            rate_limit_caller: 429 retry policy (default RateLimitAwareCaller())
            connection_limits: httpx connection pool limits (default: 10 max connections)
            transport: Custom httpx transport (e.g. httpx.MockTransport in tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.rate_limit_caller = rate_limit_caller or RateLimitAwareCaller()

        if connection_limits is None:
            connection_limits = httpx.Limits(
                max_keepalive_connections=5,
                max_connections=10,
                keepalive_expiry=30.0,
            )
        self._connection_limits = connection_limits
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

        logger.info("API client initialized", base_url=self.base_url, timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "ApiClient":
        """Build a client from UPSTREAM_* and RATE_LIMIT_* settings."""
        kwargs.setdefault("rate_limit_caller", RateLimitAwareCaller.from_settings(settings))
        return cls(settings.UPSTREAM_BASE_URL, timeout=settings.UPSTREAM_TIMEOUT, **kwargs)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                limits=self._connection_limits,
                transport=self._transport,
                follow_redirects=True,
            )
            logger.debug("Created new httpx AsyncClient")
        return self._client

    async def get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        """
        GET `path` and return the decoded JSON body.

        Raises:
            RequestTimeoutError: Request timed out
            RateLimitedError: Upstream answered 429
            ApiError: Any other error status, or the upstream was unreachable
        """
        client = await self._get_client()
        details = {"path": path}

        try:
            response = await client.get(path, params=params)
        except httpx.TimeoutException as e:
            logger.warning("Upstream request timed out", path=path, timeout=self.timeout)
            raise RequestTimeoutError(details=details) from e
        except httpx.TransportError as e:
            logger.warning("Upstream unreachable", path=path, error=str(e))
            raise ApiError(502, "Upstream service unavailable", details) from e

        if response.status_code == HTTP_TOO_MANY_REQUESTS:
            raise RateLimitedError(
                retry_after=parse_retry_after(response.headers.get("Retry-After")),
                details=details,
            )
        if response.is_error:
            logger.warning("Upstream returned error status", path=path, status_code=response.status_code)
            raise ApiError(
                response.status_code,
                f"Upstream returned {response.status_code}",
                {**details, "upstream_status": response.status_code},
            )

        return response.json()

    async def get_with_rate_limit_handling(
        self, path: str, params: Optional[dict[str, Any]] = None
    ) -> Any:
        """GET `path`, retrying with backoff while the upstream answers 429."""
        return await self.rate_limit_caller.call_with_rate_limit_handling(
            lambda: self.get(path, params=params)
        )

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed httpx AsyncClient")
        self._client = None
