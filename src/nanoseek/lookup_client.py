"""
Lookup service client.

This module posts lookup queries to the lookup service over an async
httpx client and returns the raw response body. Interpreting the body
is the resolver's job; this layer only deals with transport failures,
which it retries with exponential backoff.
"""

import asyncio
import time
from typing import Awaitable, Callable, Optional, Protocol
from urllib.parse import urlparse

import httpx

from .audit_logger import AuditLogger
from .config import LookupConfig, RetryConfig
from .enums import LogLevel, LookupErrorCode
from .exceptions import ConfigurationError, LookupUnavailableError
from .models import LookupQuery
from .retry_manager import RetryManager


class LookupService(Protocol):
    """The lookup service as seen by the resolver."""

    async def lookup(
        self,
        query: LookupQuery,
        lookup_host: Optional[str] = None,
        credential: Optional[str] = None,
    ) -> bytes:
        ...


def validate_lookup_host(host: str) -> str:
    """
    Check that a lookup host is an absolute http(s) URL.

    Returns:
        The host with any trailing slash removed

    Raises:
        ConfigurationError: If the host is unusable
    """
    parsed = urlparse(host or "")
    if parsed.scheme.lower() not in ("http", "https") or not parsed.netloc:
        raise ConfigurationError(
            f"Lookup host must be an absolute http(s) URL: {host!r}",
            details={"lookup_host": host},
        )
    try:
        httpx.URL(host)
    except httpx.InvalidURL as e:
        raise ConfigurationError(
            f"Lookup host is not a valid URL: {host!r} ({e})",
            details={"lookup_host": host},
        ) from e
    return host.rstrip("/")


class LookupClient:
    """
    Async client for the lookup service.

    Can be used as an async context manager, or handed an existing
    httpx.AsyncClient which it will then never close.
    """

    COMPONENT = "LookupClient"

    def __init__(
        self,
        config: Optional[LookupConfig] = None,
        retry_config: Optional[RetryConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        logger: Optional[AuditLogger] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize the lookup client.

        Args:
            config: Lookup service settings (host, provider, timeout)
            retry_config: Retry behaviour for transient transport errors
            http_client: Optional shared httpx client
            logger: Optional audit logger
            sleep: Coroutine used between retries
        """
        self._config = config or LookupConfig()
        self._retry_manager = RetryManager(retry_config or RetryConfig(), sleep=sleep)
        self._client = http_client
        self._owns_client = http_client is None
        self._logger = logger

    async def __aenter__(self) -> "LookupClient":
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def config(self) -> LookupConfig:
        return self._config

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                verify=True,
                timeout=httpx.Timeout(self._config.timeout_seconds),
                follow_redirects=True,
            )
            self._owns_client = True
        return self._client

    def build_url(self, lookup_host: Optional[str] = None) -> str:
        """Return the ``/lookup`` URL for the given or configured host."""
        host = validate_lookup_host(lookup_host or self._config.host)
        return f"{host}/lookup"

    async def lookup(
        self,
        query: LookupQuery,
        lookup_host: Optional[str] = None,
        credential: Optional[str] = None,
    ) -> bytes:
        """
        Post a lookup query and return the raw response body.

        Args:
            query: The lookup query envelope
            lookup_host: Overrides the configured host for this call
            credential: Optional opaque credential attached as a header

        Returns:
            The response body bytes (any status below 500 except 429)

        Raises:
            ConfigurationError: If the lookup host is not a usable URL
            LookupUnavailableError: If the service stays unreachable after retries
        """
        url = self.build_url(lookup_host)
        headers = {"Accept": "application/json"}
        if credential:
            headers[self._config.credential_header] = credential

        payload = query.to_payload()
        self._log(
            LogLevel.DEBUG,
            "Posting lookup query",
            {"url": url, "query": payload, "credential": credential},
        )

        result = await self._retry_manager.execute_with_retry(
            lambda: self._post_once(url, payload, headers),
            is_retryable=self._is_retryable,
        )
        if result.success:
            return result.result

        error = result.last_error
        if isinstance(error, LookupUnavailableError):
            error.details["attempts"] = result.attempts
            if self._logger:
                self._logger.log_error(
                    self.COMPONENT,
                    "Lookup service unavailable",
                    error=error,
                    request_url=url,
                    additional_data={"attempts": result.attempts},
                )
        raise error

    def _is_retryable(self, error: Exception) -> bool:
        return isinstance(error, LookupUnavailableError) and (
            self._retry_manager.is_retryable_error(error.reason)
        )

    async def _post_once(self, url: str, payload: dict, headers: dict) -> bytes:
        client = self._ensure_client()
        start_time = time.perf_counter()

        try:
            response = await client.post(
                url,
                json=payload,
                headers=headers,
                timeout=self._config.timeout_seconds,
            )
        except httpx.TimeoutException as e:
            raise LookupUnavailableError(
                LookupErrorCode.TIMEOUT.value,
                f"Lookup request timed out after {self._config.timeout_seconds}s",
                details={"url": url},
            ) from e
        except httpx.ConnectError as e:
            error_msg = str(e)
            if "ssl" in error_msg.lower() or "certificate" in error_msg.lower():
                raise LookupUnavailableError(
                    LookupErrorCode.TLS_ERROR.value,
                    f"TLS connection error: {error_msg}",
                    details={"url": url},
                ) from e
            raise LookupUnavailableError(
                LookupErrorCode.NETWORK_ERROR.value,
                f"Connection error: {error_msg}",
                details={"url": url},
            ) from e
        except httpx.HTTPError as e:
            raise LookupUnavailableError(
                LookupErrorCode.NETWORK_ERROR.value,
                f"Lookup request failed: {e}",
                details={"url": url},
            ) from e

        elapsed_ms = (time.perf_counter() - start_time) * 1000

        if response.status_code == 429:
            raise LookupUnavailableError(
                LookupErrorCode.RATE_LIMITED.value,
                "Rate limited by lookup service",
                details={"url": url, "http_status_code": 429},
            )
        if response.status_code >= 500:
            raise LookupUnavailableError(
                LookupErrorCode.SERVER_ERROR.value,
                f"Lookup service error: {response.status_code}",
                details={"url": url, "http_status_code": response.status_code},
            )

        self._log(
            LogLevel.DEBUG,
            "Lookup response received",
            {
                "url": url,
                "http_status_code": response.status_code,
                "bytes": len(response.content),
                "response_time_ms": elapsed_ms,
            },
        )
        return response.content

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, self.COMPONENT, message, data)

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._client and self._owns_client:
            await self._client.aclose()
        self._client = None
