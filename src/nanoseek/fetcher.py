"""
Verified Fetcher: locator to hash-checked content.

Resolves a locator to candidate endpoints, then tries each endpoint in
order until one returns a body whose SHA-256 matches the hash embedded
in the locator. Candidates are tried strictly one after another, and a
failing candidate is never retried; the loop simply moves on.

States of one download call::

    Validating -> Resolving -> (no endpoints: Failed)
               -> Iterating(i) -> next candidate | Verified: Done | Exhausted: Failed
"""

import hashlib
import time
from typing import Optional
from urllib.parse import urlparse

import httpx

from .audit_logger import AuditLogger
from .config import DEFAULT_MIME_TYPE, FetchConfig
from .deadline import run_with_deadline
from .enums import FetchOutcome, LogLevel
from .exceptions import (
    InvalidLocatorError,
    NoResolvedEndpointsError,
    UnableToDownloadError,
)
from .locator import hash_from_locator, is_valid_locator, locator_from_hash
from .models import DownloadResult, FetchAttempt
from .resolver import Resolver


class VerifiedFetcher:
    """
    Downloads content for a locator and verifies it against the locator's hash.

    Can be used as an async context manager, or handed an existing
    httpx.AsyncClient which it will then never close. A client it creates
    itself stays open until ``close()`` is awaited or the context exits.
    """

    COMPONENT = "VerifiedFetcher"

    def __init__(
        self,
        resolver: Resolver,
        config: Optional[FetchConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the fetcher.

        Args:
            resolver: Resolver used to find candidate endpoints
            config: Fetch settings (timeout, redirects)
            http_client: Optional shared httpx client, never closed here
            logger: Optional audit logger
        """
        self._resolver = resolver
        self._config = config or FetchConfig()
        self._client = http_client
        self._owns_client = http_client is None
        self._logger = logger

    async def __aenter__(self) -> "VerifiedFetcher":
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                verify=True,
                timeout=httpx.Timeout(self._config.timeout_seconds),
                follow_redirects=self._config.follow_redirects,
            )
            self._owns_client = True
        return self._client

    async def download(
        self,
        locator: str,
        lookup_host: Optional[str] = None,
        credential: Optional[str] = None,
        deadline_seconds: Optional[float] = None,
    ) -> DownloadResult:
        """
        Download and verify the content behind a locator.

        Args:
            locator: Locator in any accepted form
            lookup_host: Overrides the configured lookup host
            credential: Optional opaque credential for the lookup service
            deadline_seconds: Optional deadline covering resolution and all attempts

        Returns:
            DownloadResult with the verified payload and its MIME type

        Raises:
            InvalidLocatorError: Before any I/O if the locator is invalid
            NoResolvedEndpointsError: If resolution yields no endpoints
            UnableToDownloadError: If no candidate produced verified content
            DownloadCancelledError: If the deadline expires
        """
        if not is_valid_locator(locator):
            self._log(LogLevel.WARN, "Rejected invalid locator", {"locator": locator})
            raise InvalidLocatorError(details={"locator": locator})

        return await run_with_deadline(
            self._download(locator, lookup_host, credential),
            deadline_seconds,
            locator,
        )

    async def _download(
        self,
        locator: str,
        lookup_host: Optional[str],
        credential: Optional[str],
    ) -> DownloadResult:
        content_hash = hash_from_locator(locator)
        canonical = locator_from_hash(content_hash)
        expected_hex = content_hash.hex()

        endpoints = await self._resolver.resolve(canonical, lookup_host, credential)
        if not endpoints:
            error = NoResolvedEndpointsError(details={"locator": locator})
            if self._logger:
                self._logger.log_error(self.COMPONENT, error.message, error=error)
            raise error

        attempts: list[FetchAttempt] = []
        for endpoint in endpoints:
            attempt, response = await self._attempt(endpoint, expected_hex)
            attempts.append(attempt)

            if response is None:
                self._log(
                    LogLevel.WARN,
                    f"Candidate failed: {attempt.outcome.value}",
                    attempt.to_dict(),
                )
                continue

            self._log(LogLevel.INFO, "Content verified", attempt.to_dict())
            return DownloadResult(
                payload=response.content,
                mime_type=response.headers.get("Content-Type") or DEFAULT_MIME_TYPE,
                endpoint=endpoint,
                attempts=attempts,
            )

        error = UnableToDownloadError(
            locator,
            details={
                "locator": locator,
                "attempts": [attempt.to_dict() for attempt in attempts],
            },
        )
        if self._logger:
            self._logger.log_error(
                self.COMPONENT,
                error.message,
                error=error,
                additional_data={"attempt_count": len(attempts)},
            )
        raise error

    async def _attempt(
        self,
        endpoint: str,
        expected_hex: str,
    ) -> tuple[FetchAttempt, Optional[httpx.Response]]:
        """
        Try one candidate endpoint.

        Returns:
            The recorded attempt, plus the response when it verified
        """
        start_time = time.perf_counter()

        parsed = urlparse(endpoint)
        if parsed.scheme.lower() not in ("http", "https") or not parsed.netloc:
            return FetchAttempt(
                endpoint=endpoint,
                outcome=FetchOutcome.INVALID_ENDPOINT,
                error="Endpoint is not an absolute http(s) URL",
            ), None

        client = self._ensure_client()
        try:
            response = await client.get(endpoint, timeout=self._config.timeout_seconds)
        except Exception as e:
            return FetchAttempt(
                endpoint=endpoint,
                outcome=FetchOutcome.NETWORK_ERROR,
                error=f"{type(e).__name__}: {e}",
                response_time_ms=self._elapsed_ms(start_time),
            ), None

        elapsed_ms = self._elapsed_ms(start_time)

        if response.status_code >= 400:
            return FetchAttempt(
                endpoint=endpoint,
                outcome=FetchOutcome.HTTP_ERROR,
                http_status_code=response.status_code,
                response_time_ms=elapsed_ms,
            ), None

        body = response.content
        if len(body) == 0:
            return FetchAttempt(
                endpoint=endpoint,
                outcome=FetchOutcome.EMPTY_BODY,
                http_status_code=response.status_code,
                response_time_ms=elapsed_ms,
            ), None

        actual_hex = hashlib.sha256(body).hexdigest()
        if actual_hex.lower() != expected_hex.lower():
            return FetchAttempt(
                endpoint=endpoint,
                outcome=FetchOutcome.HASH_MISMATCH,
                http_status_code=response.status_code,
                error=f"expected {expected_hex}, got {actual_hex}",
                response_time_ms=elapsed_ms,
            ), None

        return FetchAttempt(
            endpoint=endpoint,
            outcome=FetchOutcome.SUCCESS,
            http_status_code=response.status_code,
            response_time_ms=elapsed_ms,
        ), response

    def _elapsed_ms(self, start_time: float) -> float:
        return (time.perf_counter() - start_time) * 1000

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, self.COMPONENT, message, data)

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._client and self._owns_client:
            await self._client.aclose()
        self._client = None
