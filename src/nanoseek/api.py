"""
Caller-facing entry points.

``resolve`` and ``download`` build a lookup client, resolver and fetcher
for a single call, sharing one httpx client between them, and tear it
down afterwards. Long-lived callers can construct the classes directly.
"""

from typing import Optional

import httpx

from .audit_logger import AuditLogger
from .config import NanoSeekConfig
from .fetcher import VerifiedFetcher
from .lookup_client import LookupClient
from .models import DownloadResult
from .pushdrop import RecordDecoder
from .resolver import Resolver


def _build_http_client(config: NanoSeekConfig) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        verify=True,
        timeout=httpx.Timeout(config.fetch.timeout_seconds),
        follow_redirects=config.fetch.follow_redirects,
    )


def build_resolver(
    config: NanoSeekConfig,
    http_client: httpx.AsyncClient,
    decoder: Optional[RecordDecoder] = None,
    logger: Optional[AuditLogger] = None,
) -> Resolver:
    """Wire a Resolver to a LookupClient that uses ``http_client``."""
    lookup_client = LookupClient(
        config=config.lookup,
        retry_config=config.retry,
        http_client=http_client,
        logger=logger,
    )
    return Resolver(lookup_client, decoder=decoder, config=config.lookup, logger=logger)


async def resolve(
    locator: str,
    lookup_host: Optional[str] = None,
    credential: Optional[str] = None,
    *,
    config: Optional[NanoSeekConfig] = None,
    decoder: Optional[RecordDecoder] = None,
    logger: Optional[AuditLogger] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    deadline_seconds: Optional[float] = None,
) -> list[str]:
    """
    Resolve a locator to the HTTP(S) endpoints that advertise it.

    An empty list means the lookup service knows no endpoints.
    """
    config = config or NanoSeekConfig()
    if http_client is not None:
        resolver = build_resolver(config, http_client, decoder, logger)
        return await resolver.resolve(locator, lookup_host, credential, deadline_seconds)

    async with _build_http_client(config) as client:
        resolver = build_resolver(config, client, decoder, logger)
        return await resolver.resolve(locator, lookup_host, credential, deadline_seconds)


async def download(
    locator: str,
    lookup_host: Optional[str] = None,
    credential: Optional[str] = None,
    *,
    config: Optional[NanoSeekConfig] = None,
    decoder: Optional[RecordDecoder] = None,
    logger: Optional[AuditLogger] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    deadline_seconds: Optional[float] = None,
) -> DownloadResult:
    """Download the content behind a locator, verified against its hash."""
    config = config or NanoSeekConfig()
    if http_client is not None:
        fetcher = VerifiedFetcher(
            build_resolver(config, http_client, decoder, logger),
            config=config.fetch,
            http_client=http_client,
            logger=logger,
        )
        return await fetcher.download(locator, lookup_host, credential, deadline_seconds)

    async with _build_http_client(config) as client:
        fetcher = VerifiedFetcher(
            build_resolver(config, client, decoder, logger),
            config=config.fetch,
            http_client=client,
            logger=logger,
        )
        return await fetcher.download(locator, lookup_host, credential, deadline_seconds)
