"""
Configuration dataclasses for the nanoseek resolver.

This module defines the configuration structures threaded through each
resolve/download call: the lookup service, candidate fetching, retry
behaviour for the lookup request, and logging.
"""

from dataclasses import dataclass, field
from typing import Optional


DEFAULT_LOOKUP_HOST = "https://confederacy.babbage.systems"
DEFAULT_PROVIDER = "UHRP"
DEFAULT_MIME_TYPE = "application/octet-stream"


@dataclass
class LookupConfig:
    """Lookup service settings."""

    host: str = DEFAULT_LOOKUP_HOST
    provider: str = DEFAULT_PROVIDER
    timeout_seconds: float = 30.0
    credential_header: str = "Authorization"


@dataclass
class FetchConfig:
    """Settings for retrieving content from candidate endpoints."""

    timeout_seconds: float = 30.0
    follow_redirects: bool = True


@dataclass
class RetryConfig:
    """Retry behavior for the lookup request."""

    max_retries: int = 2
    base_delay_seconds: float = 0.5
    max_delay_seconds: float = 8.0
    retryable_errors: list[str] = field(
        default_factory=lambda: ["timeout", "server_error", "rate_limited", "network_error"]
    )


@dataclass
class LoggingConfig:
    """Logging and audit configuration."""

    level: str = "info"
    audit_mode: bool = False
    audit_signing_key: Optional[str] = None
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass
class NanoSeekConfig:
    """Main configuration combining all sub-configurations."""

    lookup: LookupConfig = field(default_factory=LookupConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
