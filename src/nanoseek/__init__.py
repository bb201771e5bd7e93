"""
nanoseek - resolve content locators and download hash-verified content.

A locator (UHRP URL) embeds the SHA-256 of some content. This package asks
a lookup service which HTTP(S) endpoints host that content, then fetches
from them in order until one returns bytes matching the hash.
"""

__version__ = "0.1.0"
__author__ = "nanoseek Team"

from nanoseek.exceptions import (
    NanoSeekError,
    ConfigurationError,
    InvalidLocatorError,
    MalformedLookupResponseError,
    LookupServiceError,
    InvalidLookupResponseFormatError,
    InvalidDecodedRecordError,
    RecordDecodeError,
    LookupUnavailableError,
    NoResolvedEndpointsError,
    UnableToDownloadError,
    DownloadCancelledError,
)
from nanoseek.enums import (
    ErrorCode,
    FetchOutcome,
    FieldFormat,
    LogLevel,
    LookupErrorCode,
)
from nanoseek.config import (
    DEFAULT_LOOKUP_HOST,
    DEFAULT_MIME_TYPE,
    DEFAULT_PROVIDER,
    FetchConfig,
    LoggingConfig,
    LookupConfig,
    NanoSeekConfig,
    RetryConfig,
)
from nanoseek.models import (
    DecodedRecord,
    DownloadResult,
    FetchAttempt,
    LookupQuery,
    LookupResult,
)
from nanoseek.locator import (
    LocatorValidationResult,
    canonicalize,
    hash_from_locator,
    is_valid_locator,
    locator_from_hash,
    normalize_locator,
    validate_locator,
)
from nanoseek.pushdrop import (
    PushDropDecoder,
    RecordDecoder,
)
from nanoseek.field_extractor import (
    extract_endpoints,
    url_from_record,
)
from nanoseek.retry_manager import (
    RetryManager,
    RetryResult,
)
from nanoseek.audit_logger import (
    AuditLogger,
    LogEntry,
)
from nanoseek.lookup_client import (
    LookupClient,
    LookupService,
)
from nanoseek.resolver import (
    Resolver,
    parse_lookup_body,
)
from nanoseek.fetcher import (
    VerifiedFetcher,
)
from nanoseek.api import (
    download,
    resolve,
)
from nanoseek.self_test import (
    SelfTest,
    SelfTestResult,
    run_self_test,
)

__all__ = [
    # Exceptions
    "NanoSeekError",
    "ConfigurationError",
    "InvalidLocatorError",
    "MalformedLookupResponseError",
    "LookupServiceError",
    "InvalidLookupResponseFormatError",
    "InvalidDecodedRecordError",
    "RecordDecodeError",
    "LookupUnavailableError",
    "NoResolvedEndpointsError",
    "UnableToDownloadError",
    "DownloadCancelledError",
    # Enums
    "ErrorCode",
    "FetchOutcome",
    "FieldFormat",
    "LogLevel",
    "LookupErrorCode",
    # Configuration
    "DEFAULT_LOOKUP_HOST",
    "DEFAULT_MIME_TYPE",
    "DEFAULT_PROVIDER",
    "FetchConfig",
    "LoggingConfig",
    "LookupConfig",
    "NanoSeekConfig",
    "RetryConfig",
    # Models
    "DecodedRecord",
    "DownloadResult",
    "FetchAttempt",
    "LookupQuery",
    "LookupResult",
    # Locator
    "LocatorValidationResult",
    "canonicalize",
    "hash_from_locator",
    "is_valid_locator",
    "locator_from_hash",
    "normalize_locator",
    "validate_locator",
    # Records
    "PushDropDecoder",
    "RecordDecoder",
    "extract_endpoints",
    "url_from_record",
    # Retry
    "RetryManager",
    "RetryResult",
    # Logging
    "AuditLogger",
    "LogEntry",
    # Pipeline
    "LookupClient",
    "LookupService",
    "Resolver",
    "parse_lookup_body",
    "VerifiedFetcher",
    "download",
    "resolve",
    # Self-Test
    "SelfTest",
    "SelfTestResult",
    "run_self_test",
]
