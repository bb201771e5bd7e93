"""
Enumeration types for the nanoseek resolver.

These enums provide type-safe constants for error codes, attempt outcomes,
and configuration options throughout the package.
"""

from enum import Enum


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class ErrorCode(Enum):
    """Public error codes carried by every NanoSeekError."""

    INVALID_LOCATOR = "ERR_INVALID_UHRP_URL"
    MALFORMED_LOOKUP_RESPONSE = "ERR_INVALID_JSON"
    UNKNOWN = "ERR_UNKNOWN"
    INVALID_LOOKUP_RESPONSE_FORMAT = "ERR_INVALID_LOOKUP_RESPONSE_FORMAT"
    INVALID_DECODED_RECORD = "ERR_INVALID_PUSHDROP_RESULT"
    NO_RESOLVED_ENDPOINTS = "ERR_NO_RESOLVED_URLS_FOUND"
    UNABLE_TO_DOWNLOAD = "ERR_INVALID_DOWNLOAD_URL"
    LOOKUP_UNAVAILABLE = "ERR_LOOKUP_UNAVAILABLE"
    DOWNLOAD_CANCELLED = "ERR_DOWNLOAD_CANCELLED"
    INVALID_CONFIG = "ERR_INVALID_CONFIG"


class LookupErrorCode(Enum):
    """Transport-level failure reasons when talking to the lookup service."""

    NETWORK_ERROR = "network_error"
    TLS_ERROR = "tls_error"
    TIMEOUT = "timeout"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"


class FetchOutcome(Enum):
    """Outcome of a single candidate endpoint attempt."""

    SUCCESS = "success"
    HTTP_ERROR = "http-error"
    EMPTY_BODY = "empty-body"
    HASH_MISMATCH = "hash-mismatch"
    NETWORK_ERROR = "network-error"
    INVALID_ENDPOINT = "invalid-endpoint"


class FieldFormat(Enum):
    """Representation of decoded record fields."""

    BUFFER = "buffer"
    UTF8 = "utf8"
    HEX = "hex"
