"""
Exception classes for the nanoseek resolver.

All exceptions inherit from NanoSeekError and provide structured
error information with codes, messages, and optional details.
"""

from typing import Optional

from .enums import ErrorCode


class NanoSeekError(Exception):
    """Base exception for all nanoseek errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(NanoSeekError):
    """Raised when a configuration value (e.g. the lookup host) is unusable."""

    def __init__(self, message: str, details: Optional[dict] = None) -> None:
        super().__init__(ErrorCode.INVALID_CONFIG.value, message, details)


class InvalidLocatorError(NanoSeekError):
    """Raised when a locator fails format validation. Never raised after I/O."""

    def __init__(
        self,
        message: str = "Invalid parameter UHRP url",
        details: Optional[dict] = None,
    ) -> None:
        super().__init__(ErrorCode.INVALID_LOCATOR.value, message, details)


class MalformedLookupResponseError(NanoSeekError):
    """Raised when the lookup service body is not parseable JSON."""

    def __init__(self, message: str, details: Optional[dict] = None) -> None:
        super().__init__(ErrorCode.MALFORMED_LOOKUP_RESPONSE.value, message, details)


class LookupServiceError(NanoSeekError):
    """
    Raised when the lookup service explicitly reports an error.

    The code and message are the service's own, forwarded verbatim.
    """

    def __init__(
        self,
        description: Optional[str],
        code: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> None:
        super().__init__(
            code or ErrorCode.UNKNOWN.value,
            description or "Unknown error occurred",
            details,
        )


class InvalidLookupResponseFormatError(NanoSeekError):
    """Raised when a success result lacks its record (outputScript)."""

    def __init__(self, message: str, details: Optional[dict] = None) -> None:
        super().__init__(ErrorCode.INVALID_LOOKUP_RESPONSE_FORMAT.value, message, details)


class InvalidDecodedRecordError(NanoSeekError):
    """Raised when a decoded record has too few fields or an unusable endpoint field."""

    def __init__(self, message: str, details: Optional[dict] = None) -> None:
        super().__init__(ErrorCode.INVALID_DECODED_RECORD.value, message, details)


class RecordDecodeError(InvalidDecodedRecordError):
    """Raised by the record decoder when a script cannot be parsed at all."""

    pass


class LookupUnavailableError(NanoSeekError):
    """
    Raised when the lookup service cannot be reached.

    The ``reason`` is one of the LookupErrorCode values and drives the
    retry decision; the public ``code`` is always ERR_LOOKUP_UNAVAILABLE.
    """

    def __init__(
        self,
        reason: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.reason = reason
        details = dict(details or {})
        details.setdefault("reason", reason)
        super().__init__(ErrorCode.LOOKUP_UNAVAILABLE.value, message, details)


class NoResolvedEndpointsError(NanoSeekError):
    """Raised when resolution succeeded but produced zero candidate endpoints."""

    def __init__(
        self,
        message: str = "Unable to resolve URLs from UHRP URL!",
        details: Optional[dict] = None,
    ) -> None:
        super().__init__(ErrorCode.NO_RESOLVED_ENDPOINTS.value, message, details)


class UnableToDownloadError(NanoSeekError):
    """Raised when every candidate endpoint was tried and none verified."""

    def __init__(self, locator: str, details: Optional[dict] = None) -> None:
        self.locator = locator
        super().__init__(
            ErrorCode.UNABLE_TO_DOWNLOAD.value,
            f"Unable to download content from {locator}",
            details,
        )


class DownloadCancelledError(NanoSeekError):
    """Raised when a caller-supplied deadline expires during resolve or download."""

    def __init__(self, locator: str, deadline_seconds: float) -> None:
        self.locator = locator
        super().__init__(
            ErrorCode.DOWNLOAD_CANCELLED.value,
            f"Deadline of {deadline_seconds}s exceeded while fetching {locator}",
            {"locator": locator, "deadline_seconds": deadline_seconds},
        )
