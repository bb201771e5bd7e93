"""
Data models for the nanoseek resolver.

This module defines the request envelope sent to the lookup service, the
shapes parsed out of its response, decoded records, and the per-call
download results. Nothing here is persisted; every value lives for one call.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Union

from .enums import FetchOutcome


@dataclass
class LookupQuery:
    """Request envelope posted to the lookup service."""

    provider: str
    locator: str

    def to_payload(self) -> dict:
        """Build the JSON body expected by the lookup service."""
        return {
            "provider": self.provider,
            "query": {"UHRPUrl": self.locator},
        }


@dataclass
class LookupResult:
    """
    One element of the lookup service response.

    Either an error descriptor (status == "error") or a success carrying
    an opaque record in ``output_script``. Unknown properties are kept in
    ``extra`` and otherwise ignored.
    """

    status: Optional[str] = None
    description: Optional[str] = None
    code: Optional[str] = None
    output_script: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        return self.status == "error"

    @classmethod
    def from_dict(cls, data: dict) -> "LookupResult":
        known = {"status", "description", "code", "outputScript"}
        return cls(
            status=data.get("status"),
            description=data.get("description"),
            code=data.get("code"),
            output_script=data.get("outputScript"),
            extra={k: v for k, v in data.items() if k not in known},
        )


@dataclass
class DecodedRecord:
    """Structured output of the record decoder."""

    fields: list[Union[bytes, str]]
    locking_public_key: Optional[str] = None
    signature: Optional[str] = None


@dataclass
class FetchAttempt:
    """One candidate endpoint attempt made during a download."""

    endpoint: str
    outcome: FetchOutcome
    http_status_code: Optional[int] = None
    error: Optional[str] = None
    response_time_ms: float = 0.0

    def to_dict(self) -> dict:
        return {
            "endpoint": self.endpoint,
            "outcome": self.outcome.value,
            "http_status_code": self.http_status_code,
            "error": self.error,
            "response_time_ms": self.response_time_ms,
        }


@dataclass
class DownloadResult:
    """Verified content returned by a download."""

    payload: bytes
    mime_type: str
    endpoint: str
    attempts: list[FetchAttempt] = field(default_factory=list)
