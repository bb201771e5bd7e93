"""
Resolver: locator to candidate endpoints.

Queries the lookup service for a locator, decodes every returned record,
and collects the endpoint lists they advertise.

Any malformed record aborts the whole call rather than being skipped:
a bad record points at an integrity problem in the lookup service.
"""

import json
from typing import Optional, Union

from .audit_logger import AuditLogger
from .config import LookupConfig
from .deadline import run_with_deadline
from .enums import FieldFormat, LogLevel
from .exceptions import (
    InvalidDecodedRecordError,
    InvalidLocatorError,
    InvalidLookupResponseFormatError,
    LookupServiceError,
    MalformedLookupResponseError,
)
from .field_extractor import extract_endpoints
from .locator import is_valid_locator
from .lookup_client import LookupService
from .models import LookupQuery, LookupResult
from .pushdrop import PushDropDecoder, RecordDecoder


def parse_lookup_body(body: Union[bytes, str]) -> list[LookupResult]:
    """
    Parse a lookup service response body.

    Args:
        body: Raw UTF-8 JSON body

    Returns:
        The lookup results, possibly empty

    Raises:
        MalformedLookupResponseError: If the body is not JSON
        LookupServiceError: If the service reported an error
        InvalidLookupResponseFormatError: If the JSON has an unexpected shape
    """
    try:
        text = body.decode("utf-8") if isinstance(body, (bytes, bytearray)) else body
        data = json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedLookupResponseError(
            "Lookup failed: Invalid JSON response",
            details={"error": str(e)},
        ) from e

    if isinstance(data, dict):
        if data.get("status") == "error":
            raise LookupServiceError(data.get("description"), data.get("code"))
        raise InvalidLookupResponseFormatError(
            "Invalid response format from lookup service",
            details={"keys": sorted(data.keys())},
        )

    if not isinstance(data, list):
        raise InvalidLookupResponseFormatError(
            "Invalid response format from lookup service",
            details={"type": type(data).__name__},
        )

    results = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise InvalidLookupResponseFormatError(
                "Invalid response format from lookup service",
                details={"index": index, "type": type(item).__name__},
            )
        result = LookupResult.from_dict(item)
        if result.is_error:
            raise LookupServiceError(result.description, result.code)
        results.append(result)

    return results


class Resolver:
    """Resolves a locator to an ordered, de-duplicated list of endpoints."""

    COMPONENT = "Resolver"

    def __init__(
        self,
        lookup_service: LookupService,
        decoder: Optional[RecordDecoder] = None,
        config: Optional[LookupConfig] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the resolver.

        Args:
            lookup_service: Collaborator that posts queries to the lookup service
            decoder: Record decoder (PushDrop by default)
            config: Lookup settings; only the provider tag is read here
            logger: Optional audit logger
        """
        self._lookup_service = lookup_service
        self._decoder = decoder or PushDropDecoder()
        self._config = config or LookupConfig()
        self._logger = logger

    async def resolve(
        self,
        locator: str,
        lookup_host: Optional[str] = None,
        credential: Optional[str] = None,
        deadline_seconds: Optional[float] = None,
    ) -> list[str]:
        """
        Resolve a locator to candidate endpoints.

        Args:
            locator: The locator to resolve
            lookup_host: Overrides the configured lookup host
            credential: Optional opaque credential for the lookup service
            deadline_seconds: Optional overall deadline for this call

        Returns:
            Endpoints in advertised order; empty if nothing is known

        Raises:
            InvalidLocatorError: Before any I/O if the locator is invalid
            NanoSeekError: Any of the lookup/decode error kinds
        """
        if not is_valid_locator(locator):
            self._log(LogLevel.WARN, "Rejected invalid locator", {"locator": locator})
            raise InvalidLocatorError(details={"locator": locator})

        return await run_with_deadline(
            self._resolve(locator, lookup_host, credential),
            deadline_seconds,
            locator,
        )

    async def _resolve(
        self,
        locator: str,
        lookup_host: Optional[str],
        credential: Optional[str],
    ) -> list[str]:
        query = LookupQuery(provider=self._config.provider, locator=locator)
        body = await self._lookup_service.lookup(query, lookup_host, credential)

        try:
            results = parse_lookup_body(body)
        except LookupServiceError as e:
            if self._logger:
                self._logger.log_error(
                    self.COMPONENT,
                    "Lookup service reported an error",
                    error=e,
                    additional_data={"locator": locator},
                )
            raise

        if not results:
            self._log(LogLevel.INFO, "No records found", {"locator": locator})
            return []

        endpoints: list[str] = []
        seen: set[str] = set()
        for index, result in enumerate(results):
            for endpoint in self._endpoints_from_result(result, index):
                if endpoint not in seen:
                    seen.add(endpoint)
                    endpoints.append(endpoint)

        self._log(
            LogLevel.INFO,
            f"Resolved {len(endpoints)} endpoint(s)",
            {"locator": locator, "records": len(results), "endpoints": endpoints},
        )
        return endpoints

    def _endpoints_from_result(self, result: LookupResult, index: int) -> list[str]:
        if not result.output_script:
            raise InvalidLookupResponseFormatError(
                "Invalid response format: missing outputScript",
                details={"index": index},
            )
        if not isinstance(result.output_script, str):
            raise InvalidLookupResponseFormatError(
                "Invalid response format: outputScript must be a string",
                details={"index": index, "type": type(result.output_script).__name__},
            )

        try:
            record = self._decoder.decode(result.output_script, FieldFormat.BUFFER)
        except InvalidDecodedRecordError:
            raise
        except Exception as e:
            raise InvalidDecodedRecordError(
                f"Record decoder failed: {e}",
                details={"index": index},
            ) from e

        return extract_endpoints(record)

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, self.COMPONENT, message, data)
