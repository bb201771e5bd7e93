"""
Endpoint extraction from decoded records.

By convention field index 4 of a record holds the endpoint list: one
HTTP(S) URL per line.
"""

from typing import Optional, Union

from .exceptions import InvalidDecodedRecordError
from .models import DecodedRecord


ENDPOINT_FIELD_INDEX = 4
MIN_FIELD_COUNT = ENDPOINT_FIELD_INDEX + 1


def _endpoint_field_text(record: DecodedRecord) -> str:
    if record is None or not isinstance(record.fields, list):
        raise InvalidDecodedRecordError(
            "Invalid pushdrop decode result",
            details={"record": repr(record)},
        )
    if len(record.fields) < MIN_FIELD_COUNT:
        raise InvalidDecodedRecordError(
            "Invalid pushdrop decode result",
            details={"field_count": len(record.fields), "required": MIN_FIELD_COUNT},
        )

    value: Union[bytes, str] = record.fields[ENDPOINT_FIELD_INDEX]
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidDecodedRecordError(
                "Endpoint field is not valid UTF-8",
                details={"field_hex": bytes(value).hex()},
            ) from e
    raise InvalidDecodedRecordError(
        "Endpoint field has unsupported type",
        details={"type": type(value).__name__},
    )


def extract_endpoints(record: DecodedRecord) -> list[str]:
    """
    Extract the candidate endpoint list from a decoded record.

    Args:
        record: A decoded record with at least five fields

    Returns:
        Endpoints in record order, blanks removed

    Raises:
        InvalidDecodedRecordError: If the record is structurally unusable
    """
    text = _endpoint_field_text(record)
    return [line.strip() for line in text.split("\n") if line.strip()]


def url_from_record(record: DecodedRecord) -> Optional[str]:
    """Return field 4 as a single URL, or None when it is blank."""
    text = _endpoint_field_text(record)
    return text if text.strip() else None
