"""
Property-based tests for endpoint extraction from decoded records.
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from nanoseek.exceptions import InvalidDecodedRecordError
from nanoseek.field_extractor import extract_endpoints, url_from_record
from nanoseek.models import DecodedRecord


endpoint_strategy = st.builds(
    lambda host, path: f"https://{host}.example/{path}",
    st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789", min_size=1, max_size=12),
    st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789-_", max_size=20),
)


def record_with(field_4, field_count: int = 6) -> DecodedRecord:
    fields = [b"f%d" % i for i in range(field_count)]
    if field_count > 4:
        fields[4] = field_4
    return DecodedRecord(fields=fields)


class TestEndpointExtractionProperty:
    """Field 4 splits into the advertised endpoints, in order."""

    @given(
        endpoints=st.lists(endpoint_strategy, min_size=1, max_size=10),
        as_text=st.booleans(),
    )
    @settings(max_examples=100)
    def test_endpoints_are_split_on_newlines(self, endpoints, as_text: bool) -> None:
        joined = "\n".join(endpoints)
        field = joined if as_text else joined.encode("utf-8")

        assert extract_endpoints(record_with(field)) == endpoints

    @given(
        endpoints=st.lists(endpoint_strategy, min_size=1, max_size=10),
        noise=st.lists(st.sampled_from(["", " ", "\t", "\r"]), min_size=1, max_size=10),
    )
    @settings(max_examples=100)
    def test_blank_lines_and_padding_are_discarded(self, endpoints, noise) -> None:
        lines = []
        for i, endpoint in enumerate(endpoints):
            pad = noise[i % len(noise)]
            lines.append(f"{pad}{endpoint}{pad}")
            lines.append(pad)
        field = "\n".join(lines).encode("utf-8")

        assert extract_endpoints(record_with(field)) == endpoints

    def test_crlf_line_endings_are_trimmed(self) -> None:
        field = b"http://a.example\r\nhttp://b.example\r\n"

        assert extract_endpoints(record_with(field)) == ["http://a.example", "http://b.example"]

    def test_blank_field_yields_no_endpoints(self) -> None:
        assert extract_endpoints(record_with(b"\n \n")) == []


class TestMalformedRecordProperty:
    """Records without a usable field 4 are rejected, never skipped."""

    @given(field_count=st.integers(min_value=0, max_value=4))
    @settings(max_examples=20)
    def test_fewer_than_five_fields_is_rejected(self, field_count: int) -> None:
        with pytest.raises(InvalidDecodedRecordError) as exc_info:
            extract_endpoints(record_with(b"", field_count))
        assert exc_info.value.code == "ERR_INVALID_PUSHDROP_RESULT"

    def test_non_utf8_field_is_rejected(self) -> None:
        with pytest.raises(InvalidDecodedRecordError):
            extract_endpoints(record_with(b"\xff\xfe\xfd"))

    def test_unsupported_field_type_is_rejected(self) -> None:
        with pytest.raises(InvalidDecodedRecordError):
            extract_endpoints(record_with(12345))

    def test_missing_record_is_rejected(self) -> None:
        with pytest.raises(InvalidDecodedRecordError):
            extract_endpoints(None)


class TestSingleUrlExtraction:
    def test_returns_field_text(self) -> None:
        assert url_from_record(record_with(b"https://a.example/x")) == "https://a.example/x"

    def test_blank_field_returns_none(self) -> None:
        assert url_from_record(record_with(b"   ")) is None

    def test_short_record_is_rejected(self) -> None:
        with pytest.raises(InvalidDecodedRecordError):
            url_from_record(DecodedRecord(fields=[b"a", b"b"]))
