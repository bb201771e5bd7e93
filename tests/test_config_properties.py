"""
Property-based tests for configuration handling.

Covers the JSON config file round-trip used by the CLI, configuration
validation, and the lookup host connectivity check.
"""

import asyncio
import json
import tempfile
from pathlib import Path

import httpx
from hypothesis import given, settings
from hypothesis import strategies as st

from nanoseek.cli import create_default_config, load_config_from_file, save_config_to_file
from nanoseek.config import (
    DEFAULT_LOOKUP_HOST,
    FetchConfig,
    LoggingConfig,
    LookupConfig,
    NanoSeekConfig,
    RetryConfig,
)
from nanoseek.self_test import SelfTest

from helpers import CONNECT_ERROR, TIMEOUT, FakeHosts


# Strategies for generating valid configuration objects

@st.composite
def lookup_config_strategy(draw) -> LookupConfig:
    host = draw(st.sampled_from(["lookup", "overlay", "confederacy"]))
    scheme = draw(st.sampled_from(["https", "http"]))
    return LookupConfig(
        host=f"{scheme}://{host}.example",
        provider=draw(st.sampled_from(["UHRP", "UHRP-test"])),
        timeout_seconds=draw(st.floats(min_value=0.1, max_value=120.0)),
        credential_header=draw(st.sampled_from(["Authorization", "X-Lookup-Key"])),
    )


@st.composite
def nanoseek_config_strategy(draw) -> NanoSeekConfig:
    base_delay = draw(st.floats(min_value=0.0, max_value=5.0))
    return NanoSeekConfig(
        lookup=draw(lookup_config_strategy()),
        fetch=FetchConfig(
            timeout_seconds=draw(st.floats(min_value=0.1, max_value=120.0)),
            follow_redirects=draw(st.booleans()),
        ),
        retry=RetryConfig(
            max_retries=draw(st.integers(min_value=0, max_value=10)),
            base_delay_seconds=base_delay,
            max_delay_seconds=base_delay + draw(st.floats(min_value=0.0, max_value=60.0)),
            retryable_errors=draw(st.lists(
                st.sampled_from(["timeout", "server_error", "rate_limited", "network_error"]),
                unique=True,
            )),
        ),
        logging=LoggingConfig(
            level=draw(st.sampled_from(["debug", "info", "warn", "error"])),
            audit_mode=draw(st.booleans()),
            audit_signing_key=draw(st.one_of(st.none(), st.text(min_size=16, max_size=32))),
            output_format=draw(st.sampled_from(["json", "text", "both"])),
        ),
    )


def round_trip(config: NanoSeekConfig) -> NanoSeekConfig:
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "nested" / "config.json"
        assert save_config_to_file(config, path)
        return load_config_from_file(path)


class TestConfigurationRoundTripProperty:
    """Saving then loading a configuration loses nothing."""

    @given(config=nanoseek_config_strategy())
    @settings(max_examples=100)
    def test_config_round_trip_preserves_data(self, config: NanoSeekConfig) -> None:
        assert round_trip(config) == config

    @given(config=nanoseek_config_strategy())
    @settings(max_examples=50)
    def test_config_round_trip_is_idempotent(self, config: NanoSeekConfig) -> None:
        once = round_trip(config)

        assert round_trip(once) == once

    def test_missing_sections_fall_back_to_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text(json.dumps({"lookup": {"host": "https://mine.example"}}))

            config = load_config_from_file(path)

        assert config.lookup.host == "https://mine.example"
        assert config.lookup.provider == "UHRP"
        assert config.fetch == FetchConfig()
        assert config.retry == RetryConfig()
        assert config.logging == LoggingConfig()

    def test_unreadable_config_loads_as_none(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text("{not json")

            assert load_config_from_file(path) is None
            assert load_config_from_file(Path(tmp) / "missing.json") is None

    def test_default_config(self) -> None:
        assert create_default_config().lookup.host == DEFAULT_LOOKUP_HOST
        assert create_default_config("https://other.example").lookup.host == "https://other.example"


class TestConfigValidationProperty:
    """Valid configurations pass; each broken setting is reported."""

    @given(config=nanoseek_config_strategy())
    @settings(max_examples=100)
    def test_generated_configs_are_valid(self, config: NanoSeekConfig) -> None:
        result = SelfTest(config).validate_config()

        assert result.valid, result.errors
        if config.lookup.host.startswith("http://"):
            assert any("HTTPS" in w for w in result.warnings)

    def test_default_config_is_valid_without_warnings(self) -> None:
        result = SelfTest(NanoSeekConfig()).validate_config()

        assert result.valid
        assert result.warnings == []

    @given(host=st.sampled_from(
        ["", "lookup.example", "ftp://lookup.example", "https://", "https://lookup.example:abc"]
    ))
    @settings(max_examples=10)
    def test_unusable_lookup_host_is_an_error(self, host: str) -> None:
        config = NanoSeekConfig(lookup=LookupConfig(host=host))

        assert not SelfTest(config).validate_config().valid

    def test_each_invalid_setting_is_reported(self) -> None:
        config = NanoSeekConfig(
            lookup=LookupConfig(provider="", timeout_seconds=0, credential_header=""),
            fetch=FetchConfig(timeout_seconds=-1),
            retry=RetryConfig(max_retries=-1, base_delay_seconds=5, max_delay_seconds=1),
            logging=LoggingConfig(level="chatty", output_format="xml"),
        )

        result = SelfTest(config).validate_config()

        assert not result.valid
        assert len(result.errors) == 8

    def test_audit_mode_without_key_warns(self) -> None:
        config = NanoSeekConfig(logging=LoggingConfig(audit_mode=True))

        result = SelfTest(config).validate_config()

        assert result.valid
        assert any("signing key" in w for w in result.warnings)


class TestSelfTestConnectivity:
    """The lookup host counts as reachable unless it fails at transport or 5xx."""

    HOST = "https://lookup.example"

    def run(self, route, config=None):
        hosts = FakeHosts({self.HOST: route})
        config = config or NanoSeekConfig(lookup=LookupConfig(host=self.HOST))
        return asyncio.run(SelfTest(config, http_client=hosts.client()).run()), hosts

    def test_reachable_host_passes(self) -> None:
        result, hosts = self.run((404, b"", {}))

        assert result.success
        assert result.endpoint_results[0].http_status_code == 404
        assert hosts.requests[0].method == "HEAD"

    def test_server_error_fails(self) -> None:
        result, _ = self.run((502, b"", {}))

        assert not result.success
        assert result.failed_endpoints[0].endpoint == self.HOST

    def test_transport_failures_fail(self) -> None:
        for route in (CONNECT_ERROR, TIMEOUT):
            result, _ = self.run(route)

            assert not result.success
            assert result.endpoint_results[0].error

    def test_tls_failure_is_labelled(self) -> None:
        def tls(request):
            raise httpx.ConnectError("certificate verify failed", request=request)

        result, _ = self.run(tls)

        assert result.endpoint_results[0].error.startswith("TLS/SSL error")

    def test_invalid_config_skips_connectivity(self) -> None:
        config = NanoSeekConfig(lookup=LookupConfig(host="nope"))

        result, hosts = self.run((200, b"", {}), config=config)

        assert not result.success
        assert result.endpoint_results == []
        assert hosts.requests == []
