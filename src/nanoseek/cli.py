"""
Command-line interface for the nanoseek resolver.

Commands:
- resolve: List the endpoints advertised for a locator
- download: Fetch and verify the content behind a locator
- locator: Convert a SHA-256 hash to a locator, or canonicalize a locator
- self-test: Validate configuration and lookup host connectivity
- config: Configuration management

Defaults for the lookup host and credential may come from the
environment (NANOSEEK_LOOKUP_HOST, NANOSEEK_CREDENTIAL) or a ``.env`` file.
"""

import argparse
import asyncio
import json
import os
import re
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from . import __version__
from .api import download, resolve
from .audit_logger import AuditLogger
from .config import (
    FetchConfig,
    LoggingConfig,
    LookupConfig,
    NanoSeekConfig,
    RetryConfig,
)
from .exceptions import NanoSeekError
from .locator import hash_from_locator, locator_from_hash
from .self_test import SelfTest, run_self_test


ENV_LOOKUP_HOST = "NANOSEEK_LOOKUP_HOST"
ENV_CREDENTIAL = "NANOSEEK_CREDENTIAL"
DEFAULT_CONFIG_PATH = Path.home() / ".nanoseek" / "config.json"
HEX_HASH_PATTERN = re.compile(r"^[0-9a-fA-F]{64}$")


def create_default_config(lookup_host: Optional[str] = None) -> NanoSeekConfig:
    """
    Create a default configuration.

    Args:
        lookup_host: Optional lookup host overriding the built-in default

    Returns:
        NanoSeekConfig with default settings
    """
    config = NanoSeekConfig()
    if lookup_host:
        config.lookup.host = lookup_host
    return config


def load_config_from_file(config_path: Path) -> Optional[NanoSeekConfig]:
    """
    Load configuration from a JSON file.

    Missing sections and keys fall back to their defaults.

    Args:
        config_path: Path to the configuration file

    Returns:
        NanoSeekConfig if successful, None otherwise
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        defaults = NanoSeekConfig()

        lookup_data = data.get("lookup", {})
        lookup = LookupConfig(
            host=lookup_data.get("host", defaults.lookup.host),
            provider=lookup_data.get("provider", defaults.lookup.provider),
            timeout_seconds=float(
                lookup_data.get("timeout_seconds", defaults.lookup.timeout_seconds)
            ),
            credential_header=lookup_data.get(
                "credential_header", defaults.lookup.credential_header
            ),
        )

        fetch_data = data.get("fetch", {})
        fetch = FetchConfig(
            timeout_seconds=float(
                fetch_data.get("timeout_seconds", defaults.fetch.timeout_seconds)
            ),
            follow_redirects=bool(
                fetch_data.get("follow_redirects", defaults.fetch.follow_redirects)
            ),
        )

        retry_data = data.get("retry", {})
        retry = RetryConfig(
            max_retries=int(retry_data.get("max_retries", defaults.retry.max_retries)),
            base_delay_seconds=float(
                retry_data.get("base_delay_seconds", defaults.retry.base_delay_seconds)
            ),
            max_delay_seconds=float(
                retry_data.get("max_delay_seconds", defaults.retry.max_delay_seconds)
            ),
            retryable_errors=list(
                retry_data.get("retryable_errors", defaults.retry.retryable_errors)
            ),
        )

        logging_data = data.get("logging", {})
        logging_config = LoggingConfig(
            level=logging_data.get("level", defaults.logging.level),
            audit_mode=logging_data.get("audit_mode", defaults.logging.audit_mode),
            audit_signing_key=logging_data.get("audit_signing_key"),
            output_format=logging_data.get("output_format", defaults.logging.output_format),
        )

        return NanoSeekConfig(
            lookup=lookup,
            fetch=fetch,
            retry=retry,
            logging=logging_config,
        )

    except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return None
    except FileNotFoundError:
        return None


def save_config_to_file(config: NanoSeekConfig, config_path: Path) -> bool:
    """
    Save configuration to a JSON file.

    Args:
        config: NanoSeekConfig to save
        config_path: Path to save the configuration

    Returns:
        True if successful, False otherwise
    """
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "lookup": {
                "host": config.lookup.host,
                "provider": config.lookup.provider,
                "timeout_seconds": config.lookup.timeout_seconds,
                "credential_header": config.lookup.credential_header,
            },
            "fetch": {
                "timeout_seconds": config.fetch.timeout_seconds,
                "follow_redirects": config.fetch.follow_redirects,
            },
            "retry": {
                "max_retries": config.retry.max_retries,
                "base_delay_seconds": config.retry.base_delay_seconds,
                "max_delay_seconds": config.retry.max_delay_seconds,
                "retryable_errors": config.retry.retryable_errors,
            },
            "logging": {
                "level": config.logging.level,
                "audit_mode": config.logging.audit_mode,
                "audit_signing_key": config.logging.audit_signing_key,
                "output_format": config.logging.output_format,
            },
        }

        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        return True

    except (OSError, TypeError) as e:
        print(f"Error saving config: {e}", file=sys.stderr)
        return False


def _resolve_config(args: argparse.Namespace) -> Optional[NanoSeekConfig]:
    """Load the config named on the command line, or build the default one."""
    if getattr(args, "config", None):
        config = load_config_from_file(Path(args.config))
        if config is None:
            print(f"Error: Could not load config from {args.config}", file=sys.stderr)
        return config

    return create_default_config(os.environ.get(ENV_LOOKUP_HOST))


def _make_logger(config: NanoSeekConfig, verbose: bool) -> Optional[AuditLogger]:
    if not verbose:
        return None
    return AuditLogger.from_config(config.logging)


def _print_error(error: NanoSeekError) -> None:
    print(f"Error [{error.code}]: {error.message}", file=sys.stderr)


async def resolve_locator(
    locator: str,
    config: NanoSeekConfig,
    lookup_host: Optional[str] = None,
    credential: Optional[str] = None,
    as_json: bool = False,
    deadline_seconds: Optional[float] = None,
    verbose: bool = False,
) -> int:
    """
    Resolve a locator and print its endpoints.

    Returns:
        Exit code (0 on success, even with no endpoints; 1 on error)
    """
    try:
        endpoints = await resolve(
            locator,
            lookup_host,
            credential,
            config=config,
            logger=_make_logger(config, verbose),
            deadline_seconds=deadline_seconds,
        )
    except NanoSeekError as e:
        _print_error(e)
        return 1

    if as_json:
        print(json.dumps(endpoints, indent=2))
    elif not endpoints:
        print("No endpoints found", file=sys.stderr)
    else:
        for endpoint in endpoints:
            print(endpoint)
    return 0


async def download_locator(
    locator: str,
    config: NanoSeekConfig,
    output_file: Optional[Path] = None,
    lookup_host: Optional[str] = None,
    credential: Optional[str] = None,
    deadline_seconds: Optional[float] = None,
    verbose: bool = False,
) -> int:
    """
    Download verified content, writing it to a file or stdout.

    Returns:
        Exit code (0 on success, 1 on error)
    """
    try:
        result = await download(
            locator,
            lookup_host,
            credential,
            config=config,
            logger=_make_logger(config, verbose),
            deadline_seconds=deadline_seconds,
        )
    except NanoSeekError as e:
        _print_error(e)
        return 1

    if output_file is None:
        sys.stdout.buffer.write(result.payload)
        sys.stdout.buffer.flush()
    else:
        try:
            output_file.parent.mkdir(parents=True, exist_ok=True)
            output_file.write_bytes(result.payload)
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            return 1
        print(
            f"Wrote {len(result.payload)} bytes ({result.mime_type}) "
            f"from {result.endpoint} to {output_file}",
            file=sys.stderr,
        )

    if verbose:
        print(f"  Attempts: {len(result.attempts)}", file=sys.stderr)
        for attempt in result.attempts:
            print(f"    - {attempt.endpoint}: {attempt.outcome.value}", file=sys.stderr)
    return 0


def cmd_resolve(args: argparse.Namespace) -> int:
    """Handle the 'resolve' command."""
    config = _resolve_config(args)
    if config is None:
        return 1

    return asyncio.run(resolve_locator(
        locator=args.locator,
        config=config,
        lookup_host=args.host,
        credential=args.credential or os.environ.get(ENV_CREDENTIAL),
        as_json=args.json,
        deadline_seconds=args.deadline,
        verbose=args.verbose,
    ))


def cmd_download(args: argparse.Namespace) -> int:
    """Handle the 'download' command."""
    config = _resolve_config(args)
    if config is None:
        return 1

    return asyncio.run(download_locator(
        locator=args.locator,
        config=config,
        output_file=Path(args.output) if args.output else None,
        lookup_host=args.host,
        credential=args.credential or os.environ.get(ENV_CREDENTIAL),
        deadline_seconds=args.deadline,
        verbose=args.verbose,
    ))


def cmd_locator(args: argparse.Namespace) -> int:
    """Handle the 'locator' command."""
    value = args.value.strip()
    try:
        if HEX_HASH_PATTERN.match(value):
            print(locator_from_hash(value))
        else:
            content_hash = hash_from_locator(value)
            print(locator_from_hash(content_hash))
            print(content_hash.hex())
    except NanoSeekError as e:
        _print_error(e)
        return 1
    return 0


def cmd_self_test(args: argparse.Namespace) -> int:
    """Handle the 'self-test' command."""
    config = _resolve_config(args)
    if config is None:
        return 1

    result = asyncio.run(run_self_test(config=config, print_output=True))
    return 0 if result.success else 1


def cmd_config(args: argparse.Namespace) -> int:
    """Handle the 'config' command."""
    config_path = Path(args.path) if args.path else DEFAULT_CONFIG_PATH

    if args.action == "show":
        config = load_config_from_file(config_path)
        if config is None:
            print(f"No configuration found at: {config_path}")
            print("Use 'config init' to create a default configuration.")
            return 1

        print(f"Configuration from: {config_path}")
        print(f"  Lookup host: {config.lookup.host}")
        print(f"  Provider: {config.lookup.provider}")
        print(f"  Lookup timeout: {config.lookup.timeout_seconds}s")
        print(f"  Fetch timeout: {config.fetch.timeout_seconds}s")
        print(f"  Max retries: {config.retry.max_retries}")
        print(f"  Log level: {config.logging.level}")
        print(f"  Audit mode: {config.logging.audit_mode}")
        return 0

    elif args.action == "init":
        if config_path.exists() and not args.force:
            print(f"Configuration already exists at: {config_path}")
            print("Use --force to overwrite.")
            return 1

        config = create_default_config(os.environ.get(ENV_LOOKUP_HOST))
        if save_config_to_file(config, config_path):
            print(f"Configuration created at: {config_path}")
            return 0
        return 1

    elif args.action == "validate":
        config = load_config_from_file(config_path)
        if config is None:
            print(f"Error: Could not load config from {config_path}", file=sys.stderr)
            return 1

        validation = SelfTest(config).validate_config()
        for warning in validation.warnings:
            print(f"Warning: {warning}")
        if not validation.valid:
            for error in validation.errors:
                print(f"Error: {error}", file=sys.stderr)
            return 1

        print(f"Configuration at {config_path} is valid.")
        return 0

    return 1


def _add_lookup_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "locator",
        help="Locator to look up (e.g., XUT... or uhrp://XUT...)",
    )
    parser.add_argument(
        "--host",
        help="Lookup service host (default: config or NANOSEEK_LOOKUP_HOST)",
    )
    parser.add_argument(
        "--credential",
        help="Credential for the lookup service (default: NANOSEEK_CREDENTIAL)",
    )
    parser.add_argument(
        "--deadline",
        type=float,
        help="Give up after this many seconds",
    )
    parser.add_argument(
        "--config", "-c",
        help="Path to configuration file",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="nanoseek",
        description="Resolve content locators and download hash-verified content",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    resolve_parser = subparsers.add_parser(
        "resolve",
        help="List the endpoints advertised for a locator",
    )
    _add_lookup_arguments(resolve_parser)
    resolve_parser.add_argument(
        "--json",
        action="store_true",
        help="Print endpoints as a JSON array",
    )
    resolve_parser.set_defaults(func=cmd_resolve)

    download_parser = subparsers.add_parser(
        "download",
        help="Download and verify the content behind a locator",
    )
    _add_lookup_arguments(download_parser)
    download_parser.add_argument(
        "--output", "-o",
        help="File to write the content to (default: stdout)",
    )
    download_parser.set_defaults(func=cmd_download)

    locator_parser = subparsers.add_parser(
        "locator",
        help="Convert a hex SHA-256 hash to a locator, or canonicalize a locator",
    )
    locator_parser.add_argument(
        "value",
        help="64-character hex hash or a locator",
    )
    locator_parser.set_defaults(func=cmd_locator)

    self_test_parser = subparsers.add_parser(
        "self-test",
        help="Validate configuration and lookup host connectivity",
    )
    self_test_parser.add_argument(
        "--config", "-c",
        help="Path to configuration file",
    )
    self_test_parser.set_defaults(func=cmd_self_test)

    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
    )
    config_parser.add_argument(
        "action",
        choices=["show", "init", "validate"],
        help="Configuration action",
    )
    config_parser.add_argument(
        "--path", "-p",
        help="Path to configuration file",
    )
    config_parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Force overwrite existing configuration",
    )
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    load_dotenv()

    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
