#!/usr/bin/env python3
"""Command line argument parsing and configuration building."""

from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Any, Dict, List, Optional, Sequence

from config import Config, DestinationConfig, RunConfig, SourceConfig
from logging_utils import Logger
from security import SecurityValidator

# Exit codes
EXIT_CONFIG_ERROR = 2

DEFAULT_CONFIG_PATH = "config.json"


def _create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        description="Mirror GitHub/GitLab repositories into a Gitea instance",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s
  %(prog)s --config /etc/mirror-keeper/config.json --verbose
  %(prog)s --dry-run
  GITEA_TOKEN=... %(prog)s --timeout 60
        """,
    )
    parser.add_argument(
        "-c",
        "--config",
        dest="config_path",
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to the JSON configuration file (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        dest="verbose",
        help="Enable debug output (overrides the configuration file)",
    )
    parser.add_argument(
        "-d",
        "--dry-run",
        action="store_true",
        dest="dry_run",
        help="Report what would be migrated or updated without doing it",
    )
    parser.add_argument(
        "--timeout",
        dest="timeout_s",
        type=float,
        help="HTTP timeout in seconds for every API call (default: 30)",
    )
    return parser


def _read_config_file(path: str) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = json.load(handle)
    except OSError as e:
        raise ValueError(f"unable to open config file: {e}") from e
    except json.JSONDecodeError as e:
        raise ValueError(f"unable to parse config file: {e}") from e

    if not isinstance(data, dict):
        raise ValueError("config file must contain a JSON object")
    return data


def _get_str(data: Dict[str, Any], key: str, where: str) -> str:
    value = data.get(key, "")
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{where}: '{key}' must be a string")
    return value


def _build_sources(raw_sources: Any) -> List[SourceConfig]:
    if raw_sources is None:
        return []
    if not isinstance(raw_sources, list):
        raise ValueError("'sources' must be a list")

    sources: List[SourceConfig] = []
    for idx, raw in enumerate(raw_sources):
        where = f"sources[{idx}]"
        if not isinstance(raw, dict):
            raise ValueError(f"{where} must be an object")

        url = _get_str(raw, "url", where)
        if url:
            SecurityValidator.validate_url(url)
        sources.append(
            SourceConfig(
                type=_get_str(raw, "type", where).lower(),
                url=url,
                api_key=_get_str(raw, "api-key", where),
                user=_get_str(raw, "user", where),
                dest_owner=_get_str(raw, "dest-owner", where),
                dest_name_prefix=_get_str(raw, "dest-name-prefix", where),
            )
        )
    return sources


def _build_destination(raw: Any) -> DestinationConfig:
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError("'destination' must be an object")

    url = _get_str(raw, "url", "destination")
    if url:
        SecurityValidator.validate_url(url)

    # Fall back to the environment so the token can stay out of the file
    api_key = _get_str(raw, "api-key", "destination") or os.getenv("GITEA_TOKEN", "")

    return DestinationConfig(
        url=url,
        api_key=api_key,
        data_path=_get_str(raw, "data-path", "destination"),
    )


def _resolve_timeout(data: Dict[str, Any], override: Optional[float]) -> float:
    timeout = override if override is not None else data.get("timeout", RunConfig.timeout)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
        raise ValueError("'timeout' must be a number of seconds")
    if timeout <= 0 or timeout > 600:
        raise ValueError("timeout must be between 0 and 600 seconds")
    return float(timeout)


def build_config(
    data: Dict[str, Any],
    verbose: bool = False,
    dry_run: bool = False,
    timeout: Optional[float] = None,
) -> Config:
    """Build a Config from the decoded JSON document plus CLI overrides."""
    file_verbose = data.get("verbose", False)
    if not isinstance(file_verbose, bool):
        raise ValueError("'verbose' must be a boolean")

    return Config(
        sources=_build_sources(data.get("sources")),
        destination=_build_destination(data.get("destination")),
        run=RunConfig(
            verbose=verbose or file_verbose,
            dry_run=dry_run,
            timeout=_resolve_timeout(data, timeout),
        ),
    )


def parse_arguments(argv: Optional[Sequence[str]] = None) -> Config:
    """Parse command line arguments and return configuration object."""
    parser = _create_argument_parser()
    args = parser.parse_args(argv)

    try:
        data = _read_config_file(args.config_path)
        return build_config(
            data, verbose=args.verbose, dry_run=args.dry_run, timeout=args.timeout_s
        )
    except ValueError as e:
        logger = Logger(verbose=args.verbose)
        logger.security_event(
            "CONFIG_VALIDATION_FAILED", f"configuration validation failed: {e}"
        )
        logger.error(f"unable to read configuration: {e}")
        sys.exit(EXIT_CONFIG_ERROR)
