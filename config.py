#!/usr/bin/env python3
"""Configuration dataclasses for mirror-keeper."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List

DEFAULT_TIMEOUT_S = 30.0


class SourceType(Enum):
    """Supported source platforms."""
    GITHUB = "github"
    GITLAB = "gitlab"


@dataclass
class SourceConfig:
    """One entry of the "sources" list.

    ``type`` is kept as the raw string so that unknown platforms can be
    reported and skipped instead of failing the whole configuration.
    """
    type: str
    url: str = ""
    api_key: str = field(default="", repr=False)
    user: str = ""
    dest_owner: str = ""
    dest_name_prefix: str = ""


@dataclass
class DestinationConfig:
    """Gitea destination configuration."""
    url: str = ""
    api_key: str = field(default="", repr=False)
    data_path: str = ""


@dataclass
class RunConfig:
    """Run behavior configuration."""
    verbose: bool = False
    dry_run: bool = False
    timeout: float = DEFAULT_TIMEOUT_S


@dataclass
class Config:
    """Main configuration for mirroring sources into Gitea."""
    sources: List[SourceConfig]
    destination: DestinationConfig
    run: RunConfig = field(default_factory=RunConfig)
