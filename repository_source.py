#!/usr/bin/env python3
"""Common interface for platforms repositories are mirrored from."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from config import SourceConfig
from exceptions import ConfigurationError
from logging_utils import Logger
from repository import RepositoryDescriptor
from utils import RateLimiter, build_destination_name

PAGE_SIZE = 100

# Names Gitea refuses and that cannot be used as a directory on disk
RESERVED_NAMES = frozenset({"", ".", ".."})


class RepositorySource(ABC):
    """A platform account whose repositories are exported as descriptors."""

    platform = "source"
    requests_per_minute = 60

    def __init__(
        self, config: SourceConfig, timeout: float, logger: Optional[Logger] = None
    ) -> None:
        for attr, option in (
            ("url", "url"),
            ("user", "user"),
            ("api_key", "api-key"),
            ("dest_owner", "dest-owner"),
        ):
            if not getattr(config, attr):
                raise ConfigurationError(f"{self.platform} source: {option} is not defined")

        self.config = config
        self.timeout = timeout
        self.logger = logger or Logger()
        self.rate_limiter = RateLimiter(
            max_requests_per_minute=self.requests_per_minute, logger=self.logger
        )

    @abstractmethod
    def connect(self) -> None:
        """Initialize the API client and check the credentials."""

    @abstractmethod
    def export(self) -> List[RepositoryDescriptor]:
        """Drain every page of the listing and return the descriptors."""

    def _describe(self, name: str, clone_url: str) -> Optional[RepositoryDescriptor]:
        if not name or not clone_url:
            self.logger.warn(
                f"skipping {self.platform} entry without name or clone url: {name!r}"
            )
            return None

        destination_name = build_destination_name(name, self.config.dest_name_prefix)
        if destination_name in RESERVED_NAMES:
            self.logger.warn(
                f"skipping {self.platform} repository {name!r}: "
                f"{destination_name!r} is not a usable mirror name"
            )
            return None

        return RepositoryDescriptor(
            name=name,
            clone_url=clone_url,
            clone_username=self.config.user,
            clone_password=self.config.api_key,
            destination_owner=self.config.dest_owner,
            destination_name=destination_name,
        )
