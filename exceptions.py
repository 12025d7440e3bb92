#!/usr/bin/env python3
"""Exception hierarchy for mirror-keeper."""

from __future__ import annotations

from typing import Optional


class MirrorError(Exception):
    """Base exception for everything raised while mirroring."""


class ConfigurationError(MirrorError):
    """A required configuration field is missing or invalid."""


class SourceError(MirrorError):
    """A source platform could not be queried."""


class TransportError(MirrorError):
    """A call to the destination API failed or returned an unusable status."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProbeError(TransportError):
    """The existence check could not decide whether a repository exists."""


class SyncError(TransportError):
    """The destination refused a mirror-sync request."""


class ConflictError(MirrorError):
    """Benign conflict, left for a later run to resolve."""


class AlreadyExistsError(ConflictError):
    """The destination already has a repository with this owner and name."""


class MigrationError(MirrorError):
    """The destination rejected a migration.

    The string form is exactly the destination's message, or "unknown error".
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ParseError(MirrorError):
    """Unexpected response shape or unparsable Git configuration."""


class ConfigNotFoundError(ParseError):
    """The mirror's Git configuration file cannot be located or read."""


class OriginNotFoundError(ParseError):
    """The Git configuration has no [remote "origin"] url entry."""


class ConfigWriteError(MirrorError):
    """The rewritten Git configuration could not be persisted."""
