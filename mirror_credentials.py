#!/usr/bin/env python3
"""Keep the credentials stored in a Gitea mirror's origin URL current."""

from __future__ import annotations

import contextlib
import os
import stat
import tempfile
from dataclasses import dataclass, field
from typing import Optional

from exceptions import ConfigNotFoundError, ConfigWriteError, OriginNotFoundError
from git_config import OriginEntry, find_origin_url, replace_origin_url, with_credentials
from logging_utils import Logger
from repository import RepositoryDescriptor
from security import SecurityValidator


@dataclass(frozen=True)
class CredentialUpdate:
    """Result of inspecting one mirror's config file."""
    config_path: str
    contents: str = field(repr=False)
    origin: OriginEntry = field(repr=False)
    new_url: str = field(repr=False)

    @property
    def changed(self) -> bool:
        return self.origin.url != self.new_url


class MirrorCredentialRotator:
    """Rewrites the credentials embedded in a mirror's stored origin URL.

    Gitea keeps each mirror as a bare repository below
    ``<data-path>/git/repositories`` and stores the upstream URL, including
    credentials, in that repository's ``config``. Tokens rotate upstream, so
    the stored URL is brought in line with the descriptor on every run.
    """

    def __init__(self, data_path: str, logger: Optional[Logger] = None) -> None:
        self.data_path = data_path
        self.logger = logger or Logger()

    def config_path(self, owner: str, name: str) -> str:
        """Path of the mirror's Git config; Gitea stores paths lower-cased."""
        if not self.data_path:
            raise ConfigNotFoundError("destination data path is not configured")
        try:
            owner_segment = SecurityValidator.validate_path_segment(owner.lower())
            repo_segment = SecurityValidator.validate_path_segment(
                f"{name.lower()}.git"
            )
        except ValueError as e:
            self.logger.security_event(
                "PATH_VALIDATION_FAILED", f"refusing config path for {owner}/{name}: {e}"
            )
            raise ConfigNotFoundError(f"invalid repository path: {e}") from e

        return os.path.join(
            self.data_path, "git", "repositories", owner_segment, repo_segment, "config"
        )

    def plan(self, repo: RepositoryDescriptor) -> CredentialUpdate:
        """Work out the new origin URL without touching the file."""
        path = self.config_path(repo.destination_owner, repo.destination_name)
        try:
            with open(path, "r", encoding="utf-8", newline="") as handle:
                contents = handle.read()
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigNotFoundError(f"unable to read {path}: {e}") from e

        origin = find_origin_url(contents)
        if origin is None:
            raise OriginNotFoundError(f"origin url not found in {path}")

        new_url = with_credentials(origin.url, repo.clone_username, repo.clone_password)
        return CredentialUpdate(
            config_path=path, contents=contents, origin=origin, new_url=new_url
        )

    def apply(self, update: CredentialUpdate) -> None:
        """Write the rewritten config to a sibling file and swap it in.

        The original config is left intact if any step fails.
        """
        contents = replace_origin_url(update.contents, update.origin, update.new_url)
        tmp_path = None
        try:
            mode = stat.S_IMODE(os.stat(update.config_path).st_mode)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                newline="",
                dir=os.path.dirname(update.config_path),
                prefix=".config-",
                delete=False,
            ) as handle:
                tmp_path = handle.name
                handle.write(contents)
            os.chmod(tmp_path, mode)
            os.replace(tmp_path, update.config_path)
        except OSError as e:
            if tmp_path is not None:
                with contextlib.suppress(OSError):
                    os.remove(tmp_path)
            raise ConfigWriteError(f"unable to write {update.config_path}: {e}") from e

    def rotate(self, repo: RepositoryDescriptor) -> bool:
        """Bring the stored credentials in line; return whether the file changed."""
        update = self.plan(repo)
        if not update.changed:
            self.logger.debug(f"credentials unchanged: {repo.full_name}")
            return False

        self.apply(update)
        self.logger.info(
            f"updated origin credentials: {repo.full_name} "
            f"(line {update.origin.line_number})"
        )
        return True
