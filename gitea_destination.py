#!/usr/bin/env python3
"""Gitea API wrapper for probing, migrating and syncing mirrors."""

from __future__ import annotations

from typing import Any, Dict, Optional

import requests

from config import DEFAULT_TIMEOUT_S, DestinationConfig
from exceptions import (AlreadyExistsError, ConfigurationError, MigrationError,
                        ProbeError, SyncError, TransportError)
from logging_utils import Logger
from repository import RepositoryDescriptor

UNKNOWN_ERROR = "unknown error"

# Data imported alongside the git history on migration
MIGRATION_POLICY: Dict[str, Any] = {
    "service": "git",
    "mirror": True,
    "private": True,
    "issues": True,
    "labels": True,
    "milestones": True,
    "releases": True,
    "wiki": True,
    "pull_requests": True,
}


class GiteaDestination:
    """Thin client over the Gitea REST endpoints used for mirroring."""

    def __init__(
        self,
        config: DestinationConfig,
        timeout: float = DEFAULT_TIMEOUT_S,
        logger: Optional[Logger] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not config.url:
            raise ConfigurationError("destination url is not defined")
        if not config.api_key:
            raise ConfigurationError("destination api key is not defined")

        self.config = config
        self.timeout = timeout
        self.logger = logger or Logger()
        self.api_url = f"{config.url.rstrip('/')}/api/v1"
        self.session = session or requests.Session()
        self.session.headers.update(self._get_api_headers())

    def _get_api_headers(self) -> dict:
        return {
            "Accept": "application/json",
            "Authorization": f"token {self.config.api_key}",
        }

    def _repo_url(self, owner: str, name: str) -> str:
        return f"{self.api_url}/repos/{owner}/{name}"

    def repo_exists(self, owner: str, name: str) -> bool:
        url = self._repo_url(owner, name)
        try:
            r = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise ProbeError(f"failed to look up {owner}/{name}: {e}") from e

        if r.status_code == 200:
            return True
        if r.status_code == 404:
            return False
        raise ProbeError(
            f"unexpected status {r.status_code} looking up {owner}/{name}",
            status_code=r.status_code,
        )

    def migrate(self, repo: RepositoryDescriptor) -> None:
        """Create a new mirror of ``repo`` on the destination."""
        body = {
            "clone_addr": repo.clone_url,
            "auth_username": repo.clone_username,
            "auth_password": repo.clone_password,
            "repo_owner": repo.destination_owner,
            "repo_name": repo.destination_name,
            **MIGRATION_POLICY,
        }
        try:
            r = self.session.post(
                f"{self.api_url}/repos/migrate", json=body, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise TransportError(f"failed to migrate {repo.full_name}: {e}") from e

        if r.status_code == 201:
            self.logger.info(f"migrated: {repo.clone_url} -> {repo.full_name}")
            return
        if r.status_code == 409:
            raise AlreadyExistsError(
                f"repository {repo.full_name} already exists on the destination"
            )
        raise MigrationError(self._error_message(r), status_code=r.status_code)

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        """Extract Gitea's ``message`` field from an error response."""
        try:
            payload = response.json()
        except ValueError:
            return UNKNOWN_ERROR
        if isinstance(payload, dict):
            message = payload.get("message")
            if isinstance(message, str) and message:
                return message
        return UNKNOWN_ERROR

    def mirror_sync(self, owner: str, name: str) -> None:
        """Ask the destination to pull from upstream; completion is not awaited."""
        url = f"{self._repo_url(owner, name)}/mirror-sync"
        try:
            r = self.session.post(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportError(f"failed to trigger sync of {owner}/{name}: {e}") from e

        if not 200 <= r.status_code < 300:
            raise SyncError(
                f"mirror-sync of {owner}/{name} refused with status {r.status_code}",
                status_code=r.status_code,
            )
        self.logger.debug(f"mirror-sync accepted: {owner}/{name}")
