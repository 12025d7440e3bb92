#!/usr/bin/env python3
"""GitLab API wrapper for discovering the projects a user owns."""

from __future__ import annotations

from typing import List, Optional

import gitlab
import requests

from exceptions import SourceError
from repository import RepositoryDescriptor
from repository_source import PAGE_SIZE, RepositorySource


class GitLabSource(RepositorySource):
    """Lists owned GitLab projects through python-gitlab."""

    platform = "gitlab"
    requests_per_minute = 30  # Conservative GitLab rate limit

    api: Optional[gitlab.Gitlab] = None

    def connect(self) -> None:
        self.logger.info(f"init gitlab API: {self.config.url}")
        try:
            self.api = gitlab.Gitlab(
                url=self.config.url,
                private_token=self.config.api_key,
                timeout=self.timeout,
            )
            self.rate_limiter.wait_if_needed("GitLab API")
            self.api.auth()
        except gitlab.exceptions.GitlabAuthenticationError as e:
            raise SourceError(f"authentication error (gitlab): {e}") from e
        except (gitlab.exceptions.GitlabError, requests.RequestException) as e:
            raise SourceError(f"failed to initialize gitlab API: {e}") from e

    def export(self) -> List[RepositoryDescriptor]:
        if self.api is None:
            raise SourceError("gitlab API not initialized")

        repositories: List[RepositoryDescriptor] = []
        page = 1
        try:
            while True:
                self.logger.debug(f"querying gitlab page {page}")
                self.rate_limiter.wait_if_needed("GitLab API")
                projects = self.api.projects.list(
                    owned=True, page=page, per_page=PAGE_SIZE, get_all=False
                )
                if not projects:
                    break
                self.logger.debug(f"found gitlab projects: {len(projects)}")
                for project in projects:
                    descriptor = self._describe(
                        getattr(project, "name", ""),
                        getattr(project, "http_url_to_repo", ""),
                    )
                    if descriptor is not None:
                        repositories.append(descriptor)
                page += 1
        except (gitlab.exceptions.GitlabError, requests.RequestException) as e:
            raise SourceError(f"failed to list gitlab projects: {e}") from e

        self.logger.info(f"found {len(repositories)} gitlab projects")
        return repositories
