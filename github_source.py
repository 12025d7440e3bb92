#!/usr/bin/env python3
"""GitHub API wrapper for discovering the repositories a user owns."""

from __future__ import annotations

from typing import List, Optional

import github
import requests

from exceptions import SourceError
from repository import RepositoryDescriptor
from repository_source import PAGE_SIZE, RepositorySource


class GitHubSource(RepositorySource):
    """Lists the authenticated user's own repositories through PyGithub."""

    platform = "github"
    requests_per_minute = 50

    api: Optional[github.Github] = None

    def connect(self) -> None:
        self.logger.info(f"init github API: {self.config.url}")
        auth = github.Auth.Token(self.config.api_key)
        self.api = github.Github(
            base_url=self.config.url.rstrip("/"),
            auth=auth,
            per_page=PAGE_SIZE,
            timeout=self.timeout,
        )
        try:
            self.rate_limiter.wait_if_needed("GitHub API")
            login = self.api.get_user().login
        except github.BadCredentialsException as e:
            raise SourceError("authentication failed (github): invalid token") from e
        except (github.GithubException, requests.RequestException) as e:
            raise SourceError(f"failed to initialize github API: {e}") from e
        self.logger.debug(f"github user: {login}")

    def export(self) -> List[RepositoryDescriptor]:
        if self.api is None:
            raise SourceError("github API not initialized")

        repositories: List[RepositoryDescriptor] = []
        listing = self.api.get_user().get_repos(visibility="all", affiliation="owner")
        page = 0
        try:
            while True:
                self.logger.debug(f"querying github page {page + 1}")
                self.rate_limiter.wait_if_needed("GitHub API")
                repos = listing.get_page(page)
                if not repos:
                    break
                self.logger.debug(f"found github repos: {len(repos)}")
                for repo in repos:
                    descriptor = self._describe(
                        getattr(repo, "name", ""), getattr(repo, "clone_url", "")
                    )
                    if descriptor is not None:
                        repositories.append(descriptor)
                page += 1
        except (github.GithubException, requests.RequestException) as e:
            raise SourceError(f"failed to list github repositories: {e}") from e

        self.logger.info(f"found {len(repositories)} github repositories")
        return repositories
