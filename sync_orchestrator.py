#!/usr/bin/env python3
"""Main orchestrator for mirroring source repositories into Gitea."""

from __future__ import annotations

from typing import Dict, List, Optional, Type

from config import Config, SourceConfig, SourceType
from exceptions import ConfigurationError, MirrorError
from gitea_destination import GiteaDestination
from github_source import GitHubSource
from gitlab_source import GitLabSource
from logging_utils import Logger
from mirror_credentials import MirrorCredentialRotator
from reconciler import MirrorOutcome, MirrorReconciler, ReconcileReport
from repository import RepositoryDescriptor
from repository_source import RepositorySource

# Exit codes
EXIT_SUCCESS = 0
EXIT_EXECUTION_ERROR = 1
EXIT_NO_SOURCES = 3
EXIT_NO_REPOSITORIES = 4
EXIT_DESTINATION_ERROR = 5

SOURCE_TYPES: Dict[str, Type[RepositorySource]] = {
    SourceType.GITHUB.value: GitHubSource,
    SourceType.GITLAB.value: GitLabSource,
}


class SyncOrchestrator:
    def __init__(self, cfg: Config, logger: Optional[Logger] = None) -> None:
        self.cfg = cfg
        self.logger = logger or Logger(verbose=cfg.run.verbose)
        self.report: Optional[ReconcileReport] = None

    def run(self) -> int:
        try:
            if not self.cfg.sources:
                self.logger.error("no sources provided")
                return EXIT_NO_SOURCES

            repositories = self.collect()
            if not repositories:
                self.logger.error("no repositories found")
                return EXIT_NO_REPOSITORIES

            try:
                destination = self._build_destination()
            except ConfigurationError as e:
                self.logger.error(f"unable to init Gitea destination: {e}")
                return EXIT_DESTINATION_ERROR

            reconciler = MirrorReconciler(
                destination,
                MirrorCredentialRotator(self.cfg.destination.data_path, self.logger),
                logger=self.logger,
                dry_run=self.cfg.run.dry_run,
            )
            self.report = reconciler.reconcile_all(repositories)

            self.logger.info(self.report.summary())
            if self.cfg.run.dry_run:
                self.logger.info("dry-run completed")
            elif self.report.count(MirrorOutcome.FAILED):
                self.logger.warn(
                    f"{self.report.count(MirrorOutcome.FAILED)} repositories failed; "
                    "re-run to retry"
                )
            self.logger.info("done")
            return EXIT_SUCCESS
        except Exception as e:
            self.logger.error(f"unexpected error: {e}")
            return EXIT_EXECUTION_ERROR

    def collect(self) -> List[RepositoryDescriptor]:
        """Export every configured source in order; failed sources are skipped."""
        repositories: List[RepositoryDescriptor] = []
        for source_cfg in self.cfg.sources:
            source_class = SOURCE_TYPES.get(source_cfg.type)
            if source_class is None:
                self.logger.warn(f"unknown source type: {source_cfg.type}")
                continue

            try:
                source = self._build_source(source_class, source_cfg)
                source.connect()
                repositories.extend(source.export())
            except MirrorError as e:
                self.logger.error(
                    f"unable to export {source_class.platform} repositories: {e}"
                )

        self.logger.info(f"found {len(repositories)} repositories to process")
        return repositories

    def _build_source(
        self, source_class: Type[RepositorySource], source_cfg: SourceConfig
    ) -> RepositorySource:
        return source_class(source_cfg, self.cfg.run.timeout, self.logger)

    def _build_destination(self) -> GiteaDestination:
        self.logger.info(f"init gitea API: {self.cfg.destination.url}")
        return GiteaDestination(
            self.cfg.destination, timeout=self.cfg.run.timeout, logger=self.logger
        )
