#!/usr/bin/env python3
"""Bring the destination in line with each repository descriptor."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

from exceptions import AlreadyExistsError, MirrorError
from gitea_destination import GiteaDestination
from logging_utils import Logger
from mirror_credentials import MirrorCredentialRotator
from repository import RepositoryDescriptor


class MirrorOutcome(Enum):
    """What happened to one descriptor."""
    MIGRATED = "migrated"
    ALREADY_EXISTS = "already exists"
    SYNCED = "credentials updated and synced"
    UNCHANGED = "unchanged"
    FAILED = "failed"
    WOULD_MIGRATE = "would migrate"
    WOULD_ROTATE = "would update credentials and sync"


@dataclass
class ReconcileResult:
    repo: RepositoryDescriptor
    outcome: MirrorOutcome
    error: Optional[MirrorError] = None


@dataclass
class ReconcileReport:
    results: List[ReconcileResult] = field(default_factory=list)

    def count(self, outcome: MirrorOutcome) -> int:
        return sum(1 for result in self.results if result.outcome == outcome)

    @property
    def failures(self) -> List[ReconcileResult]:
        return [r for r in self.results if r.outcome == MirrorOutcome.FAILED]

    def summary(self) -> str:
        parts = [
            f"{outcome.value}: {self.count(outcome)}"
            for outcome in MirrorOutcome
            if self.count(outcome)
        ]
        return f"{len(self.results)} repositories ({', '.join(parts) or 'none'})"


class MirrorReconciler:
    """Per-descriptor state machine.

    absent  -> migrate (a 409 means someone else created it; left for next run)
    present -> rotate credentials -> sync only if the stored URL changed
    """

    def __init__(
        self,
        destination: GiteaDestination,
        rotator: MirrorCredentialRotator,
        logger: Optional[Logger] = None,
        dry_run: bool = False,
    ) -> None:
        self.destination = destination
        self.rotator = rotator
        self.logger = logger or Logger()
        self.dry_run = dry_run

    def reconcile(self, repo: RepositoryDescriptor) -> MirrorOutcome:
        owner, name = repo.key

        if not self.destination.repo_exists(owner, name):
            if self.dry_run:
                self.logger.info(f"repo {repo.full_name} does not exist, would migrate")
                return MirrorOutcome.WOULD_MIGRATE
            self.logger.info(f"repo {repo.full_name} does not exist, migrating")
            try:
                self.destination.migrate(repo)
            except AlreadyExistsError as e:
                self.logger.warn(f"{e}; deferring to the next run")
                return MirrorOutcome.ALREADY_EXISTS
            return MirrorOutcome.MIGRATED

        self.logger.info(f"repo {repo.full_name} exists, checking credentials")
        if self.dry_run:
            if self.rotator.plan(repo).changed:
                return MirrorOutcome.WOULD_ROTATE
            return MirrorOutcome.UNCHANGED

        if not self.rotator.rotate(repo):
            return MirrorOutcome.UNCHANGED

        self.destination.mirror_sync(owner, name)
        self.logger.info(f"sync triggered: {repo.full_name}")
        return MirrorOutcome.SYNCED

    def reconcile_all(self, repos: Iterable[RepositoryDescriptor]) -> ReconcileReport:
        """Reconcile every descriptor; one failure never stops the batch."""
        report = ReconcileReport()
        repos = list(repos)
        total = len(repos)

        for idx, repo in enumerate(repos, start=1):
            self.logger.debug(f"[{idx}/{total}] {repo.name} -> {repo.full_name}")
            try:
                outcome = self.reconcile(repo)
            except MirrorError as e:
                self.logger.error(f"unable to mirror repository {repo.full_name}: {e}")
                report.results.append(ReconcileResult(repo, MirrorOutcome.FAILED, e))
                continue
            report.results.append(ReconcileResult(repo, outcome))

        return report
