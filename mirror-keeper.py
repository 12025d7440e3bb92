#!/usr/bin/env python3
"""
Mirror Keeper - Keep Gitea mirrors of GitHub/GitLab repositories current.

Every repository the configured accounts own is migrated into Gitea as a
private mirror the first time it is seen. On later runs the upstream
credentials stored in each mirror are refreshed, and a mirror sync is
triggered whenever they change.

Usage: mirror-keeper.py [-c config.json] [-v] [-d] [--timeout SECONDS]
"""

from __future__ import annotations

import sys
from typing import NoReturn

from argument_parser import parse_arguments
from logging_utils import Logger
from sync_orchestrator import SyncOrchestrator


def main() -> NoReturn:
    cfg = parse_arguments()
    logger = Logger(verbose=cfg.run.verbose)
    orchestrator = SyncOrchestrator(cfg, logger)
    sys.exit(orchestrator.run())


if __name__ == "__main__":
    main()
