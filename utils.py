#!/usr/bin/env python3
"""Utility functions for mirror-keeper."""

import re
import threading
import time
from typing import List, Optional

from logging_utils import Logger


class RateLimiter:
    """Sliding one-minute window limiting calls to a platform API."""

    def __init__(
        self, max_requests_per_minute: int = 60, logger: Optional[Logger] = None
    ):
        self.max_requests = max_requests_per_minute
        self.logger = logger or Logger()
        self.requests: List[float] = []
        self.lock = threading.Lock()

    def wait_if_needed(self, operation_type: str = "API") -> None:
        """Wait if necessary to respect rate limits."""
        current_time = time.time()

        with self.lock:
            self._clean_old_requests(current_time)
            if len(self.requests) >= self.max_requests:
                wait_time = 60 - (current_time - self.requests[0])
                if wait_time > 0:
                    self.logger.security_event(
                        "RATE_LIMIT_HIT",
                        f"rate limit reached for {operation_type}, "
                        f"waiting {wait_time:.2f}s",
                    )
                    time.sleep(wait_time)
                    current_time = time.time()
                    self._clean_old_requests(current_time)
            self.requests.append(current_time)

    def _clean_old_requests(self, current_time: float) -> None:
        cutoff_time = current_time - 60
        self.requests = [
            req_time for req_time in self.requests if req_time > cutoff_time
        ]


def sanitize_repo_name(name: str) -> str:
    """Replace runs of characters Gitea rejects with a single dash.

    Names made only of accepted characters are returned unchanged.
    """
    return re.sub(r"[^A-Za-z0-9._-]+", "-", name)


def build_destination_name(source_name: str, prefix: Optional[str]) -> str:
    """Return the mirror name for a source repository.

    The prefix is prepended verbatim, e.g. ('tools', 'gh-') -> 'gh-tools'.
    """
    return sanitize_repo_name(f"{prefix or ''}{source_name}")
