#!/usr/bin/env python3
"""Utility functions for inclusify."""

import time
from typing import Iterable, List, Optional, Tuple

from logging_utils import Logger

# Lines naming a module path on one of these hosts are dependency imports
# and must keep their original branch name
IMPORT_PATH_MARKERS: Tuple[str, ...] = (
    "github.com",
    "gitlab.com",
    "bitbucket.org",
    "golang.org",
    "gopkg.in",
)


class RateLimiter:
    """Paces API calls to stay under a per-minute budget."""

    def __init__(self, max_requests_per_minute: int = 60, logger: Optional[Logger] = None):
        self.max_requests = max_requests_per_minute
        self.logger = logger
        self.requests: List[float] = []

    def wait_if_needed(self, operation_type: str = "API") -> None:
        """Wait if necessary to respect rate limits."""
        current_time = time.time()
        self._clean_old_requests(current_time)
        if len(self.requests) >= self.max_requests:
            wait_time = 60 - (current_time - self.requests[0])
            if wait_time > 0:
                if self.logger is not None:
                    self.logger.warn(
                        f"rate limit reached for {operation_type}, "
                        f"waiting {wait_time:.2f}s"
                    )
                time.sleep(wait_time)
                current_time = time.time()
                self._clean_old_requests(current_time)
        self.requests.append(current_time)

    def _clean_old_requests(self, current_time: float) -> None:
        """Remove requests older than 1 minute."""
        cutoff_time = current_time - 60
        self.requests = [
            req_time for req_time in self.requests if req_time > cutoff_time
        ]


def split_exclusions(raw: Optional[str], always: Iterable[str]) -> Tuple[str, ...]:
    """Split a comma separated exclusion list and append the built-in entries.

    Empty entries are dropped: ``"a,,b,"`` yields ``("a", "b", *always)``.
    """
    entries: List[str] = []
    for item in (raw or "").split(","):
        item = item.strip()
        if item and item not in entries:
            entries.append(item)
    for item in always:
        if item not in entries:
            entries.append(item)
    return tuple(entries)


def is_excluded(path: str, exclusions: Iterable[str]) -> bool:
    """Substring match of every exclusion entry against the full path."""
    return any(entry in path for entry in exclusions)


def is_import_line(line: str) -> bool:
    return any(marker in line for marker in IMPORT_PATH_MARKERS)


def replace_references(text: str, base: str, target: str) -> str:
    """Replace ``base`` with ``target`` on every line that is not an import."""
    lines = text.split("\n")
    return "\n".join(
        line if is_import_line(line) else line.replace(base, target)
        for line in lines
    )
