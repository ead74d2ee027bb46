#!/usr/bin/env python3
"""Exception types raised by inclusify commands."""

from __future__ import annotations

from typing import Optional


class InclusifyError(Exception):
    """Base class for every error a command reports to the user."""


class ConfigError(InclusifyError):
    """Missing or invalid user input, raised before any network call."""


class ForgeError(InclusifyError):
    """A GitHub API call failed."""

    def __init__(
        self, operation: str, message: str, status: Optional[int] = None
    ) -> None:
        self.operation = operation
        self.status = status
        super().__init__(f"{operation}: {message}")


class NotFoundError(ForgeError):
    """The GitHub API answered 404 for the requested object."""

    def __init__(self, operation: str, message: str = "not found") -> None:
        super().__init__(operation, message, status=404)


class LocalOperationError(InclusifyError):
    """Temp directory, file or git subprocess failure."""


class MergeRejectedError(InclusifyError):
    """GitHub accepted the merge call but reported the PR as not merged."""

    def __init__(self, number: int, message: str = "") -> None:
        self.number = number
        detail = f": {message}" if message else ""
        super().__init__(f"merge rejected for PR #{number}{detail}")
