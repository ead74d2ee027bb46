#!/usr/bin/env python3
"""Security validation utilities for inclusify."""

import re


class SecurityValidator:
    """Input validation and log redaction."""

    MAX_REPO_NAME_LENGTH = 100
    MAX_OWNER_LENGTH = 39
    MAX_BRANCH_NAME_LENGTH = 255

    SAFE_REPO_NAME_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")
    SAFE_OWNER_PATTERN = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?$")
    # Subset of git-check-ref-format rules that matter for branch names
    UNSAFE_BRANCH_PATTERN = re.compile(r"(\.\.|@\{|[\s~^:?*\[\\]|//|^/|/$|\.lock$|^-)")

    @staticmethod
    def _check_control_chars(value: str, what: str) -> None:
        if "\x00" in value or any(ord(c) < 32 or ord(c) == 127 for c in value):
            raise ValueError(f"{what} contains null bytes or control characters")

    @classmethod
    def validate_repo_name(cls, name: str) -> str:
        """Validate a repository name."""
        if not name or not isinstance(name, str):
            raise ValueError("Repository name must be a non-empty string")

        if len(name) > cls.MAX_REPO_NAME_LENGTH:
            raise ValueError(
                f"Repository name exceeds maximum length of {cls.MAX_REPO_NAME_LENGTH}"
            )

        cls._check_control_chars(name, "Repository name")

        if name in (".", "..") or not cls.SAFE_REPO_NAME_PATTERN.match(name):
            raise ValueError("Repository name contains invalid characters")

        return name

    @classmethod
    def validate_owner(cls, owner: str) -> str:
        """Validate a user or organization login."""
        if not owner or not isinstance(owner, str):
            raise ValueError("Owner must be a non-empty string")

        if len(owner) > cls.MAX_OWNER_LENGTH:
            raise ValueError(f"Owner exceeds maximum length of {cls.MAX_OWNER_LENGTH}")

        cls._check_control_chars(owner, "Owner")

        if not cls.SAFE_OWNER_PATTERN.match(owner):
            raise ValueError("Owner contains invalid characters")

        return owner

    @classmethod
    def validate_branch_name(cls, branch: str) -> str:
        """Validate a branch name so it can be used in refs and git commands."""
        if not branch or not isinstance(branch, str):
            raise ValueError("Branch name must be a non-empty string")

        if len(branch) > cls.MAX_BRANCH_NAME_LENGTH:
            raise ValueError(
                f"Branch name exceeds maximum length of {cls.MAX_BRANCH_NAME_LENGTH}"
            )

        cls._check_control_chars(branch, "Branch name")

        if cls.UNSAFE_BRANCH_PATTERN.search(branch):
            raise ValueError(f"Branch name '{branch}' is not a valid git ref name")

        return branch

    @classmethod
    def sanitize_for_logging(cls, message: str) -> str:
        """Sanitize message for safe logging by removing potential credentials."""
        if not message:
            return message

        patterns = [
            (r"https://[^:/@\s]+:[^@\s]+@", "https://[REDACTED]@"),  # URLs with credentials
            (r"token[=:\s]+[^\s]+", "token=[REDACTED]"),
            (r"password[=:\s]+[^\s]+", "password=[REDACTED]"),
            (r"gh[pousr]_[A-Za-z0-9_]+", "[GITHUB_TOKEN_REDACTED]"),
            (r"github_pat_[A-Za-z0-9_]+", "[GITHUB_TOKEN_REDACTED]"),
        ]

        sanitized = message
        for pattern, replacement in patterns:
            sanitized = re.sub(pattern, replacement, sanitized, flags=re.IGNORECASE)

        return sanitized
