#!/usr/bin/env python3
"""Configuration dataclasses and constants for inclusify."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

VERSION = "0.2.0"

ENV_PREFIX = "INCLUSIFY_"

DEFAULT_BASE = "master"
DEFAULT_TARGET = "main"
DEFAULT_API_URL = "https://api.github.com"

# Branch the reference rewrites are pushed to before being merged into target
TEMP_BRANCH = "update-references"

# Version-control metadata and build manifests are never rewritten
ALWAYS_EXCLUDED: Tuple[str, ...] = (".git/", "go.mod", "go.sum")

CI_PATHS: Tuple[str, ...] = (".circleci", ".github", ".teamcity", ".travis.yml")
CI_SUFFIXES: Tuple[str, ...] = (".yml", ".yaml")

REQUEST_TIMEOUT_S = 10
CLONE_TIMEOUT_S = 300
PUSH_TIMEOUT_S = 600

COMMIT_AUTHOR_NAME = "Inclusive Language"
MERGE_METHOD = "squash"


@dataclass(frozen=True)
class Config:
    """Run parameters for a single inclusify invocation."""
    command: str
    owner: str
    repo: str
    token: str
    base: str = DEFAULT_BASE
    target: str = DEFAULT_TARGET
    exclusions: Tuple[str, ...] = ALWAYS_EXCLUDED
    api_url: str = DEFAULT_API_URL
    clone_temp_dir: Optional[str] = None
    pull_number: Optional[int] = None

    @property
    def user_exclusions(self) -> Tuple[str, ...]:
        """Exclusions passed in by the user, without the built-in ones."""
        return tuple(e for e in self.exclusions if e not in ALWAYS_EXCLUDED)

    @property
    def commit_author_email(self) -> str:
        return f"inclusive-language@{self.owner}.com"
