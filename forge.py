#!/usr/bin/env python3
"""Capability interfaces for talking to the Git forge.

Commands only depend on these protocols, so the production GitHub adapter
and the recording test double are interchangeable.
"""

from __future__ import annotations

from typing import List, Optional, Protocol

from models import (BranchProtection, MergeResult, NewPullRequest,
                    ProtectionRequest, PullRequest, Reference)


class GitRefs(Protocol):
    def get_ref(self, owner: str, repo: str, ref: str) -> Reference: ...

    def create_ref(self, owner: str, repo: str, reference: Reference) -> Reference: ...

    def delete_ref(self, owner: str, repo: str, ref: str) -> None: ...


class Repositories(Protocol):
    def edit_default_branch(self, owner: str, repo: str, branch: str) -> None: ...

    def get_branch_protection(
        self, owner: str, repo: str, branch: str
    ) -> BranchProtection: ...

    def update_branch_protection(
        self, owner: str, repo: str, branch: str, request: ProtectionRequest
    ) -> None: ...

    def remove_branch_protection(self, owner: str, repo: str, branch: str) -> None: ...


class PullRequests(Protocol):
    def list(
        self, owner: str, repo: str, base: str, state: str = "open"
    ) -> List[PullRequest]: ...

    def create(self, owner: str, repo: str, new_pull: NewPullRequest) -> PullRequest: ...

    def edit(
        self,
        owner: str,
        repo: str,
        number: int,
        base: Optional[str] = None,
        state: Optional[str] = None,
    ) -> PullRequest: ...

    def merge(
        self,
        owner: str,
        repo: str,
        number: int,
        commit_message: str,
        merge_method: str,
    ) -> MergeResult: ...


class Forge(Protocol):
    """Entry point grouping the three capability sets."""
    git: GitRefs
    repos: Repositories
    pulls: PullRequests
