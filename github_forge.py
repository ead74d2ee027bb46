#!/usr/bin/env python3
"""GitHub API adapter implementing the forge capability interfaces."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, TypeVar
from urllib.parse import quote

import github
import requests

if TYPE_CHECKING:
    from github.Repository import Repository

from config import DEFAULT_API_URL, REQUEST_TIMEOUT_S
from errors import ConfigError, ForgeError, NotFoundError
from logging_utils import Logger
from models import (BranchProtection, MergeResult, NewPullRequest,
                    ProtectionRequest, PullRequest, Reference)
from security import SecurityValidator
from utils import RateLimiter

T = TypeVar("T")


def _to_pull_request(pull: Any) -> PullRequest:
    base = getattr(pull, "base", None)
    return PullRequest(
        number=pull.number,
        url=pull.url or "",
        html_url=pull.html_url or "",
        state=pull.state or "",
        base_ref=getattr(base, "ref", "") or "",
        base_label=getattr(base, "label", "") or "",
    )


class GitHubForge:
    """Wrapper around PyGithub exposing ``git``, ``repos`` and ``pulls``.

    Every call gets its own timeout. Branch protection goes through the
    REST endpoints directly so the request body can be sent exactly as
    translated, with null sub-rules kept null.
    """

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        logger: Optional[Logger] = None,
        timeout: int = REQUEST_TIMEOUT_S,
    ) -> None:
        if not token:
            raise ConfigError("cannot create GitHub client with an empty access token")
        self.api_url = api_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.logger = logger or Logger()
        auth = github.Auth.Token(token)
        if self.api_url != DEFAULT_API_URL:
            self.api = github.Github(base_url=self.api_url, auth=auth, timeout=timeout)
        else:
            self.api = github.Github(auth=auth, timeout=timeout)
        self.rate_limiter = RateLimiter(max_requests_per_minute=50, logger=self.logger)

        self.git = GitHubRefs(self)
        self.repos = GitHubRepositories(self)
        self.pulls = GitHubPullRequests(self)

    def repository(self, owner: str, repo: str) -> "Repository":
        """Return a lazy repository handle; no request is made until used."""
        return self.api.get_repo(f"{owner}/{repo}", lazy=True)

    def call(self, operation: str, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run a PyGithub call, translating its errors into ForgeError."""
        self.rate_limiter.wait_if_needed("GitHub API")
        try:
            return func(*args, **kwargs)
        except github.UnknownObjectException as e:
            raise NotFoundError(operation, self._describe(e)) from e
        except github.GithubException as e:
            if e.status == 404:
                raise NotFoundError(operation, self._describe(e)) from e
            raise ForgeError(operation, self._describe(e), status=e.status) from e
        except requests.RequestException as e:
            raise ForgeError(operation, f"request failed: {e}") from e

    def _get_api_headers(self) -> Dict[str, str]:
        """Get standard API headers for GitHub requests."""
        return {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self.token}",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def request(
        self, operation: str, method: str, path: str, payload: Optional[dict] = None
    ) -> Optional[Dict[str, Any]]:
        """Send a raw REST request and return the decoded JSON body, if any."""
        url = f"{self.api_url}{path}"
        self.rate_limiter.wait_if_needed("GitHub API")
        try:
            response = requests.request(
                method,
                url,
                headers=self._get_api_headers(),
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ForgeError(operation, f"failed to contact github api: {e}") from e

        if response.status_code == 404:
            raise NotFoundError(operation, self._response_message(response))
        if response.status_code == 401:
            raise ForgeError(
                operation,
                "access denied (401): credentials are invalid or lack access to this repo",
                status=401,
            )
        if response.status_code >= 400:
            raise ForgeError(
                operation,
                f"{response.status_code} {self._response_message(response)}",
                status=response.status_code,
            )
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    @staticmethod
    def _response_message(response: requests.Response) -> str:
        try:
            return str(response.json().get("message", response.reason))
        except ValueError:
            return str(response.reason)

    @staticmethod
    def _describe(error: github.GithubException) -> str:
        data = error.data if isinstance(error.data, dict) else {}
        message = data.get("message") or str(error)
        return SecurityValidator.sanitize_for_logging(f"{error.status} {message}")


class GitHubRefs:
    """Git references endpoints."""

    def __init__(self, forge: GitHubForge) -> None:
        self.forge = forge

    def get_ref(self, owner: str, repo: str, ref: str) -> Reference:
        repository = self.forge.repository(owner, repo)
        # PyGithub expects the ref without its "refs/" prefix
        short_ref = ref[len("refs/"):] if ref.startswith("refs/") else ref
        git_ref = self.forge.call(
            f"get ref {ref}", repository.get_git_ref, short_ref
        )
        return Reference(ref=git_ref.ref, sha=git_ref.object.sha)

    def create_ref(self, owner: str, repo: str, reference: Reference) -> Reference:
        repository = self.forge.repository(owner, repo)
        git_ref = self.forge.call(
            f"create ref {reference.ref}",
            repository.create_git_ref,
            ref=reference.ref,
            sha=reference.sha,
        )
        return Reference(ref=git_ref.ref, sha=git_ref.object.sha)

    def delete_ref(self, owner: str, repo: str, ref: str) -> None:
        short_ref = ref[len("refs/"):] if ref.startswith("refs/") else ref
        self.forge.request(
            f"delete ref {ref}",
            "DELETE",
            f"/repos/{owner}/{repo}/git/refs/{quote(short_ref)}",
        )


class GitHubRepositories:
    """Repository settings and branch protection endpoints."""

    def __init__(self, forge: GitHubForge) -> None:
        self.forge = forge

    @staticmethod
    def _protection_path(owner: str, repo: str, branch: str) -> str:
        return f"/repos/{owner}/{repo}/branches/{quote(branch)}/protection"

    def edit_default_branch(self, owner: str, repo: str, branch: str) -> None:
        repository = self.forge.repository(owner, repo)
        self.forge.call(
            f"edit default branch of {owner}/{repo}",
            repository.edit,
            default_branch=branch,
        )

    def get_branch_protection(
        self, owner: str, repo: str, branch: str
    ) -> BranchProtection:
        data = self.forge.request(
            f"get branch protection of {branch}",
            "GET",
            self._protection_path(owner, repo, branch),
        )
        return BranchProtection.from_api(data or {})

    def update_branch_protection(
        self, owner: str, repo: str, branch: str, request: ProtectionRequest
    ) -> None:
        self.forge.request(
            f"update branch protection of {branch}",
            "PUT",
            self._protection_path(owner, repo, branch),
            payload=request.to_payload(),
        )

    def remove_branch_protection(self, owner: str, repo: str, branch: str) -> None:
        self.forge.request(
            f"remove branch protection of {branch}",
            "DELETE",
            self._protection_path(owner, repo, branch),
        )


class GitHubPullRequests:
    """Pull request endpoints."""

    def __init__(self, forge: GitHubForge) -> None:
        self.forge = forge

    def list(
        self, owner: str, repo: str, base: str, state: str = "open"
    ) -> List[PullRequest]:
        repository = self.forge.repository(owner, repo)

        def _collect() -> List[PullRequest]:
            # PaginatedList keeps requesting pages until GitHub stops
            # returning a "next" link
            return [
                _to_pull_request(pull)
                for pull in repository.get_pulls(state=state, base=base)
            ]

        return self.forge.call(f"list {state} pull requests against {base}", _collect)

    def create(self, owner: str, repo: str, new_pull: NewPullRequest) -> PullRequest:
        repository = self.forge.repository(owner, repo)
        pull = self.forge.call(
            f"open pull request {new_pull.head} -> {new_pull.base}",
            repository.create_pull,
            base=new_pull.base,
            head=new_pull.head,
            title=new_pull.title,
            body=new_pull.body,
            maintainer_can_modify=new_pull.maintainer_can_modify,
        )
        return _to_pull_request(pull)

    def edit(
        self,
        owner: str,
        repo: str,
        number: int,
        base: Optional[str] = None,
        state: Optional[str] = None,
    ) -> PullRequest:
        repository = self.forge.repository(owner, repo)
        operation = f"edit pull request #{number}"
        pull = self.forge.call(operation, repository.get_pull, number)
        changes: Dict[str, str] = {}
        if base is not None:
            changes["base"] = base
        if state is not None:
            changes["state"] = state
        self.forge.call(operation, pull.edit, **changes)
        return _to_pull_request(pull)

    def merge(
        self,
        owner: str,
        repo: str,
        number: int,
        commit_message: str,
        merge_method: str,
    ) -> MergeResult:
        repository = self.forge.repository(owner, repo)
        operation = f"merge pull request #{number}"
        pull = self.forge.call(operation, repository.get_pull, number)
        status = self.forge.call(
            operation,
            pull.merge,
            commit_message=commit_message,
            merge_method=merge_method,
        )
        return MergeResult(
            merged=bool(status.merged),
            message=status.message or "",
            sha=status.sha,
        )
