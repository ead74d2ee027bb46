#!/usr/bin/env python3
"""Data model for the GitHub objects inclusify reads and writes.

Optional protection sub-rules are modelled as ``None`` when GitHub does not
report them, never as empty placeholders, so that a copy of a ruleset can
not gain rules its source did not have.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def branch_ref(branch: str) -> str:
    """Return the fully qualified ref name of a branch."""
    return f"refs/heads/{branch}"


@dataclass
class Reference:
    """Named pointer to a commit."""
    ref: str
    sha: str


@dataclass
class PullRequest:
    number: int
    url: str
    html_url: str
    state: str
    base_ref: str
    base_label: str = ""


@dataclass
class NewPullRequest:
    title: str
    head: str
    base: str
    body: str
    maintainer_can_modify: bool = True


@dataclass
class MergeResult:
    merged: bool
    message: str = ""
    sha: Optional[str] = None


@dataclass
class RequiredStatusChecks:
    strict: bool
    contexts: List[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: Optional[Dict[str, Any]]) -> Optional["RequiredStatusChecks"]:
        if data is None:
            return None
        return cls(
            strict=bool(data.get("strict", False)),
            contexts=list(data.get("contexts") or []),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {"strict": self.strict, "contexts": list(self.contexts)}


@dataclass
class DismissalRestrictions:
    users: List[str] = field(default_factory=list)
    teams: List[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: Optional[Dict[str, Any]]) -> Optional["DismissalRestrictions"]:
        if data is None:
            return None
        return cls(
            users=_logins(data.get("users")),
            teams=_slugs(data.get("teams")),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {"users": list(self.users), "teams": list(self.teams)}


@dataclass
class PullRequestReviews:
    dismiss_stale_reviews: bool = False
    require_code_owner_reviews: bool = False
    required_approving_review_count: int = 0
    dismissal_restrictions: Optional[DismissalRestrictions] = None

    @classmethod
    def from_api(cls, data: Optional[Dict[str, Any]]) -> Optional["PullRequestReviews"]:
        if data is None:
            return None
        return cls(
            dismiss_stale_reviews=bool(data.get("dismiss_stale_reviews", False)),
            require_code_owner_reviews=bool(
                data.get("require_code_owner_reviews", False)
            ),
            required_approving_review_count=int(
                data.get("required_approving_review_count") or 0
            ),
            dismissal_restrictions=DismissalRestrictions.from_api(
                data.get("dismissal_restrictions")
            ),
        )

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "dismiss_stale_reviews": self.dismiss_stale_reviews,
            "require_code_owner_reviews": self.require_code_owner_reviews,
            "required_approving_review_count": self.required_approving_review_count,
        }
        if self.dismissal_restrictions is not None:
            payload["dismissal_restrictions"] = self.dismissal_restrictions.to_payload()
        return payload


@dataclass
class BranchRestrictions:
    """Users, teams and apps allowed to push to a protected branch."""
    users: List[str] = field(default_factory=list)
    teams: List[str] = field(default_factory=list)
    apps: List[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: Optional[Dict[str, Any]]) -> Optional["BranchRestrictions"]:
        if data is None:
            return None
        return cls(
            users=_logins(data.get("users")),
            teams=_slugs(data.get("teams")),
            apps=_slugs(data.get("apps")),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "users": list(self.users),
            "teams": list(self.teams),
            "apps": list(self.apps),
        }


@dataclass
class BranchProtection:
    """Protection ruleset as read from a branch."""
    required_status_checks: Optional[RequiredStatusChecks] = None
    required_pull_request_reviews: Optional[PullRequestReviews] = None
    enforce_admins: Optional[bool] = None
    restrictions: Optional[BranchRestrictions] = None
    required_linear_history: Optional[bool] = None
    allow_force_pushes: Optional[bool] = None
    allow_deletions: Optional[bool] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "BranchProtection":
        """Build a ruleset from the JSON of GET /branches/{branch}/protection."""
        return cls(
            required_status_checks=RequiredStatusChecks.from_api(
                data.get("required_status_checks")
            ),
            required_pull_request_reviews=PullRequestReviews.from_api(
                data.get("required_pull_request_reviews")
            ),
            enforce_admins=_enabled(data.get("enforce_admins")),
            restrictions=BranchRestrictions.from_api(data.get("restrictions")),
            required_linear_history=_enabled(data.get("required_linear_history")),
            allow_force_pushes=_enabled(data.get("allow_force_pushes")),
            allow_deletions=_enabled(data.get("allow_deletions")),
        )


@dataclass
class ProtectionRequest:
    """Body of PUT /branches/{branch}/protection."""
    required_status_checks: Optional[RequiredStatusChecks] = None
    required_pull_request_reviews: Optional[PullRequestReviews] = None
    enforce_admins: Optional[bool] = None
    restrictions: Optional[BranchRestrictions] = None
    required_linear_history: Optional[bool] = None
    allow_force_pushes: Optional[bool] = None
    allow_deletions: Optional[bool] = None

    def to_payload(self) -> Dict[str, Any]:
        # GitHub requires these four keys on every update, null disables them
        payload: Dict[str, Any] = {
            "required_status_checks": _payload_or_none(self.required_status_checks),
            "enforce_admins": self.enforce_admins,
            "required_pull_request_reviews": _payload_or_none(
                self.required_pull_request_reviews
            ),
            "restrictions": _payload_or_none(self.restrictions),
        }
        for key in ("required_linear_history", "allow_force_pushes", "allow_deletions"):
            value = getattr(self, key)
            if value is not None:
                payload[key] = value
        return payload


def _payload_or_none(obj: Any) -> Optional[Dict[str, Any]]:
    return None if obj is None else obj.to_payload()


def _enabled(data: Optional[Dict[str, Any]]) -> Optional[bool]:
    if data is None:
        return None
    return bool(data.get("enabled", False))


def _logins(items: Optional[List[Dict[str, Any]]]) -> List[str]:
    return [item["login"] for item in items or [] if item.get("login")]


def _slugs(items: Optional[List[Dict[str, Any]]]) -> List[str]:
    return [item["slug"] for item in items or [] if item.get("slug")]
