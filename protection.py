#!/usr/bin/env python3
"""Branch protection translation and copy between branches."""

from __future__ import annotations

from typing import Optional

from errors import NotFoundError
from forge import Forge
from logging_utils import Logger
from models import (BranchProtection, BranchRestrictions, DismissalRestrictions,
                    ProtectionRequest, PullRequestReviews, RequiredStatusChecks)

# GitHub rejects review enforcement with fewer than one approval
MIN_APPROVING_REVIEW_COUNT = 1


def _translate_status_checks(
    checks: Optional[RequiredStatusChecks],
) -> Optional[RequiredStatusChecks]:
    if checks is None:
        return None
    return RequiredStatusChecks(strict=checks.strict, contexts=list(checks.contexts))


def _translate_reviews(
    reviews: Optional[PullRequestReviews],
) -> Optional[PullRequestReviews]:
    if reviews is None:
        return None

    dismissal: Optional[DismissalRestrictions] = None
    if reviews.dismissal_restrictions is not None:
        dismissal = DismissalRestrictions(
            users=list(reviews.dismissal_restrictions.users),
            teams=list(reviews.dismissal_restrictions.teams),
        )

    return PullRequestReviews(
        dismiss_stale_reviews=reviews.dismiss_stale_reviews,
        require_code_owner_reviews=reviews.require_code_owner_reviews,
        required_approving_review_count=max(
            reviews.required_approving_review_count, MIN_APPROVING_REVIEW_COUNT
        ),
        dismissal_restrictions=dismissal,
    )


def _translate_restrictions(
    restrictions: Optional[BranchRestrictions],
) -> Optional[BranchRestrictions]:
    if restrictions is None:
        return None
    return BranchRestrictions(
        users=list(restrictions.users),
        teams=list(restrictions.teams),
        apps=list(restrictions.apps),
    )


def build_protection_request(protection: BranchProtection) -> ProtectionRequest:
    """Translate a ruleset read from one branch into a write request.

    Rules missing on the source stay ``None`` on the request.
    """
    return ProtectionRequest(
        required_status_checks=_translate_status_checks(
            protection.required_status_checks
        ),
        required_pull_request_reviews=_translate_reviews(
            protection.required_pull_request_reviews
        ),
        enforce_admins=protection.enforce_admins,
        restrictions=_translate_restrictions(protection.restrictions),
        required_linear_history=protection.required_linear_history,
        allow_force_pushes=protection.allow_force_pushes,
        allow_deletions=protection.allow_deletions,
    )


def copy_branch_protection(
    forge: Forge, owner: str, repo: str, base: str, target: str, logger: Logger
) -> bool:
    """Apply the protection of ``base`` to ``target``.

    Returns False when ``base`` is not protected, True once the rules have
    been written. Errors from either call propagate unchanged.
    """
    logger.info("Getting branch protection for branch", branch=base)
    try:
        protection = forge.repos.get_branch_protection(owner, repo, base)
    except NotFoundError:
        logger.info(
            "Exiting -- The old base branch isn't protected, so there's nothing more to do",
            branch=base,
        )
        return False

    logger.info("Creating the branch protection request for branch", branch=target)
    request = build_protection_request(protection)

    logger.info("Updating the branch protection on branch", branch=target)
    forge.repos.update_branch_protection(owner, repo, target, request)
    return True
