#!/usr/bin/env python3
"""Commands that create, delete and promote branches on GitHub."""

from __future__ import annotations

from typing import List, Optional, Sequence

from base_command import BaseCommand
from config import TEMP_BRANCH, Config
from errors import ForgeError, InclusifyError
from forge import Forge
from logging_utils import Logger
from models import Reference, branch_ref
from protection import copy_branch_protection


class CreateBranchesCommand(BaseCommand):
    """Create each branch of ``branches`` off the head commit of base."""

    name = "createBranches"
    synopsis = "Create new branches on GitHub."

    def __init__(
        self,
        cfg: Config,
        forge: Forge,
        logger: Logger,
        branches: Optional[Sequence[str]] = None,
    ) -> None:
        super().__init__(cfg, forge, logger)
        self.branches: List[str] = list(
            branches if branches is not None else (TEMP_BRANCH, cfg.target)
        )

    def create_branch(self, branch: str) -> Reference:
        # Looked up once per branch so every creation stands on its own
        try:
            base = self.forge.git.get_ref(
                self.cfg.owner, self.cfg.repo, branch_ref(self.cfg.base)
            )
        except ForgeError as e:
            raise ForgeError(
                f"create branch {branch}",
                f"call to get {self.cfg.base} ref returned error: {e}",
                status=e.status,
            ) from e

        return self.forge.git.create_ref(
            self.cfg.owner,
            self.cfg.repo,
            Reference(ref=branch_ref(branch), sha=base.sha),
        )

    def execute(self) -> None:
        for branch in self.branches:
            self.logger.info(f"Creating new branch {branch} off of {self.cfg.base}")
            try:
                created = self.create_branch(branch)
            except InclusifyError:
                self.logger.error("Failed to create branch", branch=branch)
                raise
            self.logger.debug("Created branch", ref=created.ref, sha=created.sha)

        self.logger.success("Success!")


class DeleteBranchesCommand(BaseCommand):
    """Remove protection from, then delete, each branch of ``branches``.

    Both steps are best effort: an unprotected or already deleted branch is
    the state this command converges to.
    """

    name = "deleteBranches"
    synopsis = "Delete the temporary and old base branches."

    def __init__(
        self,
        cfg: Config,
        forge: Forge,
        logger: Logger,
        branches: Optional[Sequence[str]] = None,
    ) -> None:
        super().__init__(cfg, forge, logger)
        self.branches: List[str] = list(
            branches if branches is not None else (TEMP_BRANCH, cfg.base)
        )

    def execute(self) -> None:
        for branch in self.branches:
            self.logger.info("Attempting to remove branch protection from branch", branch=branch)
            try:
                self.forge.repos.remove_branch_protection(
                    self.cfg.owner, self.cfg.repo, branch
                )
            except ForgeError as e:
                self.logger.warn(f"could not remove branch protection: {e}", branch=branch)

            ref = branch_ref(branch)
            self.logger.info("Attempting to delete branch", branch=branch)
            try:
                self.forge.git.delete_ref(self.cfg.owner, self.cfg.repo, ref)
            except ForgeError as e:
                self.logger.warn(f"failed to delete ref: {e}", branch=branch)
                continue

            self.logger.success("Success! branch has been deleted", branch=branch, ref=ref)


class UpdateDefaultCommand(BaseCommand):
    """Make target the default branch and carry over base's protection."""

    name = "updateDefault"
    synopsis = "Update the repo's default branch."

    def execute(self) -> None:
        cfg = self.cfg
        self.logger.info(
            "Updating the default branch", repo=cfg.repo, base=cfg.base, target=cfg.target
        )
        self.forge.repos.edit_default_branch(cfg.owner, cfg.repo, cfg.target)

        self.logger.info(
            "Attempting to apply the base branch protection to target",
            base=cfg.base,
            target=cfg.target,
        )
        try:
            copied = copy_branch_protection(
                self.forge, cfg.owner, cfg.repo, cfg.base, cfg.target, self.logger
            )
        except InclusifyError:
            # The default branch flip above is not rolled back
            self.logger.warn(
                f"default branch is now {cfg.target} but branch protection from "
                f"{cfg.base} was not copied; re-run updateDefault to retry"
            )
            raise

        if copied:
            self.logger.success("Success! branch protection copied", base=cfg.base, target=cfg.target)
        self.logger.success("Success! default branch updated", target=cfg.target)
