#!/usr/bin/env python3
"""Commands acting on open pull requests."""

from __future__ import annotations

from typing import List, Optional

from base_command import BaseCommand
from config import MERGE_METHOD, Config
from errors import ConfigError, ForgeError, MergeRejectedError, NotFoundError
from forge import Forge
from logging_utils import Logger
from models import PullRequest, Reference, branch_ref


class UpdatePullsCommand(BaseCommand):
    """Retarget every open PR from base to target.

    Stops at the first PR GitHub refuses to edit; the PRs after it are
    reported as not processed.
    """

    name = "updatePulls"
    synopsis = "Update the base branch of open PRs."

    def get_open_pulls(self) -> List[PullRequest]:
        self.logger.info("Getting all open PR's targeting the base branch", base=self.cfg.base)
        pulls = self.forge.pulls.list(self.cfg.owner, self.cfg.repo, base=self.cfg.base)
        self.logger.info(
            "Retrieved all open PR's targeting the base branch",
            base=self.cfg.base,
            prCount=len(pulls),
        )
        return pulls

    def get_target_ref(self) -> Reference:
        try:
            return self.forge.git.get_ref(
                self.cfg.owner, self.cfg.repo, branch_ref(self.cfg.target)
            )
        except NotFoundError as e:
            raise NotFoundError(
                f"get {self.cfg.target} ref",
                f"no target ref {branch_ref(self.cfg.target)} was found",
            ) from e

    def update_pulls(self, pulls: List[PullRequest], target_ref: Reference) -> None:
        self.logger.info(
            "Retargeting PR's onto target", target=self.cfg.target, sha=target_ref.sha
        )
        for index, pull in enumerate(pulls):
            try:
                updated = self.forge.pulls.edit(
                    self.cfg.owner, self.cfg.repo, pull.number, base=self.cfg.target
                )
            except ForgeError as e:
                remaining = pulls[index + 1:]
                if remaining:
                    self.logger.warn(
                        f"{len(remaining)} PR(s) were not processed",
                        urls=",".join(p.html_url or p.url for p in remaining),
                    )
                raise ForgeError(
                    f"retarget PR #{pull.number}",
                    f"failed to update base branch of PR {pull.html_url or pull.url}: {e}",
                    status=e.status,
                ) from e
            self.logger.info(
                "Successfully updated base branch of PR from base to target",
                base=self.cfg.base,
                target=self.cfg.target,
                pullNumber=updated.number,
                pullURL=updated.html_url,
            )

    def execute(self) -> None:
        pulls = self.get_open_pulls()
        if not pulls:
            self.logger.info("Exiting -- There are no open PR's to update")
            return

        target_ref = self.get_target_ref()
        self.update_pulls(pulls, target_ref)
        self.logger.success("Success!")


class _PullNumberCommand(BaseCommand):
    def __init__(
        self,
        cfg: Config,
        forge: Forge,
        logger: Logger,
        pull_number: Optional[int] = None,
    ) -> None:
        super().__init__(cfg, forge, logger)
        number = pull_number if pull_number is not None else cfg.pull_number
        if number is None:
            raise ConfigError(f"{self.name} requires a pull request number (--number)")
        self.pull_number = number


class ClosePullCommand(_PullNumberCommand):
    name = "closePull"
    synopsis = "Close an open PR."

    def execute(self) -> None:
        self.forge.pulls.edit(
            self.cfg.owner, self.cfg.repo, self.pull_number, state="closed"
        )
        self.logger.success("Successfully closed PR", number=self.pull_number)


class MergePullCommand(_PullNumberCommand):
    name = "mergePull"
    synopsis = "Squash-merge an open PR."

    commit_message = "Merging inclusify PR"

    def execute(self) -> None:
        result = self.forge.pulls.merge(
            self.cfg.owner,
            self.cfg.repo,
            self.pull_number,
            self.commit_message,
            MERGE_METHOD,
        )
        if not result.merged:
            raise MergeRejectedError(self.pull_number, result.message)
        self.logger.success("Successfully merged PR", number=self.pull_number, sha=result.sha)
