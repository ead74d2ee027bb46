#!/usr/bin/env python3
"""Commands that rewrite references to the old branch name in repo files."""

from __future__ import annotations

import os
from typing import Callable, Iterable, Iterator, Optional

from base_command import BaseCommand
from config import CI_PATHS, CI_SUFFIXES, TEMP_BRANCH, Config
from errors import InclusifyError, LocalOperationError
from forge import Forge
from git_workspace import GitWorkspace
from logging_utils import Logger
from models import NewPullRequest
from utils import is_excluded, replace_references

WorkspaceFactory = Callable[[Config, Logger], GitWorkspace]

REVIEW_NOTE = (
    "**NOTE**: This PR was generated automatically. "
    "Please take a close look before approving and merging!"
)


def rewrite_file(
    path: str, transform: Callable[[str], str], logger: Logger, display: str = ""
) -> bool:
    """Rewrite ``path`` through ``transform``; return True if it changed.

    Files that are not valid UTF-8 are treated as binary and left alone.
    """
    try:
        with open(path, encoding="utf-8", newline="") as f:
            original = f.read()
    except UnicodeDecodeError:
        logger.debug("Skipping binary file", path=display or path)
        return False
    except OSError as e:
        raise LocalOperationError(f"failed to read {display or path}: {e}") from e

    updated = transform(original)
    if updated == original:
        return False

    try:
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(updated)
    except OSError as e:
        raise LocalOperationError(f"failed to write {display or path}: {e}") from e

    logger.info("Updated the file", path=display or path)
    return True


def _walk_files(root: str, start: str, exclusions: Iterable[str]) -> Iterator[str]:
    """Yield repo-relative paths of regular files under ``start``.

    Exclusion entries are matched as substrings of the repo-relative path.
    """
    exclusions = tuple(exclusions)
    if os.path.isfile(start):
        rel = os.path.relpath(start, root)
        if not os.path.islink(start) and not is_excluded(rel, exclusions):
            yield rel
        return

    for dirpath, dirnames, filenames in os.walk(start):
        rel_dir = os.path.relpath(dirpath, root)
        rel_dir = "" if rel_dir == "." else rel_dir + os.sep
        dirnames[:] = sorted(
            d for d in dirnames if not is_excluded(rel_dir + d + os.sep, exclusions)
        )
        for name in sorted(filenames):
            rel = rel_dir + name
            if is_excluded(rel, exclusions) or os.path.islink(os.path.join(root, rel)):
                continue
            yield rel


def update_references(
    root: str, base: str, target: str, exclusions: Iterable[str], logger: Logger
) -> bool:
    """Replace ``base`` with ``target`` in every non-excluded file under root.

    Lines that look like dependency imports are kept as they are. Returns
    whether any file changed.
    """
    files_changed = False
    for rel in _walk_files(root, root, exclusions):
        changed = rewrite_file(
            os.path.join(root, rel),
            lambda text: replace_references(text, base, target),
            logger,
            display=rel,
        )
        files_changed = files_changed or changed
    return files_changed


def update_ci_references(
    root: str,
    base: str,
    target: str,
    exclusions: Iterable[str],
    logger: Logger,
    paths: Iterable[str] = CI_PATHS,
) -> bool:
    """Replace ``base`` with ``target`` in the YAML files of the CI paths."""
    files_changed = False
    for ci_path in paths:
        start = os.path.join(root, ci_path)
        if not os.path.exists(start):
            continue
        for rel in _walk_files(root, start, exclusions):
            if not rel.endswith(CI_SUFFIXES):
                continue
            logger.info("Checking the file at path", path=rel)
            changed = rewrite_file(
                os.path.join(root, rel),
                lambda text: text.replace(base, target),
                logger,
                display=rel,
            )
            files_changed = files_changed or changed
    return files_changed


class UpdateRefsCommand(BaseCommand):
    """Rewrite base to target across the repo and open a PR with the result."""

    name = "updateRefs"
    synopsis = "Update code references from base to target."
    subject = "references"

    def __init__(
        self,
        cfg: Config,
        forge: Forge,
        logger: Logger,
        temp_branch: str = TEMP_BRANCH,
        workspace_factory: Optional[WorkspaceFactory] = None,
    ) -> None:
        super().__init__(cfg, forge, logger)
        self.temp_branch = temp_branch
        self.workspace_factory = workspace_factory or GitWorkspace

    def rewrite(self, root: str) -> bool:
        return update_references(
            root, self.cfg.base, self.cfg.target, self.cfg.exclusions, self.logger
        )

    def commit_message(self) -> str:
        return f"Update {self.subject} from {self.cfg.base} to {self.cfg.target}"

    def pull_title(self) -> str:
        return f"Update {self.subject.title()} from {self.cfg.base} to {self.cfg.target}"

    def pull_body(self) -> str:
        body = (
            f"This PR was created to update all references from '{self.cfg.base}' "
            f"to '{self.cfg.target}' in this repo."
        )
        if self.cfg.user_exclusions:
            excluded = ", ".join(f"`{e}`" for e in self.cfg.user_exclusions)
            body += f"\n\nThe following paths have been excluded: {excluded}"
        return f"{body}\n\n{REVIEW_NOTE}"

    def open_pull(self) -> None:
        self.logger.info("Setting up PR request")
        new_pull = NewPullRequest(
            title=self.pull_title(),
            head=self.temp_branch,
            base=self.cfg.target,
            body=self.pull_body(),
        )
        self.logger.info(
            "Creating PR to merge changes from branch into target",
            branch=self.temp_branch,
            target=self.cfg.target,
        )
        pull = self.forge.pulls.create(self.cfg.owner, self.cfg.repo, new_pull)
        self.logger.success("Success! Review and merge the open PR", url=pull.html_url)

    def execute(self) -> None:
        cfg = self.cfg
        workspace = self.workspace_factory(cfg, self.logger)
        try:
            root = workspace.clone(self.temp_branch)
            self.logger.info(
                "Retrieved HEAD commit of branch",
                branch=self.temp_branch,
                sha=workspace.head_sha(),
            )

            self.logger.info(
                f"Finding and replacing all {self.subject} from base to target",
                base=cfg.base,
                target=cfg.target,
            )
            if not self.rewrite(root):
                self.logger.info(
                    f"Exiting -- No {self.subject} to {cfg.base} were found, "
                    "so there's nothing more to do",
                    base=cfg.base,
                )
                return

            sha = workspace.commit_all(self.commit_message())
            self.logger.info("Pushing commit to remote", branch=self.temp_branch, sha=sha)
            workspace.push(self.temp_branch)
        finally:
            workspace.cleanup()

        try:
            self.open_pull()
        except InclusifyError:
            # A re-run finds nothing left to rewrite and would not retry this
            self.logger.warn(
                f"changes were pushed to {self.temp_branch} but no PR was opened; "
                f"open a PR from {self.temp_branch} into {cfg.target} by hand",
                branch=self.temp_branch,
                target=cfg.target,
            )
            raise


class UpdateCICommand(UpdateRefsCommand):
    """Like updateRefs, limited to the YAML files of known CI locations."""

    name = "updateCI"
    synopsis = "Update all CI *.y{a}ml references."
    subject = "CI references"

    def rewrite(self, root: str) -> bool:
        return update_ci_references(
            root, self.cfg.base, self.cfg.target, self.cfg.exclusions, self.logger
        )

    def pull_title(self) -> str:
        return f"Update CI References from {self.cfg.base} to {self.cfg.target}"

    def pull_body(self) -> str:
        body = (
            f"This PR was created to update all references from '{self.cfg.base}' "
            f"to '{self.cfg.target}' in every *.y{{a}}ml file in the CI "
            "directories of this repo."
        )
        if self.cfg.user_exclusions:
            excluded = ", ".join(f"`{e}`" for e in self.cfg.user_exclusions)
            body += f"\n\nThe following paths have been excluded: {excluded}"
        return f"{body}\n\n{REVIEW_NOTE}"
