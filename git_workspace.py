#!/usr/bin/env python3
"""Local git working copy used to rewrite and push references."""

from __future__ import annotations

import os
import shutil
import subprocess
import tempfile
from typing import Dict, List, Optional
from urllib.parse import urlparse

from config import CLONE_TIMEOUT_S, COMMIT_AUTHOR_NAME, PUSH_TIMEOUT_S, Config
from errors import LocalOperationError
from logging_utils import Logger
from models import branch_ref
from security import SecurityValidator

# Any non-empty username works, GitHub only checks the token
GIT_USERNAME = "x-access-token"


def git_base_url(api_url: str) -> str:
    """Return base URL for Git operations derived from API endpoint."""
    parsed = urlparse(api_url)
    if parsed.netloc == "api.github.com":
        return "https://github.com"

    base_path = parsed.path.rstrip("/")
    if base_path.endswith("/api/v3"):
        base_path = base_path[: -len("/api/v3")]
    base = f"{parsed.scheme}://{parsed.netloc}"
    if base_path:
        base += base_path
    return base


def git_remote_url(api_url: str, owner: str, repo: str) -> str:
    return f"{git_base_url(api_url)}/{owner}/{repo}.git"


class GitWorkspace:
    """Shallow clone of a single branch in a private temporary directory.

    Lifecycle: ``clone`` -> mutate files -> ``commit_all`` -> ``push`` ->
    ``cleanup``.
    """

    def __init__(self, cfg: Config, logger: Logger) -> None:
        self.cfg = cfg
        self.logger = logger
        self.path: Optional[str] = None

    def _create_askpass_script(self) -> str:
        """Create a temporary askpass script for secure credential injection."""
        fd, path = tempfile.mkstemp(prefix="inclusify_askpass_", text=True)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as script:
                script.write("#!/bin/sh\n")
                script.write("case \"$1\" in\n")
                script.write(f"  *Username*) echo '{GIT_USERNAME}' ;;\n")
                script.write(f"  *Password*) echo '{self.cfg.token}' ;;\n")
                script.write("  *) exit 1 ;;\n")
                script.write("esac\n")
            os.chmod(path, 0o700)
        except OSError:
            os.unlink(path)
            raise
        return path

    def _cleanup_askpass_script(self, path: Optional[str]) -> None:
        """Remove temporary askpass script if it exists."""
        if not path:
            return
        try:
            if os.path.exists(path):
                os.remove(path)
        except OSError as error:
            self.logger.warn(f"failed to clean up temporary credential helper: {error}")

    def _create_secure_temp_dir(self) -> str:
        """Create an owner-only temporary directory for the clone."""
        parent = self.cfg.clone_temp_dir
        if parent:
            os.makedirs(parent, mode=0o700, exist_ok=True)
        clone_dir = tempfile.mkdtemp(prefix=f"tmp-clone-{self.cfg.repo}-", dir=parent)
        os.chmod(clone_dir, 0o700)
        self.logger.info("Creating local temp dir", dir=clone_dir)
        return clone_dir

    def _git(
        self,
        args: List[str],
        action: str,
        *,
        cwd: Optional[str] = None,
        authenticated: bool = False,
        timeout: int = 60,
    ) -> str:
        """Run a git command and return its stdout."""
        env: Dict[str, str] = os.environ.copy()
        askpass_script: Optional[str] = None
        try:
            if authenticated:
                askpass_script = self._create_askpass_script()
                env.update({"GIT_ASKPASS": askpass_script, "GIT_TERMINAL_PROMPT": "0"})
            result = subprocess.run(
                ["git", *args],
                cwd=cwd if cwd is not None else self.path,
                check=True,
                capture_output=True,
                text=True,
                timeout=timeout,
                env=env,
            )
            return result.stdout.strip()
        except subprocess.TimeoutExpired as e:
            raise LocalOperationError(f"failed to {action}: timed out after {timeout}s") from e
        except subprocess.CalledProcessError as e:
            # Sanitize error output before it reaches the logs
            detail = SecurityValidator.sanitize_for_logging(
                (e.stderr or e.stdout or "").strip()
            )
            raise LocalOperationError(f"failed to {action}: {detail}") from e
        except OSError as e:
            raise LocalOperationError(f"failed to {action}: {e}") from e
        finally:
            self._cleanup_askpass_script(askpass_script)

    def clone(self, branch: str) -> str:
        """Clone ``branch`` of the configured repo and return the directory."""
        try:
            self.path = self._create_secure_temp_dir()
        except OSError as e:
            raise LocalOperationError(f"failed to create tmp directory: {e}") from e

        url = git_remote_url(self.cfg.api_url, self.cfg.owner, self.cfg.repo)
        self._git(
            [
                "clone",
                "--depth", "1",
                "--single-branch",
                "--branch", branch,
                url,
                self.path,
            ],
            f"clone repo {url} {branch_ref(branch)}",
            cwd=os.path.dirname(self.path),
            authenticated=True,
            timeout=CLONE_TIMEOUT_S,
        )
        self.logger.info(
            "Successfully cloned repo into local dir", repo=self.cfg.repo, dir=self.path
        )
        return self.path

    def head_sha(self) -> str:
        return self._git(["rev-parse", "HEAD"], "retrieve HEAD commit")

    def commit_all(self, message: str) -> str:
        """Stage every change and commit it with the synthetic author."""
        self.logger.info("Running `git add -A`", dir=self.path)
        self._git(["add", "-A"], "`git add -A`")

        self.logger.info("Committing changes")
        author = f"{COMMIT_AUTHOR_NAME} <{self.cfg.commit_author_email}>"
        self._git(
            [
                "-c", f"user.name={COMMIT_AUTHOR_NAME}",
                "-c", f"user.email={self.cfg.commit_author_email}",
                "commit",
                "--author", author,
                "-m", message,
            ],
            "commit changes",
        )
        return self.head_sha()

    def push(self, branch: str) -> None:
        self._git(
            ["push", "origin", f"HEAD:{branch_ref(branch)}"],
            "push changes",
            authenticated=True,
            timeout=PUSH_TIMEOUT_S,
        )

    def cleanup(self) -> None:
        """Remove the working copy; failures are only reported."""
        if not self.path or not os.path.exists(self.path):
            return
        try:
            # git marks pack files read-only
            for root, dirs, files in os.walk(self.path):
                for d in dirs:
                    os.chmod(os.path.join(root, d), 0o700)
                for f in files:
                    file_path = os.path.join(root, f)
                    if not os.path.islink(file_path):
                        os.chmod(file_path, 0o600)
            shutil.rmtree(self.path)
            self.logger.debug("cleaned up temporary directory", dir=self.path)
        except OSError as e:
            self.logger.warn(f"failed to clean up temporary directory {self.path}: {e}")
        finally:
            self.path = None
