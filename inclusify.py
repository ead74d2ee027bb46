#!/usr/bin/env python3
"""
inclusify - Rename the default branch of a GitHub repository.

The migration runs as a sequence of subcommands: create the new branches,
rewrite references to the old branch name, retarget open pull requests,
switch the default branch (carrying its protection rules) and finally
delete the old branch. Every subcommand is safe to re-run.

Licensed under the MIT License. See LICENSE file for details.
"""

from __future__ import annotations

import sys
from typing import Callable, List, Mapping, NoReturn, Optional

from argument_parser import parse_arguments
from base_command import EXIT_EXECUTION_ERROR, EXIT_SUCCESS
from command_dispatcher import CommandDispatcher
from errors import InclusifyError
from forge import Forge
from github_forge import GitHubForge
from logging_utils import Logger

ForgeFactory = Callable[..., Forge]


def run(
    argv: Optional[List[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
    forge_factory: Optional[ForgeFactory] = None,
    logger: Optional[Logger] = None,
) -> int:
    """Parse inputs, build the GitHub client and run one subcommand."""
    logger = logger or Logger()
    try:
        cfg = parse_arguments(argv, environ)
    except SystemExit as e:
        # --help/--version exit 0, argparse usage errors are plain failures
        if e.code is None or e.code == EXIT_SUCCESS:
            return EXIT_SUCCESS
        return EXIT_EXECUTION_ERROR
    except InclusifyError as e:
        logger.error(str(e))
        return EXIT_EXECUTION_ERROR

    factory = forge_factory or GitHubForge
    try:
        forge = factory(cfg.token, cfg.api_url, logger=logger)
    except InclusifyError as e:
        logger.error(str(e))
        return EXIT_EXECUTION_ERROR

    return CommandDispatcher(cfg, forge, logger).run()


def main() -> NoReturn:
    sys.exit(run())


if __name__ == "__main__":
    main()
