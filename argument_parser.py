#!/usr/bin/env python3
"""Command line argument parsing and configuration building."""

from __future__ import annotations

import argparse
import os
import sys
from typing import Dict, List, Mapping, Optional
from urllib.parse import urlparse

from command_dispatcher import COMMANDS
from config import (ALWAYS_EXCLUDED, DEFAULT_API_URL, DEFAULT_BASE,
                    DEFAULT_TARGET, ENV_PREFIX, VERSION, Config)
from errors import ConfigError
from pull_commands import ClosePullCommand, MergePullCommand
from security import SecurityValidator
from utils import split_exclusions

# Exit codes
EXIT_SUCCESS = 0

REQUIRED_FIELDS = ("owner", "repo", "token")
# Inputs that can also come from INCLUSIFY_<FIELD> environment variables
ENV_FIELDS = (
    "owner",
    "repo",
    "token",
    "base",
    "target",
    "exclusion",
    "api_url",
    "clone_temp_dir",
)
PULL_NUMBER_COMMANDS = (ClosePullCommand.name, MergePullCommand.name)
HELP_COMMAND = "help"


def _create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the top level parser."""
    parser = argparse.ArgumentParser(
        prog="inclusify",
        description="Rename the default branch of a GitHub repository",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Every flag can also be set as an environment variable with the
'{ENV_PREFIX}' prefix, e.g. {ENV_PREFIX}TOKEN. When both are set the
environment variable wins.

Examples:
  %(prog)s createBranches --owner hashicorp --repo inclusify --token $TOKEN
  %(prog)s updateRefs --owner hashicorp --repo inclusify --exclusion scripts/,.teamcity.yml
  %(prog)s updatePulls --owner hashicorp --repo inclusify --base master --target main
  %(prog)s updateDefault --owner hashicorp --repo inclusify
  %(prog)s deleteBranches --owner hashicorp --repo inclusify
        """,
    )
    parser.add_argument(
        "-v", "--version", action="version", version=f"%(prog)s {VERSION}"
    )
    return parser


def _create_common_parser() -> argparse.ArgumentParser:
    """Flags shared by every subcommand."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--owner",
        dest="owner",
        help="The GitHub org that owns the repo, e.g. 'hashicorp'",
    )
    common.add_argument(
        "--repo",
        dest="repo",
        help="The repository name, e.g. 'circle-codesign'",
    )
    common.add_argument(
        "--token",
        dest="token",
        help="Your Personal GitHub Access Token",
    )
    common.add_argument(
        "--base",
        dest="base",
        help=f"The name of the current base branch (default: {DEFAULT_BASE})",
    )
    common.add_argument(
        "--target",
        dest="target",
        help=f"The name of the target branch (default: {DEFAULT_TARGET})",
    )
    common.add_argument(
        "--exclusion",
        dest="exclusion",
        help="Comma separated paths to exclude from reference updates, "
        "e.g. '.circleci/config.yml,.teamcity.yml'",
    )
    common.add_argument(
        "--api-url",
        dest="api_url",
        help=f"Base URL of the GitHub API (default: {DEFAULT_API_URL})",
    )
    common.add_argument(
        "--clone-temp-dir",
        dest="clone_temp_dir",
        help="Parent directory for temporary clones (default: system temp dir)",
    )
    common.add_argument(
        "-v", "--version", action="version", version=f"inclusify {VERSION}"
    )
    return common


def _add_subcommands(
    parser: argparse.ArgumentParser, common: argparse.ArgumentParser
) -> None:
    subparsers = parser.add_subparsers(dest="command", metavar="<command>")
    for name, command_cls in COMMANDS.items():
        sub = subparsers.add_parser(
            name,
            parents=[common],
            help=command_cls.synopsis,
            description=command_cls.synopsis,
        )
        if name in PULL_NUMBER_COMMANDS:
            sub.add_argument(
                "--number",
                dest="pull_number",
                type=int,
                help="Number of the pull request",
            )


def _resolve_inputs(
    args: argparse.Namespace, environ: Mapping[str, str]
) -> Dict[str, Optional[str]]:
    """Merge flags and environment variables, the environment winning."""
    values: Dict[str, Optional[str]] = {}
    for field in ENV_FIELDS:
        env_value = environ.get(f"{ENV_PREFIX}{field.upper()}")
        values[field] = env_value if env_value else getattr(args, field, None)
    return values


def _validate_inputs(values: Dict[str, Optional[str]]) -> None:
    missing = [field for field in REQUIRED_FIELDS if not values[field]]
    if missing:
        raise ConfigError(
            "required inputs are missing (pass in all required flags or set "
            f"environment variables with the '{ENV_PREFIX}' prefix, run "
            f"[subcommand] --help to view required inputs): {', '.join(missing)}"
        )

    try:
        SecurityValidator.validate_owner(values["owner"] or "")
        SecurityValidator.validate_repo_name(values["repo"] or "")
        for field in ("base", "target"):
            if values[field]:
                SecurityValidator.validate_branch_name(values[field] or "")
    except ValueError as e:
        raise ConfigError(f"configuration validation error: {e}") from e

    api_url = values["api_url"]
    if api_url and urlparse(api_url).scheme not in ("http", "https"):
        raise ConfigError(f"configuration validation error: invalid API URL '{api_url}'")


def build_parser() -> argparse.ArgumentParser:
    parser = _create_argument_parser()
    _add_subcommands(parser, _create_common_parser())
    return parser


def parse_arguments(
    argv: Optional[List[str]] = None, environ: Optional[Mapping[str, str]] = None
) -> Config:
    """Parse command line arguments and return configuration object.

    Help and version requests exit through ``SystemExit(0)`` before any
    validation happens.
    """
    argv = list(sys.argv[1:] if argv is None else argv)
    environ = os.environ if environ is None else environ
    parser = build_parser()

    if not argv or argv[0] == HELP_COMMAND:
        parser.print_help()
        sys.exit(EXIT_SUCCESS)
    if len(argv) == 2 and argv[1] == HELP_COMMAND:
        parser.parse_args([argv[0], "--help"])

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        sys.exit(EXIT_SUCCESS)

    values = _resolve_inputs(args, environ)
    _validate_inputs(values)

    pull_number = getattr(args, "pull_number", None)
    if args.command in PULL_NUMBER_COMMANDS and pull_number is None:
        raise ConfigError(f"{args.command} requires a pull request number (--number)")

    return Config(
        command=args.command,
        owner=values["owner"] or "",
        repo=values["repo"] or "",
        token=values["token"] or "",
        base=values["base"] or DEFAULT_BASE,
        target=values["target"] or DEFAULT_TARGET,
        exclusions=split_exclusions(values["exclusion"], ALWAYS_EXCLUDED),
        api_url=(values["api_url"] or DEFAULT_API_URL).rstrip("/"),
        clone_temp_dir=values["clone_temp_dir"] or None,
        pull_number=pull_number,
    )
