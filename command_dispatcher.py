#!/usr/bin/env python3
"""Maps subcommand names to commands and runs the selected one."""

from __future__ import annotations

from typing import Dict, Type

from base_command import EXIT_EXECUTION_ERROR, BaseCommand
from branch_commands import (CreateBranchesCommand, DeleteBranchesCommand,
                             UpdateDefaultCommand)
from config import Config
from errors import InclusifyError
from forge import Forge
from logging_utils import Logger
from pull_commands import ClosePullCommand, MergePullCommand, UpdatePullsCommand
from reference_commands import UpdateCICommand, UpdateRefsCommand

COMMANDS: Dict[str, Type[BaseCommand]] = {
    command.name: command
    for command in (
        CreateBranchesCommand,
        UpdateRefsCommand,
        UpdateCICommand,
        UpdatePullsCommand,
        UpdateDefaultCommand,
        DeleteBranchesCommand,
        ClosePullCommand,
        MergePullCommand,
    )
}


class CommandDispatcher:
    def __init__(self, cfg: Config, forge: Forge, logger: Logger) -> None:
        self.cfg = cfg
        self.forge = forge
        self.logger = logger

    def build(self) -> BaseCommand:
        command_cls = COMMANDS.get(self.cfg.command)
        if command_cls is None:
            raise InclusifyError(f"unknown subcommand: {self.cfg.command}")
        return command_cls(self.cfg, self.forge, self.logger)

    def run(self) -> int:
        try:
            command = self.build()
            return command.run()
        except InclusifyError as e:
            self.logger.error(str(e))
            return EXIT_EXECUTION_ERROR
        except Exception as e:
            self.logger.error(f"unexpected error: {e}")
            return EXIT_EXECUTION_ERROR
