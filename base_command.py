#!/usr/bin/env python3
"""Shared lifecycle for inclusify subcommands."""

from __future__ import annotations

from config import Config
from errors import InclusifyError
from forge import Forge
from logging_utils import Logger

# Exit codes
EXIT_SUCCESS = 0
EXIT_EXECUTION_ERROR = 1


class BaseCommand:
    """A subcommand built from the run configuration.

    Subclasses implement ``execute`` and raise ``InclusifyError`` on failure;
    ``run`` turns that into an exit code.
    """

    name = ""
    synopsis = ""

    def __init__(self, cfg: Config, forge: Forge, logger: Logger) -> None:
        self.cfg = cfg
        self.forge = forge
        self.logger = logger

    def execute(self) -> None:
        raise NotImplementedError

    def run(self) -> int:
        try:
            self.execute()
        except InclusifyError as e:
            return self.exit_error(e)
        return EXIT_SUCCESS

    def exit_error(self, error: Exception) -> int:
        self.logger.error(str(error))
        return EXIT_EXECUTION_ERROR
