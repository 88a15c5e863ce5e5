"""Adapter package for external commands, console and filesystem access."""

from .app_console import ShopwareConsole
from .command_runner import COMMAND_NOT_FOUND_RETURNCODE, SubprocessCommandRunner
from .filesystem import fs_touch, fs_write_text_atomic
from .interfaces import ApplicationConsolePort, CommandResult, CommandRunnerPort, ProcessTablePort
from .process_table import PgrepProcessTable

__all__ = [
    "COMMAND_NOT_FOUND_RETURNCODE",
    "ApplicationConsolePort",
    "CommandResult",
    "CommandRunnerPort",
    "PgrepProcessTable",
    "ProcessTablePort",
    "ShopwareConsole",
    "SubprocessCommandRunner",
    "fs_touch",
    "fs_write_text_atomic",
]
