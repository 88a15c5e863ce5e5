"""Typed interfaces for adapter-layer responsibilities."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


@dataclass(frozen=True)
class CommandResult:
    """Result contract for one external command invocation.

    Attributes:
        argv: Executed argument vector.
        returncode: Process exit status. `127` when the binary was not found.
        output: Combined stdout/stderr when captured, otherwise empty.
    """

    argv: tuple[str, ...]
    returncode: int
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunnerPort(Protocol):
    """Port definition for running external commands."""

    def command_run(
        self,
        argv: Sequence[str],
        user: str | None = None,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        capture: bool = False,
    ) -> CommandResult:
        """Run one command to completion.

        Args:
            argv: Argument vector.
            user: Optional identity to run as.
            cwd: Optional working directory.
            env: Optional full environment. Defaults to the current environment.
            capture: Capture combined output instead of streaming it to the container log.

        Returns:
            CommandResult: Exit status and optional output.

        Raises:
            OSError: Raised for unexpected spawn failures other than a missing binary.
        """


class ApplicationConsolePort(Protocol):
    """Port definition for the application's administrative console."""

    def console_system_install(self) -> CommandResult:
        """Run the destructive first-time install against the store."""

    def console_user_create(
        self,
        username: str,
        password: str,
        email: str,
        first_name: str,
        last_name: str,
    ) -> CommandResult:
        """Create an administrative account."""

    def console_demo_data(self) -> CommandResult:
        """Seed demo data."""

    def console_update_finish(self) -> CommandResult:
        """Run pending migrations and finalize updates."""

    def console_cache_clear(self) -> CommandResult:
        """Clear application caches."""

    def console_plugin_refresh(self) -> CommandResult:
        """Refresh the plugin registry."""

    def console_plugin_install(self, plugin_name: str) -> CommandResult:
        """Install and activate one plugin."""


class ProcessTablePort(Protocol):
    """Port definition for process liveness lookups."""

    def process_is_running(self, name: str, exact: bool = True) -> bool:
        """Return whether a process with the given name is running.

        Args:
            name: Process name.
            exact: Match the whole process name instead of a substring.

        Returns:
            bool: True when at least one matching process exists.
        """
