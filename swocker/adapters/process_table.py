"""Process liveness lookups backed by `pgrep`."""

from __future__ import annotations

from .interfaces import CommandRunnerPort, ProcessTablePort


class PgrepProcessTable(ProcessTablePort):
    """Process table adapter that shells out to `pgrep`."""

    def __init__(self, command_runner: CommandRunnerPort):
        if command_runner is None:
            raise ValueError("command_runner must not be None")
        self._command_runner = command_runner

    def process_is_running(self, name: str, exact: bool = True) -> bool:
        """Return whether a process with the given name is running.

        Args:
            name: Process name.
            exact: Match the whole process name instead of a substring.

        Returns:
            bool: True when `pgrep` finds at least one process.

        Raises:
            ValueError: Raised when name is blank.
        """

        normalized_name = name.strip()
        if not normalized_name:
            raise ValueError("name must not be blank")

        argv = ["pgrep", "-x", normalized_name] if exact else ["pgrep", normalized_name]
        return self._command_runner.command_run(argv, capture=True).ok
