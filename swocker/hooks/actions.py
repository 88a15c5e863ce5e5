"""Hook action implementations."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from swocker.adapters import CommandRunnerPort
from swocker.logger import get_logger

from .interfaces import HookAction

logger = get_logger("swocker.hooks")

IN_PROCESS_FAILURE_RETURNCODE = 1


class ShellScriptAction(HookAction):
    """Executable script from a hook directory, run with the inherited environment."""

    def __init__(self, path: Path, command_runner: CommandRunnerPort):
        if command_runner is None:
            raise ValueError("command_runner must not be None")
        self._path = path
        self._command_runner = command_runner

    @property
    def name(self) -> str:
        return self._path.name

    @property
    def path(self) -> Path:
        return self._path

    def hook_execute(self, user: str | None) -> int:
        """Run the script and stream its output to the container log.

        Args:
            user: Identity to run as, None for the current identity.

        Returns:
            int: Script exit status.
        """

        return self._command_runner.command_run([str(self._path)], user=user).returncode


class InProcessAction(HookAction):
    """Python callable registered as a hook.

    The callable returns an exit status or None for success. Exceptions are
    logged and reported as a non-zero status so phase policy still applies.
    """

    def __init__(self, name: str, callback: Callable[[], int | None]):
        if not name.strip():
            raise ValueError("name must not be blank")
        if callback is None:
            raise ValueError("callback must not be None")
        self._name = name.strip()
        self._callback = callback

    @property
    def name(self) -> str:
        return self._name

    def hook_execute(self, user: str | None) -> int:
        if user is not None:
            logger.debug("In-process hook %s runs under the current identity", self._name)
        try:
            returncode = self._callback()
        except Exception:
            logger.exception("In-process hook %s raised", self._name)
            return IN_PROCESS_FAILURE_RETURNCODE
        return 0 if returncode is None else int(returncode)
