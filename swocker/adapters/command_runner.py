"""Subprocess-backed command runner with optional identity switching."""

from __future__ import annotations

import os
import pwd
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path

from swocker.logger import get_logger

from .interfaces import CommandResult, CommandRunnerPort

logger = get_logger("swocker.commands")

COMMAND_NOT_FOUND_RETURNCODE = 127


class SubprocessCommandRunner(CommandRunnerPort):
    """Command runner that spawns blocking child processes.

    Identity switching only happens when the orchestrator runs as root and the
    requested user differs from the current one; otherwise the command runs
    under the current identity.
    """

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
            capture: Capture combined output instead of streaming it.

        Returns:
            CommandResult: Exit status and optional output.

        Raises:
            ValueError: Raised when argv is empty.
            OSError: Raised for spawn failures other than a missing binary.
        """

        normalized_argv = tuple(str(argument) for argument in argv)
        if not normalized_argv:
            raise ValueError("argv must not be empty")

        run_environment = dict(os.environ if env is None else env)
        identity_arguments = self._command_identity_arguments(user=user, environment=run_environment)
        logger.debug("Running command: %s", " ".join(normalized_argv))

        try:
            completed = subprocess.run(
                normalized_argv,
                cwd=str(cwd) if cwd is not None else None,
                env=run_environment,
                stdout=subprocess.PIPE if capture else None,
                stderr=subprocess.STDOUT if capture else None,
                text=True,
                check=False,
                **identity_arguments,
            )
        except FileNotFoundError as error:
            logger.debug("Command not found: %s (%s)", normalized_argv[0], error)
            return CommandResult(argv=normalized_argv, returncode=COMMAND_NOT_FOUND_RETURNCODE, output=str(error))

        return CommandResult(
            argv=normalized_argv,
            returncode=completed.returncode,
            output=(completed.stdout or "") if capture else "",
        )

    def _command_identity_arguments(self, user: str | None, environment: dict[str, str]) -> dict[str, object]:
        """Build `subprocess.run` identity arguments for the requested user.

        Args:
            user: Requested identity or None.
            environment: Child environment, updated with HOME/USER when switching.

        Returns:
            dict[str, object]: Keyword arguments for `subprocess.run`.
        """

        if user is None or os.geteuid() != 0:
            return {}

        try:
            account = pwd.getpwnam(user)
        except KeyError:
            logger.warning("WARNING: User %s does not exist, running as root", user)
            return {}

        if account.pw_uid == 0:
            return {}

        environment["HOME"] = account.pw_dir
        environment["USER"] = account.pw_name
        return {"user": account.pw_uid, "group": account.pw_gid, "extra_groups": []}
