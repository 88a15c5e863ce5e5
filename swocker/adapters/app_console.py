"""Adapter for the application's `bin/console` administrative commands."""

from __future__ import annotations

from pathlib import Path
from typing import Final

from .interfaces import ApplicationConsolePort, CommandResult, CommandRunnerPort


class ShopwareConsole(ApplicationConsolePort):
    """Runs `bin/console` commands in the application root as the service account."""

    _CONSOLE_PATH: Final[str] = "bin/console"

    def __init__(self, command_runner: CommandRunnerPort, app_root: Path, service_user: str):
        """Initialize console adapter.

        Args:
            command_runner: Runner executing the console process.
            app_root: Application root directory.
            service_user: Unprivileged account the console runs as.

        Raises:
            ValueError: Raised when dependencies are invalid.
        """

        if command_runner is None:
            raise ValueError("command_runner must not be None")
        if not service_user.strip():
            raise ValueError("service_user must not be blank")

        self._command_runner = command_runner
        self._app_root = app_root
        self._service_user = service_user.strip()

    def console_system_install(self) -> CommandResult:
        """Install the application, dropping and recreating a pre-existing schema.

        Returns:
            CommandResult: Console exit status.
        """

        return self._console_run(
            "system:install",
            "--drop-database",
            "--create-database",
            "--basic-setup",
            "--force",
        )

    def console_user_create(
        self,
        username: str,
        password: str,
        email: str,
        first_name: str,
        last_name: str,
    ) -> CommandResult:
        """Create an administrative account.

        Args:
            username: Account user name.
            password: Account password.
            email: Account email.
            first_name: Account first name.
            last_name: Account last name.

        Returns:
            CommandResult: Console exit status. Non-zero when the account exists.
        """

        return self._console_run(
            "user:create",
            "--admin",
            f"--email={email}",
            f"--firstName={first_name}",
            f"--lastName={last_name}",
            f"--password={password}",
            username,
        )

    def console_demo_data(self) -> CommandResult:
        return self._console_run("framework:demodata")

    def console_update_finish(self) -> CommandResult:
        return self._console_run("system:update:finish")

    def console_cache_clear(self) -> CommandResult:
        return self._console_run("cache:clear")

    def console_plugin_refresh(self) -> CommandResult:
        return self._console_run("plugin:refresh")

    def console_plugin_install(self, plugin_name: str) -> CommandResult:
        """Install and activate one plugin.

        Args:
            plugin_name: Plugin technical name.

        Returns:
            CommandResult: Console exit status.

        Raises:
            ValueError: Raised when plugin name is blank.
        """

        normalized_plugin_name = plugin_name.strip()
        if not normalized_plugin_name:
            raise ValueError("plugin_name must not be blank")
        return self._console_run("plugin:install", "--activate", normalized_plugin_name)

    def _console_run(self, *arguments: str) -> CommandResult:
        return self._command_runner.command_run(
            [self._CONSOLE_PATH, *arguments],
            user=self._service_user,
            cwd=self._app_root,
        )
