"""Tests for the subprocess command runner and command-backed adapters."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from types import SimpleNamespace

import pytest

from swocker.adapters import CommandResult, PgrepProcessTable, ShopwareConsole, SubprocessCommandRunner
from swocker.adapters import command_runner as command_runner_module


class _RecordingCommandRunner:
    """Command runner double recording invocations."""

    def __init__(self, returncode: int = 0):
        self.returncode = returncode
        self.calls: list[tuple[tuple[str, ...], str | None, Path | None]] = []

    def command_run(
        self,
        argv: Sequence[str],
        user: str | None = None,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        capture: bool = False,
    ) -> CommandResult:
        """Record one command.

        Args:
            argv: Argument vector.
            user: Requested identity.
            cwd: Requested working directory.
            env: Ignored environment.
            capture: Ignored capture flag.

        Returns:
            CommandResult: Configured exit status.

        Raises:
            RuntimeError: Never raised by this test double.
        """

        _ = (env, capture)
        self.calls.append((tuple(argv), user, cwd))
        return CommandResult(argv=tuple(argv), returncode=self.returncode)


def test_adapters_command_runner_captures_output_and_status() -> None:
    result = SubprocessCommandRunner().command_run(["sh", "-c", "echo ready; exit 3"], capture=True)

    assert result.returncode == 3
    assert result.output == "ready\n"
    assert result.ok is False


def test_adapters_command_runner_missing_binary_returns_127() -> None:
    result = SubprocessCommandRunner().command_run(["swocker-missing-binary-for-test"])

    assert result.returncode == 127


def test_adapters_command_runner_switches_identity_only_as_root(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop privileges only when running as root.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when identity arguments are wrong.
    """

    runner = SubprocessCommandRunner()
    monkeypatch.setattr(
        command_runner_module.pwd,
        "getpwnam",
        lambda name: SimpleNamespace(pw_name=name, pw_uid=33, pw_gid=33, pw_dir="/var/www"),
    )

    monkeypatch.setattr(command_runner_module.os, "geteuid", lambda: 1000)
    assert runner._command_identity_arguments(user="www-data", environment={}) == {}

    monkeypatch.setattr(command_runner_module.os, "geteuid", lambda: 0)
    environment: dict[str, str] = {"HOME": "/root"}
    identity_arguments = runner._command_identity_arguments(user="www-data", environment=environment)

    assert identity_arguments == {"user": 33, "group": 33, "extra_groups": []}
    assert environment == {"HOME": "/var/www", "USER": "www-data"}
    assert runner._command_identity_arguments(user=None, environment={}) == {}


def test_adapters_console_runs_as_service_user_in_app_root(tmp_path: Path) -> None:
    runner = _RecordingCommandRunner()
    console = ShopwareConsole(command_runner=runner, app_root=tmp_path, service_user="www-data")

    console.console_system_install()
    console.console_plugin_install(" SwagPayPal ")

    assert runner.calls[0] == (
        ("bin/console", "system:install", "--drop-database", "--create-database", "--basic-setup", "--force"),
        "www-data",
        tmp_path,
    )
    assert runner.calls[1][0] == ("bin/console", "plugin:install", "--activate", "SwagPayPal")
    with pytest.raises(ValueError):
        console.console_plugin_install("  ")


def test_adapters_process_table_uses_exact_match_by_default() -> None:
    runner = _RecordingCommandRunner(returncode=1)
    process_table = PgrepProcessTable(runner)

    assert process_table.process_is_running("nginx") is False
    process_table.process_is_running("php-fpm", exact=False)

    assert [argv for argv, _, _ in runner.calls] == [("pgrep", "-x", "nginx"), ("pgrep", "php-fpm")]
