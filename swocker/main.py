"""Main module entrypoint for container lifecycle commands.

This module validates startup configuration, runs the selected lifecycle
command and, for `entrypoint`, replaces itself with the container's main
command.
"""

import argparse
import os
import sys
from collections.abc import Sequence

from swocker.adapters import COMMAND_NOT_FOUND_RETURNCODE
from swocker.bootstrap import (
    bootstrap_create_entrypoint_orchestrator,
    bootstrap_create_health_probe,
    bootstrap_create_post_healthy_monitor,
    bootstrap_create_readiness_poller,
)
from swocker.config import SettingsLoadError, SwockerSettings, config_load_settings
from swocker.domain import ExitCode, LifecycleError
from swocker.logger import get_logger, setup_logging

logger = get_logger("swocker.main")

MAIN_COMMANDS = ("entrypoint", "healthcheck", "post-healthy-monitor", "wait-for-db")
HEALTH_CHECK_LOG_LABEL = "Health Check"
DEFAULT_LOG_LABEL = "Swocker"


def main(argv: Sequence[str] | None = None) -> None:
    """Run selected lifecycle command and exit with its status.

    Args:
        argv: Optional argument vector, defaults to `sys.argv[1:]`.

    Raises:
        SystemExit: Always raised with the command's exit status.
    """

    argument_parser = argparse.ArgumentParser(prog="swocker", description="Swocker container lifecycle entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="entrypoint",
        choices=MAIN_COMMANDS,
        help="Lifecycle command: `entrypoint` runs startup then executes CMD, `healthcheck` runs one probe, "
        "`post-healthy-monitor` waits for health and runs post-healthy hooks, `wait-for-db` waits for the store",
        type=str,
    )
    argument_parser.add_argument(
        "exec_command",
        nargs=argparse.REMAINDER,
        help="Main container command executed after `entrypoint`, optionally after `--`",
    )
    parsed_arguments = argument_parser.parse_args(argv)

    exec_command = list(parsed_arguments.exec_command)
    if exec_command and exec_command[0] == "--":
        exec_command = exec_command[1:]
    raise SystemExit(main_run_command(command=parsed_arguments.command, exec_command=exec_command))


def main_run_command(command: str, exec_command: Sequence[str] = ()) -> int:
    """Run one lifecycle command.

    Args:
        command: Lifecycle command name.
        exec_command: Main container command for `entrypoint`.

    Returns:
        int: Process exit status. Does not return after a successful `exec`.
    """

    log_label = HEALTH_CHECK_LOG_LABEL if command == "healthcheck" else DEFAULT_LOG_LABEL
    try:
        settings = config_load_settings()
    except SettingsLoadError as error:
        setup_logging(label=log_label)
        logger.error("ERROR: %s", error)
        return int(ExitCode.CONFIGURATION_INVALID)

    setup_logging(log_level=settings.log_level, label=log_label)
    try:
        if command == "healthcheck":
            return main_run_healthcheck(settings)
        if command == "post-healthy-monitor":
            bootstrap_create_post_healthy_monitor(settings).monitor_run()
            return int(ExitCode.OK)
        if command == "wait-for-db":
            return main_run_wait_for_db(settings)

        bootstrap_create_entrypoint_orchestrator(settings).job_execute(job_name="entrypoint")
    except SettingsLoadError as error:
        logger.error("ERROR: %s", error)
        return int(ExitCode.CONFIGURATION_INVALID)
    except LifecycleError as error:
        logger.error("ERROR: %s", error)
        logger.error("Startup aborted during %s phase", error.phase)
        return int(error.exit_code)

    return main_exec_command(exec_command)


def main_run_healthcheck(settings: SwockerSettings) -> int:
    report = bootstrap_create_health_probe(settings).probe_run()
    return int(ExitCode.OK) if report.healthy else 1


def main_run_wait_for_db(settings: SwockerSettings) -> int:
    """Wait for the store and ensure the target schema.

    Returns:
        int: Zero when the store is ready or none is configured.

    Raises:
        StoreUnavailableError: Raised after all attempts failed.
        StoreAuthenticationError: Raised when credentials are rejected.
    """

    readiness_poller = bootstrap_create_readiness_poller(settings)
    if readiness_poller is None:
        logger.info("DATABASE_HOST not set, skipping database wait")
        return int(ExitCode.OK)
    readiness_poller.db_prepare()
    return int(ExitCode.OK)


def main_exec_command(exec_command: Sequence[str]) -> int:
    """Replace the current process with the main container command.

    Args:
        exec_command: Command argument vector.

    Returns:
        int: Exit status when there is nothing to execute or `exec` failed.
    """

    if not exec_command:
        logger.info("No command given, exiting")
        return int(ExitCode.OK)

    sys.stdout.flush()
    sys.stderr.flush()
    try:
        os.execvp(exec_command[0], list(exec_command))
    except OSError as error:
        logger.error("ERROR: Could not execute %s: %s", exec_command[0], error)
        return COMMAND_NOT_FOUND_RETURNCODE
    return int(ExitCode.OK)


if __name__ == "__main__":
    main()
