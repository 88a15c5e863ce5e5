"""Project-native typed exceptions for lifecycle failures."""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    """Process exit codes surfaced to the container platform."""

    OK = 0
    HOOK_FAILED = 1
    UNSUPPORTED_RUNTIME = 2
    MISSING_RUNTIME = 3
    STORE_UNAVAILABLE = 4
    STORE_AUTHENTICATION = 5
    CONFIGURATION_INVALID = 78


class LifecycleError(Exception):
    """Base exception for fatal startup failures.

    Attributes:
        phase: Lifecycle phase that failed.
        exit_code: Process exit code for this failure.
    """

    exit_code: ExitCode = ExitCode.HOOK_FAILED

    def __init__(self, message: str, phase: str):
        super().__init__(message)
        self.phase = phase


class UnsupportedRuntimeVersionError(LifecycleError, ValueError):
    """Requested PHP version is not in the supported set."""

    exit_code = ExitCode.UNSUPPORTED_RUNTIME

    def __init__(self, requested_version: str, supported_versions: str):
        super().__init__(
            message=(
                f"PHP {requested_version} is not supported. "
                f"Supported PHP versions: {supported_versions}"
            ),
            phase="runtime",
        )
        self.requested_version = requested_version
        self.supported_versions = supported_versions


class MissingRuntimeBinaryError(LifecycleError, FileNotFoundError):
    """Requested PHP version is supported but not installed in the image."""

    exit_code = ExitCode.MISSING_RUNTIME

    def __init__(self, requested_version: str, available_binaries: tuple[str, ...]):
        available_label = ", ".join(available_binaries) if available_binaries else "none found"
        super().__init__(
            message=(
                f"PHP {requested_version} is not installed in this container. "
                f"Available PHP binaries: {available_label}"
            ),
            phase="runtime",
        )
        self.requested_version = requested_version
        self.available_binaries = available_binaries


class StoreConnectionError(ConnectionError):
    """One connectivity attempt against the store failed."""


class StoreUnavailableError(LifecycleError, ConnectionError):
    """Store did not accept connections within the configured retries."""

    exit_code = ExitCode.STORE_UNAVAILABLE

    def __init__(self, message: str, attempts: int):
        super().__init__(message=message, phase="database")
        self.attempts = attempts


class StoreAuthenticationError(LifecycleError, PermissionError):
    """Store rejected the configured credentials."""

    exit_code = ExitCode.STORE_AUTHENTICATION

    def __init__(self, message: str):
        super().__init__(message=message, phase="database")


class HookFailedError(LifecycleError, RuntimeError):
    """A hook in a fatal phase exited non-zero.

    Attributes:
        script_name: Failing hook filename.
        returncode: Exit status reported by the hook.
    """

    exit_code = ExitCode.HOOK_FAILED

    def __init__(self, phase: str, script_name: str, returncode: int):
        super().__init__(
            message=f"{phase} hook {script_name} failed with exit code {returncode}",
            phase=phase,
        )
        self.script_name = script_name
        self.returncode = returncode


class StepFailedError(RuntimeError):
    """A degradable lifecycle step failed.

    Attributes:
        step: Lifecycle step identifier.
    """

    def __init__(self, step: str, message: str):
        super().__init__(message)
        self.step = step
