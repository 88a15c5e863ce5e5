"""Per-step failure policy for degradable and fatal lifecycle steps."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Final

from .errors import StepFailedError


class FailureAction(str, Enum):
    """What the lifecycle does when a step fails."""

    ABORT = "abort"
    WARN = "warn"


class LifecycleStep(str, Enum):
    """Identifiers of lifecycle steps that can fail."""

    PHP_ALTERNATIVES = "php_alternatives"
    WEB_SERVER = "web_server"
    OWNERSHIP = "ownership"
    DEPENDENCY_REINSTALL = "dependency_reinstall"
    TLS = "tls"
    XDEBUG = "xdebug"
    PHP_TUNABLES = "php_tunables"
    ENV_FILE = "env_file"
    APP_INSTALL = "app_install"
    ADMIN_CREATE = "admin_create"
    DEMO_DATA = "demo_data"
    INSTALL_MARKER = "install_marker"
    MIGRATIONS = "migrations"
    CACHE_CLEAR = "cache_clear"
    PLUGIN_REFRESH = "plugin_refresh"
    PLUGIN_INSTALL = "plugin_install"
    HOOKS_PRE_INIT = "hooks_pre_init"
    HOOKS_POST_INSTALL = "hooks_post_install"
    HOOKS_POST_HEALTHY = "hooks_post_healthy"


STEP_FAILURE_POLICY: Final[dict[LifecycleStep, FailureAction]] = {
    LifecycleStep.PHP_ALTERNATIVES: FailureAction.WARN,
    LifecycleStep.WEB_SERVER: FailureAction.WARN,
    LifecycleStep.OWNERSHIP: FailureAction.WARN,
    LifecycleStep.DEPENDENCY_REINSTALL: FailureAction.WARN,
    LifecycleStep.TLS: FailureAction.WARN,
    LifecycleStep.XDEBUG: FailureAction.WARN,
    LifecycleStep.PHP_TUNABLES: FailureAction.WARN,
    LifecycleStep.ENV_FILE: FailureAction.WARN,
    LifecycleStep.APP_INSTALL: FailureAction.WARN,
    LifecycleStep.ADMIN_CREATE: FailureAction.WARN,
    LifecycleStep.DEMO_DATA: FailureAction.WARN,
    LifecycleStep.INSTALL_MARKER: FailureAction.WARN,
    LifecycleStep.MIGRATIONS: FailureAction.WARN,
    LifecycleStep.CACHE_CLEAR: FailureAction.WARN,
    LifecycleStep.PLUGIN_REFRESH: FailureAction.WARN,
    LifecycleStep.PLUGIN_INSTALL: FailureAction.WARN,
    LifecycleStep.HOOKS_PRE_INIT: FailureAction.ABORT,
    LifecycleStep.HOOKS_POST_INSTALL: FailureAction.ABORT,
    LifecycleStep.HOOKS_POST_HEALTHY: FailureAction.WARN,
}


def domain_resolve_failure_action(step: LifecycleStep) -> FailureAction:
    """Return the configured failure action for one lifecycle step.

    Args:
        step: Lifecycle step identifier.

    Returns:
        FailureAction: Abort or warn-and-continue.

    Raises:
        KeyError: Raised when the step has no policy entry.
    """

    return STEP_FAILURE_POLICY[step]


def domain_apply_failure_policy(
    step: LifecycleStep,
    message: str,
    logger: logging.Logger,
    error: Exception | None = None,
) -> FailureAction:
    """Apply the failure policy for a failed step.

    Warn steps log `WARNING: <message>` and return. Abort steps raise `error`
    when given, otherwise a `StepFailedError` carrying the message.

    Args:
        step: Failed lifecycle step.
        message: Human-readable failure description.
        logger: Logger receiving the warning line.
        error: Optional exception to raise for abort steps.

    Returns:
        FailureAction: `FailureAction.WARN` when execution may continue.

    Raises:
        StepFailedError: Raised for abort steps without an explicit error.
        Exception: The given `error` for abort steps.
    """

    action = domain_resolve_failure_action(step)
    if action is FailureAction.WARN:
        logger.warning("WARNING: %s", message)
        return action

    if error is not None:
        raise error
    raise StepFailedError(step=step.value, message=message)
