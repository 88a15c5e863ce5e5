"""Discovery and sequential execution of phase hook batches."""

from __future__ import annotations

import os
from collections.abc import Sequence
from pathlib import Path
from typing import Final

from swocker.adapters import CommandRunnerPort
from swocker.domain import HookFailedError, LifecycleStep, domain_apply_failure_policy
from swocker.logger import get_logger

from .actions import ShellScriptAction
from .interfaces import HookAction, HookFailure, HookPhase, HookPhasePolicy, HookRunReport

logger = get_logger("swocker.hooks")

HOOK_SCRIPT_SUFFIX: Final[str] = ".sh"
HOOK_SPAWN_FAILURE_RETURNCODE: Final[int] = 126


def hooks_build_phase_policies(
    pre_init_dir: Path,
    post_install_dir: Path,
    post_healthy_dir: Path,
    service_user: str,
) -> dict[HookPhase, HookPhasePolicy]:
    """Build the policy of every hook phase.

    Args:
        pre_init_dir: Pre-init hook directory, run as root.
        post_install_dir: Post-install hook directory.
        post_healthy_dir: Post-healthy hook directory.
        service_user: Unprivileged account for post-install and post-healthy hooks.

    Returns:
        dict[HookPhase, HookPhasePolicy]: Policy per phase.
    """

    return {
        HookPhase.PRE_INIT: HookPhasePolicy(
            phase=HookPhase.PRE_INIT,
            directory=pre_init_dir,
            user=None,
            failure_step=LifecycleStep.HOOKS_PRE_INIT,
            description="pre-initialization",
        ),
        HookPhase.POST_INSTALL: HookPhasePolicy(
            phase=HookPhase.POST_INSTALL,
            directory=post_install_dir,
            user=service_user,
            failure_step=LifecycleStep.HOOKS_POST_INSTALL,
            description="Shopware initialization",
        ),
        HookPhase.POST_HEALTHY: HookPhasePolicy(
            phase=HookPhase.POST_HEALTHY,
            directory=post_healthy_dir,
            user=service_user,
            failure_step=LifecycleStep.HOOKS_POST_HEALTHY,
            description="post-healthy initialization",
        ),
    }


def hooks_discover_scripts(directory: Path) -> list[Path]:
    """Return executable `.sh` files of a directory in lexicographic order.

    Args:
        directory: Hook directory, may not exist.

    Returns:
        list[Path]: Sorted hook script paths.
    """

    if not directory.is_dir():
        return []

    return sorted(
        (
            entry
            for entry in directory.iterdir()
            if entry.name.endswith(HOOK_SCRIPT_SUFFIX) and entry.is_file() and os.access(entry, os.X_OK)
        ),
        key=lambda entry: entry.name,
    )


class HookRunner:
    """Runs one phase batch under the phase's identity and failure policy."""

    def __init__(self, command_runner: CommandRunnerPort):
        if command_runner is None:
            raise ValueError("command_runner must not be None")
        self._command_runner = command_runner

    def hooks_discover(self, policy: HookPhasePolicy) -> list[HookAction]:
        return [
            ShellScriptAction(path=script_path, command_runner=self._command_runner)
            for script_path in hooks_discover_scripts(policy.directory)
        ]

    def hooks_run_phase(
        self,
        policy: HookPhasePolicy,
        actions: Sequence[HookAction] | None = None,
    ) -> HookRunReport:
        """Run every hook of a phase in order.

        Args:
            policy: Phase policy.
            actions: Explicit actions, defaults to the scripts discovered in the phase directory.

        Returns:
            HookRunReport: Executed hooks and failures.

        Raises:
            HookFailedError: Raised on the first failing hook of a fatal phase.
        """

        batch = list(actions) if actions is not None else self.hooks_discover(policy)
        if not batch:
            logger.info(policy.empty_message)
            return HookRunReport(phase=policy.phase)

        logger.info(policy.banner)
        executed: list[str] = []
        failures: list[HookFailure] = []
        for action in batch:
            logger.info("Running %s...", action.name)
            returncode = self._hooks_execute(action, policy.user)
            executed.append(action.name)
            if returncode == 0:
                logger.info("✓ %s completed", action.name)
                continue

            failures.append(HookFailure(name=action.name, returncode=returncode))
            if policy.fatal:
                logger.error("✗ %s failed with exit code %d", action.name, returncode)
                domain_apply_failure_policy(
                    policy.failure_step,
                    f"{policy.phase.value} hook {action.name} failed",
                    logger,
                    error=HookFailedError(phase=policy.phase.value, script_name=action.name, returncode=returncode),
                )
            logger.warning("⚠ %s failed with exit code %d", action.name, returncode)
            domain_apply_failure_policy(
                policy.failure_step,
                "Post-healthy hook failed, but container continues",
                logger,
            )

        return HookRunReport(phase=policy.phase, executed=tuple(executed), failures=tuple(failures))

    def _hooks_execute(self, action: HookAction, user: str | None) -> int:
        try:
            return action.hook_execute(user)
        except OSError as error:
            logger.error("ERROR: Could not execute %s: %s", action.name, error)
            return HOOK_SPAWN_FAILURE_RETURNCODE
