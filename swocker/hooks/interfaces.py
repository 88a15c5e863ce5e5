"""Typed contracts for lifecycle hook phases and actions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol

from swocker.domain import FailureAction, LifecycleStep, domain_resolve_failure_action


class HookPhase(str, Enum):
    """Lifecycle point at which a batch of hooks runs."""

    PRE_INIT = "pre-init"
    POST_INSTALL = "post-install"
    POST_HEALTHY = "post-healthy"


@dataclass(frozen=True)
class HookPhasePolicy:
    """Binding of one hook phase to its directory, identity and failure semantics.

    Attributes:
        phase: Hook phase.
        directory: Directory scanned for hook scripts.
        user: Identity hooks run as, None for the current identity.
        failure_step: Lifecycle step whose policy decides abort or warn.
        description: Phase wording used in log lines.
    """

    phase: HookPhase
    directory: Path
    user: str | None
    failure_step: LifecycleStep
    description: str

    @property
    def fatal(self) -> bool:
        return domain_resolve_failure_action(self.failure_step) is FailureAction.ABORT

    @property
    def banner(self) -> str:
        return f"Executing {self.description} scripts"

    @property
    def empty_message(self) -> str:
        return f"No {self.description} scripts found, skipping"


class HookAction(Protocol):
    """One executable hook in a phase batch."""

    @property
    def name(self) -> str:
        """Return the hook's display name, used for ordering and log lines."""

    def hook_execute(self, user: str | None) -> int:
        """Run the hook to completion.

        Args:
            user: Identity to run as, None for the current identity.

        Returns:
            int: Exit status, zero on success.
        """


@dataclass(frozen=True)
class HookFailure:
    """Hook that exited non-zero.

    Attributes:
        name: Hook name.
        returncode: Exit status.
    """

    name: str
    returncode: int


@dataclass(frozen=True)
class HookRunReport:
    """Outcome of one phase batch.

    Attributes:
        phase: Hook phase.
        executed: Hook names in execution order.
        failures: Hooks that exited non-zero.
    """

    phase: HookPhase
    executed: tuple[str, ...] = ()
    failures: tuple[HookFailure, ...] = ()

    @property
    def succeeded(self) -> bool:
        return not self.failures
