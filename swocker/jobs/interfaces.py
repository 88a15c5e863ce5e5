"""Typed interfaces for lifecycle orchestration responsibilities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from swocker.domain import InstallationState
from swocker.hooks import HookPhasePolicy, HookRunReport
from swocker.install import InstallationOutcome


@dataclass(frozen=True)
class JobExecutionResult:
    """Result contract for one lifecycle workflow execution.

    Attributes:
        job_name: Job identifier.
        status: Final execution state.
        installation_state: Installation state after the run, when the store phase ran.
    """

    job_name: str
    status: str
    installation_state: InstallationState | None = None


class JobOrchestratorPort(Protocol):
    """Port definition for orchestrating lifecycle workflows."""

    def job_supported_names(self) -> tuple[str, ...]:
        """Return the set of workflow names this orchestrator can execute.

        Returns:
            tuple[str, ...]: Deterministic list of supported job names.
        """

    def job_execute(self, job_name: str) -> JobExecutionResult:
        """Execute one named workflow.

        Args:
            job_name: Workflow name.

        Returns:
            JobExecutionResult: Final execution status payload.

        Raises:
            LifecycleError: Raised when a fatal lifecycle step fails.
        """


class RuntimeConfiguratorPort(Protocol):
    """Port definition for applying the runtime configuration."""

    def runtime_configure(self) -> None:
        """Apply PHP version, web server, TLS and PHP settings."""


class StoreReadinessPort(Protocol):
    """Port definition for blocking until the store is usable."""

    def db_prepare(self) -> int:
        """Wait for readiness and ensure the target schema."""


class InstallationPort(Protocol):
    """Port definition for the installation state machine."""

    def install_run(self) -> InstallationOutcome:
        """Run the installation transition for the current state."""


class HookRunnerPort(Protocol):
    """Port definition for running one hook phase batch."""

    def hooks_run_phase(self, policy: HookPhasePolicy) -> HookRunReport:
        """Run every hook of a phase in order."""
