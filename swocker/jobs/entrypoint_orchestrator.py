"""Container entrypoint lifecycle orchestration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from swocker.domain import LifecycleStep, Variant, domain_apply_failure_policy
from swocker.health import HealthMarker
from swocker.hooks import HookPhase, HookPhasePolicy
from swocker.logger import get_logger

from .interfaces import (
    HookRunnerPort,
    InstallationPort,
    JobExecutionResult,
    JobOrchestratorPort,
    RuntimeConfiguratorPort,
    StoreReadinessPort,
)

logger = get_logger("swocker.jobs")


@dataclass(frozen=True)
class EntrypointOrchestratorConfig:
    """Configuration values for the entrypoint lifecycle.

    Attributes:
        shopware_version: Application release label for the start banner.
        variant: Active image variant.
        requested_php_version: PHP version requested for this start.
        launch_monitor: Whether the post-healthy monitor is started.
    """

    shopware_version: str
    variant: Variant
    requested_php_version: str
    launch_monitor: bool = True


class EntrypointOrchestrator(JobOrchestratorPort):
    """Runs the startup sequence up to the point the main command takes over.

    Order: start banner, clearing of markers left by a previous start,
    runtime configuration, pre-init hooks, store readiness and installation,
    post-install hooks, post-healthy monitor launch, ready marker. Fatal failures raise `LifecycleError` subclasses
    before the ready marker is written.
    """

    _ENTRYPOINT_JOB_NAME = "entrypoint"

    def __init__(
        self,
        config: EntrypointOrchestratorConfig,
        runtime_configurator_factory: Callable[[], RuntimeConfiguratorPort],
        hook_runner: HookRunnerPort,
        hook_policies: dict[HookPhase, HookPhasePolicy],
        installation: InstallationPort,
        ready_marker: HealthMarker,
        readiness_poller: StoreReadinessPort | None = None,
        monitor_launcher: Callable[[], object] | None = None,
        healthy_marker: HealthMarker | None = None,
        completion_marker: HealthMarker | None = None,
    ):
        """Initialize entrypoint orchestrator dependencies.

        Args:
            config: Entrypoint configuration.
            runtime_configurator_factory: Builds the runtime configurator; may raise
                `UnsupportedRuntimeVersionError` after the banner was logged.
            hook_runner: Hook phase runner.
            hook_policies: Policy per hook phase.
            installation: Installation state machine.
            ready_marker: Marker written once startup finished.
            readiness_poller: Store readiness poller, None when no store is configured.
            monitor_launcher: Starts the detached post-healthy monitor.
            healthy_marker: Healthy flag left by a previous start, cleared on entry.
            completion_marker: Post-healthy completion flag left by a previous start, cleared on entry.

        Raises:
            ValueError: Raised when dependencies are invalid.
        """

        if runtime_configurator_factory is None:
            raise ValueError("runtime_configurator_factory must not be None")
        if hook_runner is None:
            raise ValueError("hook_runner must not be None")
        if installation is None:
            raise ValueError("installation must not be None")
        missing_phases = [
            phase.value for phase in (HookPhase.PRE_INIT, HookPhase.POST_INSTALL) if phase not in hook_policies
        ]
        if missing_phases:
            raise ValueError(f"hook_policies missing phases: {', '.join(missing_phases)}")
        if config.launch_monitor and monitor_launcher is None:
            raise ValueError("monitor_launcher must not be None when launch_monitor is set")

        self._config = config
        self._runtime_configurator_factory = runtime_configurator_factory
        self._hook_runner = hook_runner
        self._hook_policies = hook_policies
        self._installation = installation
        self._ready_marker = ready_marker
        self._readiness_poller = readiness_poller
        self._monitor_launcher = monitor_launcher
        self._stale_markers = tuple(
            marker for marker in (ready_marker, healthy_marker, completion_marker) if marker is not None
        )

    def job_supported_names(self) -> tuple[str, ...]:
        return (self._ENTRYPOINT_JOB_NAME,)

    def job_execute(self, job_name: str) -> JobExecutionResult:
        """Run the entrypoint lifecycle.

        Args:
            job_name: Name of job to execute.

        Returns:
            JobExecutionResult: `ready` status and the resulting installation state.

        Raises:
            ValueError: Raised when job name is unsupported.
            LifecycleError: Raised when a fatal step fails.
        """

        normalized_job_name = job_name.strip()
        if normalized_job_name != self._ENTRYPOINT_JOB_NAME:
            raise ValueError(f"unsupported job_name={normalized_job_name}")

        logger.info("Starting Shopware %s...", self._config.shopware_version)
        logger.info("Variant: %s", self._config.variant.value)
        logger.info("Requested PHP version: %s", self._config.requested_php_version)
        for marker in self._stale_markers:
            marker.marker_clear()

        self._runtime_configurator_factory().runtime_configure()
        self._hook_runner.hooks_run_phase(self._hook_policies[HookPhase.PRE_INIT])

        if self._readiness_poller is not None:
            logger.info("Database host configured, checking connectivity...")
            self._readiness_poller.db_prepare()
        outcome = self._installation.install_run()

        self._hook_runner.hooks_run_phase(self._hook_policies[HookPhase.POST_INSTALL])
        self._job_launch_monitor()

        self._ready_marker.marker_set()
        logger.info("Container ready!")
        return JobExecutionResult(
            job_name=normalized_job_name,
            status="ready",
            installation_state=outcome.final_state,
        )

    def _job_launch_monitor(self) -> None:
        if not self._config.launch_monitor or self._monitor_launcher is None:
            logger.info("Post-healthy hook monitor disabled")
            return
        try:
            self._monitor_launcher()
        except OSError as error:
            domain_apply_failure_policy(
                LifecycleStep.HOOKS_POST_HEALTHY,
                f"Post-healthy hook monitor could not be started: {error}",
                logger,
            )
